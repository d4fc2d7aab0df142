"""Explicit classification of loosely-shaped candidate objects.

Generated objects do not always say what they are. Instead of defaulting
ambiguous objects to movies, the classifier reports ``UNKNOWN`` and the
caller drops them.
"""

import enum
from typing import Any

from src.models.content import ContentCategory


class CandidateKind(str, enum.Enum):
    """Tagged result of classification."""

    MOVIE = "MOVIE"
    TV_SHOW = "TV_SHOW"
    MUSIC = "MUSIC"
    RESTAURANT = "RESTAURANT"
    UNKNOWN = "UNKNOWN"

    @property
    def category(self) -> ContentCategory | None:
        if self is CandidateKind.UNKNOWN:
            return None
        return ContentCategory(self.value)


# Values seen in explicit "type" / "category" fields
_EXPLICIT_TAGS = {
    "movie": CandidateKind.MOVIE,
    "film": CandidateKind.MOVIE,
    "tv_show": CandidateKind.TV_SHOW,
    "tv show": CandidateKind.TV_SHOW,
    "tv": CandidateKind.TV_SHOW,
    "series": CandidateKind.TV_SHOW,
    "show": CandidateKind.TV_SHOW,
    "music": CandidateKind.MUSIC,
    "song": CandidateKind.MUSIC,
    "track": CandidateKind.MUSIC,
    "album": CandidateKind.MUSIC,
    "restaurant": CandidateKind.RESTAURANT,
    "cafe": CandidateKind.RESTAURANT,
    "bar": CandidateKind.RESTAURANT,
    "restaurant/cafe/bar": CandidateKind.RESTAURANT,
}

_TAG_FIELDS = ("type", "category", "media_type", "kind")


def _explicit_kind(raw: dict[str, Any]) -> CandidateKind | None:
    for field in _TAG_FIELDS:
        value = raw.get(field)
        if isinstance(value, str):
            kind = _EXPLICIT_TAGS.get(value.strip().lower())
            if kind is not None:
                return kind
    return None


def _kind_from_shape(raw: dict[str, Any]) -> CandidateKind | None:
    if raw.get("artist"):
        return CandidateKind.MUSIC
    if raw.get("cuisine") or (raw.get("name") and not raw.get("title")):
        return CandidateKind.RESTAURANT
    if raw.get("seasons") is not None:
        return CandidateKind.TV_SHOW
    if raw.get("director"):
        return CandidateKind.MOVIE
    return None


def classify_candidate(raw: dict[str, Any], expected: ContentCategory | None = None) -> CandidateKind:
    """Classify a raw candidate object.

    An explicit type tag wins, then unambiguous fields (artist, cuisine,
    seasons, director). A bare title is only accepted as a movie or TV show
    when the caller asked for one of those; otherwise the result is UNKNOWN.
    """
    if not (raw.get("title") or raw.get("name")):
        return CandidateKind.UNKNOWN

    kind = _explicit_kind(raw) or _kind_from_shape(raw)
    if kind is not None:
        return kind

    if raw.get("title") and expected in (ContentCategory.MOVIE, ContentCategory.TV_SHOW):
        return CandidateKind(expected.value)
    return CandidateKind.UNKNOWN
