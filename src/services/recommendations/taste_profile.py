"""Taste profile builder: label frequencies, personality tags and the taste vector."""

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from src.constants import (
    ACTIVE_ITEMS,
    CUISINE_SLOTS,
    LABEL_ALIASES,
    MOVIE_GENRE_SLOTS,
    MUSIC_GENRE_SLOTS,
    PERSONALITY_RULES,
    VERY_ACTIVE_ITEMS,
)
from src.models.content import ContentCategory
from src.models.schemas import TasteProfile
from src.services.recommendations.store import ContentStore, RatedItem

logger = logging.getLogger(__name__)

# Canonical spelling for every slot label, keyed by its folded form
_CANONICAL_LABELS = {
    label.casefold(): label for label in (*MOVIE_GENRE_SLOTS, *MUSIC_GENRE_SLOTS, *CUISINE_SLOTS)
}


def split_labels(raw: str | None) -> list[str]:
    """Split a comma-joined tag field into canonical labels."""
    if not raw:
        return []
    labels = []
    for part in raw.split(","):
        label = part.strip()
        if not label:
            continue
        folded = label.casefold()
        labels.append(LABEL_ALIASES.get(folded) or _CANONICAL_LABELS.get(folded) or label)
    return labels


def label_frequencies(items: Iterable[RatedItem]) -> dict[str, float]:
    """Share of each label among all label occurrences of ``items``.

    Values sum to 1 when any item carries a label, and the map is empty
    otherwise.
    """
    counts: Counter[str] = Counter()
    for item in items:
        counts.update(split_labels(item.tags))

    total = sum(counts.values())
    if total == 0:
        return {}
    return {label: count / total for label, count in counts.items()}


def top_labels(frequencies: dict[str, float], limit: int) -> list[str]:
    """Most frequent labels first; ties broken alphabetically."""
    ranked = sorted(frequencies.items(), key=lambda x: (-x[1], x[0]))
    return [label for label, _ in ranked[:limit]]


def build_taste_vector(
    movie_genres: dict[str, float],
    music_genres: dict[str, float],
    cuisine_types: dict[str, float],
) -> list[float]:
    """Concatenate slot frequencies in the fixed system-wide order."""
    vector = [float(movie_genres.get(label, 0.0)) for label in MOVIE_GENRE_SLOTS]
    vector += [float(music_genres.get(label, 0.0)) for label in MUSIC_GENRE_SLOTS]
    vector += [float(cuisine_types.get(label, 0.0)) for label in CUISINE_SLOTS]
    return vector


def personality_tags(
    movie_genres: dict[str, float],
    music_genres: dict[str, float],
    cuisine_types: dict[str, float],
    total_items: int,
) -> list[str]:
    """Informational labels derived from thresholded frequencies and activity."""
    domains = {"movie": movie_genres, "music": music_genres, "cuisine": cuisine_types}
    tags = [
        tag
        for domain, label, threshold, tag in PERSONALITY_RULES
        if domains[domain].get(label, 0.0) > threshold
    ]

    if total_items > VERY_ACTIVE_ITEMS:
        tags.append("very-active")
    elif total_items > ACTIVE_ITEMS:
        tags.append("active")
    else:
        tags.append("casual")
    return tags


class TasteProfileBuilder:
    """Recomputes and stores a user's taste profile.

    Cheap enough to run before every recommendation request: four reads and
    one overwrite, no incremental patching.
    """

    def __init__(self, store: ContentStore):
        self.store = store

    async def refresh(self, user_id: int) -> TasteProfile:
        """Rebuild the profile from all rated items and persist it."""
        items: dict[ContentCategory, list[RatedItem]] = {}
        for category in ContentCategory:
            items[category] = await self.store.get_rated_items(user_id, category)

        profile = self.build(user_id, items)
        await self.store.save_taste_profile(profile)

        logger.info(
            f"Refreshed taste profile for user {user_id}: "
            f"{sum(len(v) for v in items.values())} items, tags={profile.personality_tags}"
        )
        return profile

    async def get_or_refresh(self, user_id: int) -> TasteProfile:
        """Stored profile, or a fresh one when the user has none yet."""
        profile = await self.store.load_taste_profile(user_id)
        if profile is None:
            logger.info(f"User {user_id} has no taste profile yet, computing one")
            profile = await self.refresh(user_id)
        return profile

    @staticmethod
    def build(user_id: int, items: dict[ContentCategory, list[RatedItem]]) -> TasteProfile:
        """Pure computation of a profile from items grouped by category."""
        movie_genres = label_frequencies(items.get(ContentCategory.MOVIE, []))
        music_genres = label_frequencies(items.get(ContentCategory.MUSIC, []))
        cuisine_types = label_frequencies(items.get(ContentCategory.RESTAURANT, []))
        total_items = sum(len(v) for v in items.values())

        return TasteProfile(
            user_id=user_id,
            movie_genres=movie_genres,
            music_genres=music_genres,
            cuisine_types=cuisine_types,
            personality_tags=personality_tags(movie_genres, music_genres, cuisine_types, total_items),
            taste_vector=build_taste_vector(movie_genres, music_genres, cuisine_types),
            last_analyzed=datetime.utcnow(),
        )
