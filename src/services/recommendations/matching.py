"""Identity keys and ownership filtering for candidates."""

import logging

from src.models.content import ContentCategory
from src.models.schemas import Candidate
from src.services.recommendations.store import ContentStore

logger = logging.getLogger(__name__)


def normalize_text(value: str | None) -> str:
    """Case-insensitive, whitespace-trimmed form used for comparisons."""
    return " ".join((value or "").split()).casefold()


def identity_key(category: ContentCategory, title: str | None, artist: str | None = None) -> tuple[str, str]:
    """Normalized identifying key: title, plus artist for music."""
    if category == ContentCategory.MUSIC:
        return normalize_text(title), normalize_text(artist)
    return normalize_text(title), ""


def candidate_key(candidate: Candidate) -> tuple[str, str]:
    return identity_key(candidate.type, candidate.display_title, candidate.artist)


def dedupe_candidates(candidates: list[Candidate]) -> list[Candidate]:
    """Drop later candidates whose identifying key was already seen."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for candidate in candidates:
        key = candidate_key(candidate)
        if not key[0] or key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


async def filter_owned(
    store: ContentStore,
    user_id: int,
    candidates: list[Candidate],
) -> list[Candidate]:
    """Remove candidates the user already logged."""
    kept = []
    for candidate in candidates:
        exists = await store.item_exists(
            user_id,
            candidate.type,
            candidate.display_title,
            candidate.artist if candidate.type == ContentCategory.MUSIC else None,
        )
        if exists:
            logger.debug(f"User {user_id} already has '{candidate.display_title}', skipping")
            continue
        kept.append(candidate)
    return kept
