"""Fallback chain used when generation is disabled or comes back short.

Tiers, in order:
1. preference-aware discovery (external API filtered by the user's top labels)
2. popular / trending discovery
3. curated static catalog

Every tier swallows its own provider errors, so the chain always completes.
Results of successive tiers are combined until ``limit`` is reached.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import ValidationError

from src.constants import (
    API_TIMEOUT_DEFAULT,
    CURATED_POSITION_STEP,
    CURATED_TIER_BASE,
    CURATED_TIER_FLOOR,
    DISCOVERY_POSITION_STEP,
    POPULAR_TIER_BASE,
    POPULAR_TIER_FLOOR,
    PREFERENCE_TIER_BASE,
    PREFERENCE_TIER_FLOOR,
    PREFERRED_LABELS_LIMIT,
)
from src.models.content import ContentCategory
from src.models.schemas import Candidate, CandidateSource
from src.services.recommendations.catalog import curated_entries
from src.services.recommendations.generative import parse_year
from src.services.recommendations.matching import candidate_key, filter_owned
from src.services.recommendations.store import ContentStore
from src.services.recommendations.taste_profile import label_frequencies, top_labels
from src.utils.logging import LogContext

logger = logging.getLogger(__name__)

CATEGORY_PLURALS = {
    ContentCategory.MOVIE: "movies",
    ContentCategory.TV_SHOW: "TV shows",
    ContentCategory.MUSIC: "songs",
    ContentCategory.RESTAURANT: "restaurants",
}


@dataclass(frozen=True)
class TasteContext:
    """What the chain knows about the requesting user."""

    user_id: int | None = None
    labels: list[str] = field(default_factory=list)


async def taste_context_for(
    store: ContentStore,
    user_id: int,
    category: ContentCategory,
    label_limit: int = PREFERRED_LABELS_LIMIT,
) -> TasteContext:
    """Top labels of the user's rated items in ``category``."""
    items = await store.get_rated_items(user_id, category)
    return TasteContext(user_id=user_id, labels=top_labels(label_frequencies(items), label_limit))


class DiscoveryProvider(Protocol):
    """External content-discovery API for one category."""

    @property
    def is_configured(self) -> bool: ...

    async def search_by_category_label(self, label: str, page: int = 1) -> list[dict[str, Any]]: ...

    async def list_popular(self, page: int = 1) -> list[dict[str, Any]]: ...


class FallbackTier(Protocol):
    name: str

    def is_available(self, category: ContentCategory) -> bool: ...

    async def attempt(
        self, category: ContentCategory, limit: int, context: TasteContext | None
    ) -> list[Candidate]: ...


def ranked_confidence(base: float, floor: float, step: float, position: int) -> float:
    return max(base - step * position, floor)


def candidate_from_discovered(
    raw: dict[str, Any],
    category: ContentCategory,
    confidence: float,
    source: CandidateSource,
    reason: str,
) -> Candidate | None:
    """Build a candidate from a provider / catalog record; None when unusable."""
    fields = {key: value for key, value in raw.items() if key in Candidate.model_fields}
    fields.pop("type", None)
    if "year" in fields:
        fields["year"] = parse_year(fields["year"])
    try:
        return Candidate(type=category, confidence=confidence, source=source, reason=reason, **fields)
    except ValidationError as e:
        logger.debug(f"Dropping unusable {category.value} record: {e}")
        return None


class _DiscoveryTier:
    """Shared plumbing for the two API-backed tiers."""

    name = "discovery"

    def __init__(
        self,
        providers: dict[ContentCategory, DiscoveryProvider],
        timeout: float = API_TIMEOUT_DEFAULT,
    ):
        self.providers = providers
        self.timeout = timeout

    def is_available(self, category: ContentCategory) -> bool:
        provider = self.providers.get(category)
        return provider is not None and provider.is_configured

    async def _call(self, log: LogContext, coro) -> list[dict[str, Any]]:
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError:
            log.warning(f"Discovery call timed out after {self.timeout:.1f}s")
        except Exception as e:
            log.warning(f"Discovery call failed: {type(e).__name__}: {e}")
        return []


class PreferenceDiscoveryTier(_DiscoveryTier):
    """Discovery filtered by the user's favorite labels."""

    name = "preference-discovery"

    async def attempt(
        self, category: ContentCategory, limit: int, context: TasteContext | None
    ) -> list[Candidate]:
        if context is None or not context.labels:
            return []

        log = LogContext(logger, user_id=context.user_id, category=category.value, tier=self.name)
        provider = self.providers[category]
        candidates: list[Candidate] = []
        for label in context.labels:
            if len(candidates) >= limit:
                break
            found = await self._call(log, provider.search_by_category_label(label))
            for raw in found:
                candidate = candidate_from_discovered(
                    raw,
                    category,
                    ranked_confidence(
                        PREFERENCE_TIER_BASE, PREFERENCE_TIER_FLOOR, DISCOVERY_POSITION_STEP, len(candidates)
                    ),
                    CandidateSource.DISCOVERY_API,
                    f"Highly rated {label} pick, matching what you enjoy",
                )
                if candidate:
                    candidates.append(candidate)
        return candidates


class PopularDiscoveryTier(_DiscoveryTier):
    """Generally popular / trending items, not personalized."""

    name = "popular-discovery"

    async def attempt(
        self, category: ContentCategory, limit: int, context: TasteContext | None
    ) -> list[Candidate]:
        user_id = context.user_id if context else None
        log = LogContext(logger, user_id=user_id, category=category.value, tier=self.name)
        found = await self._call(log, self.providers[category].list_popular())

        candidates = []
        for raw in found:
            candidate = candidate_from_discovered(
                raw,
                category,
                ranked_confidence(POPULAR_TIER_BASE, POPULAR_TIER_FLOOR, DISCOVERY_POSITION_STEP, len(candidates)),
                CandidateSource.DISCOVERY_API,
                f"Popular {CATEGORY_PLURALS[category]} right now",
            )
            if candidate:
                candidates.append(candidate)
        return candidates


class CuratedCatalogTier:
    """Embedded list of well-known items; never fails."""

    name = "curated"

    def is_available(self, category: ContentCategory) -> bool:
        return True

    async def attempt(
        self, category: ContentCategory, limit: int, context: TasteContext | None
    ) -> list[Candidate]:
        labels = context.labels if context else []
        candidates = []
        for position, entry in enumerate(curated_entries(category, labels)):
            reason = (
                f"A {entry['label']} classic you may like"
                if entry["is_preferred"]
                else f"A widely loved {entry['label']} pick"
            )
            candidate = candidate_from_discovered(
                entry,
                category,
                ranked_confidence(CURATED_TIER_BASE, CURATED_TIER_FLOOR, CURATED_POSITION_STEP, position),
                CandidateSource.CURATED,
                reason,
            )
            if candidate:
                candidates.append(candidate)
        return candidates


class FallbackChain:
    """Runs tiers in order until ``limit`` distinct, not-owned candidates are collected."""

    def __init__(self, tiers: list[FallbackTier], store: ContentStore | None = None):
        self.tiers = tiers
        self.store = store

    async def recommend(
        self,
        category: ContentCategory,
        limit: int,
        context: TasteContext | None = None,
    ) -> list[Candidate]:
        collected: list[Candidate] = []
        seen: set[tuple[str, str]] = set()
        user_id = context.user_id if context else None

        for tier in self.tiers:
            if len(collected) >= limit:
                break
            log = LogContext(logger, user_id=user_id, category=category.value, tier=tier.name)
            if not tier.is_available(category):
                log.debug("Tier not configured, skipping")
                continue

            try:
                found = await tier.attempt(category, limit, context)
            except Exception:
                log.exception("Tier failed")
                continue

            if user_id is not None and self.store is not None:
                found = await filter_owned(self.store, user_id, found)

            added = 0
            for candidate in found:
                key = candidate_key(candidate)
                if not key[0] or key in seen:
                    continue
                seen.add(key)
                collected.append(candidate)
                added += 1
                if len(collected) >= limit:
                    break
            log.debug(f"Tier added {added} candidates ({len(collected)}/{limit})")

        return collected
