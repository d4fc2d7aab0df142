"""Hybrid merger: generative (or fallback) and collaborative picks in one ranked list."""

import asyncio
import logging
import math

from src.constants import DEFAULT_RECOMMENDATION_LIMIT, GENERATIVE_SHARE
from src.models.content import ContentCategory
from src.models.schemas import Candidate
from src.services.recommendations.collaborative import CollaborativeRecommender
from src.services.recommendations.fallback import FallbackChain, taste_context_for
from src.services.recommendations.generative import GenerativeRecommender
from src.services.recommendations.matching import dedupe_candidates
from src.services.recommendations.store import ContentStore
from src.services.recommendations.taste_profile import TasteProfileBuilder
from src.utils.logging import LogContext

logger = logging.getLogger(__name__)


def split_limit(limit: int, share: float = GENERATIVE_SHARE) -> tuple[int, int]:
    """(primary, collaborative) request sizes, each rounded up."""
    primary = math.ceil(limit * share)
    collaborative = limit - math.floor(limit * share)
    return primary, collaborative


def merge_candidates(batches: list[list[Candidate]], limit: int) -> list[Candidate]:
    """Concatenate, dedupe by identifying key, sort by confidence, truncate.

    On duplicate keys the higher-confidence candidate is kept.
    """
    combined = [c for batch in batches for c in batch]
    combined.sort(key=lambda c: c.confidence, reverse=True)
    return dedupe_candidates(combined)[:limit]


class HybridMerger:
    """Runs the primary and collaborative branches concurrently and merges them."""

    def __init__(
        self,
        store: ContentStore,
        builder: TasteProfileBuilder,
        generative: GenerativeRecommender,
        fallback: FallbackChain,
        collaborative: CollaborativeRecommender,
        generative_share: float = GENERATIVE_SHARE,
    ):
        self.store = store
        self.builder = builder
        self.generative = generative
        self.fallback = fallback
        self.collaborative = collaborative
        self.generative_share = generative_share

    async def recommend(
        self,
        user_id: int,
        category: ContentCategory,
        limit: int = DEFAULT_RECOMMENDATION_LIMIT,
        refresh: bool = True,
    ) -> list[Candidate]:
        """Final ranked candidates for one category; empty when every source is empty."""
        if limit <= 0:
            return []
        if refresh:
            await self.builder.refresh(user_id)

        log = LogContext(logger, user_id=user_id, category=category.value, tier="hybrid")
        primary_limit, collaborative_limit = split_limit(limit, self.generative_share)

        results = await asyncio.gather(
            self.primary(user_id, category, primary_limit),
            self.collaborative.recommend(user_id, category, collaborative_limit),
            return_exceptions=True,
        )

        batches: list[list[Candidate]] = []
        for branch, result in zip(("primary", "collaborative"), results):
            if isinstance(result, BaseException):
                log.bind(branch=branch).error(
                    f"Branch failed: {type(result).__name__}: {result}", exc_info=result
                )
                continue
            batches.append(result)

        merged = merge_candidates(batches, limit)
        if len(merged) < limit:
            merged = await self._top_up(user_id, category, limit, merged, log)
        log.info(
            f"Merged {sum(len(b) for b in batches)} candidates into {len(merged)} "
            f"(primary={primary_limit}, collaborative={collaborative_limit})"
        )
        return merged

    async def _top_up(
        self,
        user_id: int,
        category: ContentCategory,
        limit: int,
        merged: list[Candidate],
        log: LogContext,
    ) -> list[Candidate]:
        """Fill a short list from the fallback chain; merged picks are always kept."""
        log.debug(f"Only {len(merged)}/{limit} after merge, topping up from fallback")
        try:
            context = await taste_context_for(self.store, user_id, category)
            extra = await self.fallback.recommend(category, limit, context)
        except Exception as e:
            log.error(f"Top-up failed: {type(e).__name__}: {e}", exc_info=e)
            return merged
        combined = dedupe_candidates(merged + extra)[:limit]
        combined.sort(key=lambda c: c.confidence, reverse=True)
        return combined

    async def primary(self, user_id: int, category: ContentCategory, limit: int) -> list[Candidate]:
        """Generative picks, topped up from the fallback chain when short or disabled."""
        candidates = await self.generative.recommend(user_id, category, limit)
        if len(candidates) >= limit:
            return candidates

        log = LogContext(logger, user_id=user_id, category=category.value, tier="fallback")
        if self.generative.is_available:
            log.info(f"Generative returned {len(candidates)}/{limit}, topping up from fallback")
        else:
            log.debug("Generation disabled, using fallback chain")

        context = await taste_context_for(self.store, user_id, category)
        extra = await self.fallback.recommend(category, limit, context)
        return dedupe_candidates(candidates + extra)[:limit]

    async def recommend_all(
        self,
        user_id: int,
        limit: int = DEFAULT_RECOMMENDATION_LIMIT,
    ) -> dict[ContentCategory, list[Candidate]]:
        """All four categories concurrently, after a single profile refresh."""
        await self.builder.refresh(user_id)
        categories = list(ContentCategory)
        results = await asyncio.gather(
            *(self.recommend(user_id, category, limit, refresh=False) for category in categories),
            return_exceptions=True,
        )

        merged: dict[ContentCategory, list[Candidate]] = {}
        for category, result in zip(categories, results):
            if isinstance(result, BaseException):
                LogContext(logger, user_id=user_id, category=category.value).error(
                    f"Recommendation failed: {result}", exc_info=result
                )
                merged[category] = []
            else:
                merged[category] = result
        return merged
