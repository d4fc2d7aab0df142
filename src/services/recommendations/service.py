"""Composition root for the recommendation engine.

Every collaborator is passed in explicitly; ``build_recommendation_service``
wires the production ones from settings.
"""

import logging
import random

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import Settings, get_settings
from src.constants import DEFAULT_RECOMMENDATION_LIMIT, SINGLE_SOURCE_LIMIT
from src.db.crud.content import SqlContentStore
from src.models.content import ContentCategory
from src.models.schemas import Candidate, SimilarUser, SimilarUsersActivity, TasteProfile, WeeklySummary
from src.services.generative.gemini import GeminiClient
from src.services.metadata.foursquare import FoursquareDiscovery, FoursquareService
from src.services.metadata.lastfm import LastFMDiscovery, LastFMService
from src.services.metadata.tmdb import TMDBDiscovery, TMDBService
from src.services.recommendations.activity import ActivityFeed
from src.services.recommendations.collaborative import CollaborativeRecommender
from src.services.recommendations.fallback import (
    CuratedCatalogTier,
    FallbackChain,
    PopularDiscoveryTier,
    PreferenceDiscoveryTier,
    taste_context_for,
)
from src.services.recommendations.generative import GenerativeRecommender
from src.services.recommendations.hybrid import HybridMerger
from src.services.recommendations.similarity import SimilarityIndex
from src.services.recommendations.store import ContentStore
from src.services.recommendations.taste_profile import TasteProfileBuilder

logger = logging.getLogger(__name__)


class RecommendationService:
    """Public entry points of the engine."""

    def __init__(
        self,
        store: ContentStore,
        builder: TasteProfileBuilder,
        index: SimilarityIndex,
        generative: GenerativeRecommender,
        fallback: FallbackChain,
        collaborative: CollaborativeRecommender,
        hybrid: HybridMerger,
        activity_feed: ActivityFeed,
    ):
        self.store = store
        self.builder = builder
        self.index = index
        self.generative = generative
        self.fallback = fallback
        self.collaborative = collaborative
        self.hybrid = hybrid
        self.activity_feed = activity_feed

    # Taste
    async def analyze_taste(self, user_id: int) -> TasteProfile:
        return await self.builder.refresh(user_id)

    async def find_similar_users(self, user_id: int, limit: int = 10) -> list[SimilarUser]:
        """Closest users with display names, any positive similarity."""
        neighbors = await self.index.find_neighbors(user_id, 0.0, limit)
        if not neighbors:
            return []
        names = await self.store.get_display_names([n.user_id for n in neighbors])
        return [n.model_copy(update={"display_name": names.get(n.user_id)}) for n in neighbors]

    # Hybrid recommendations
    async def recommend(
        self,
        user_id: int,
        category: ContentCategory,
        limit: int = DEFAULT_RECOMMENDATION_LIMIT,
    ) -> list[Candidate]:
        return await self.hybrid.recommend(user_id, category, limit)

    async def recommend_movies(self, user_id: int, limit: int = DEFAULT_RECOMMENDATION_LIMIT) -> list[Candidate]:
        return await self.recommend(user_id, ContentCategory.MOVIE, limit)

    async def recommend_tv_shows(self, user_id: int, limit: int = DEFAULT_RECOMMENDATION_LIMIT) -> list[Candidate]:
        return await self.recommend(user_id, ContentCategory.TV_SHOW, limit)

    async def recommend_music(self, user_id: int, limit: int = DEFAULT_RECOMMENDATION_LIMIT) -> list[Candidate]:
        return await self.recommend(user_id, ContentCategory.MUSIC, limit)

    async def recommend_restaurants(
        self, user_id: int, limit: int = DEFAULT_RECOMMENDATION_LIMIT
    ) -> list[Candidate]:
        return await self.recommend(user_id, ContentCategory.RESTAURANT, limit)

    async def recommend_all(
        self, user_id: int, limit: int = DEFAULT_RECOMMENDATION_LIMIT
    ) -> dict[ContentCategory, list[Candidate]]:
        return await self.hybrid.recommend_all(user_id, limit)

    # Single-source modes
    async def generative_only(
        self,
        user_id: int,
        category: ContentCategory,
        limit: int = SINGLE_SOURCE_LIMIT,
    ) -> list[Candidate]:
        """Generative picks; the fallback chain answers when generation yields nothing."""
        candidates = await self.generative.recommend(user_id, category, limit)
        if candidates:
            return candidates
        context = await taste_context_for(self.store, user_id, category)
        return await self.fallback.recommend(category, limit, context)

    async def collaborative_only(
        self,
        user_id: int,
        category: ContentCategory,
        limit: int = SINGLE_SOURCE_LIMIT,
    ) -> list[Candidate]:
        await self.builder.refresh(user_id)
        return await self.collaborative.recommend(user_id, category, limit)

    # Activity
    async def activity(self, user_id: int, days: int | None = None) -> SimilarUsersActivity:
        if days is None:
            return await self.activity_feed.similar_users_activity(user_id)
        return await self.activity_feed.similar_users_activity(user_id, days)

    async def weekly_summary(self, user_id: int) -> WeeklySummary | None:
        return await self.activity_feed.weekly_summary(user_id)


def build_recommendation_service(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> RecommendationService:
    """Wire the SQL store, Gemini client and discovery adapters."""
    settings = settings or get_settings()
    if session_maker is None:
        from src.db.database import async_session_maker

        session_maker = async_session_maker

    store = SqlContentStore(session_maker)
    builder = TasteProfileBuilder(store)
    index = SimilarityIndex(store, builder)

    tmdb = TMDBService(api_key=settings.tmdb_api_key)
    providers = {
        ContentCategory.MOVIE: TMDBDiscovery(tmdb, ContentCategory.MOVIE),
        ContentCategory.TV_SHOW: TMDBDiscovery(tmdb, ContentCategory.TV_SHOW),
        ContentCategory.MUSIC: LastFMDiscovery(LastFMService(api_key=settings.lastfm_api_key)),
        ContentCategory.RESTAURANT: FoursquareDiscovery(
            FoursquareService(api_key=settings.foursquare_api_key, near=settings.foursquare_near)
        ),
    }

    generative = GenerativeRecommender(
        store,
        GeminiClient(api_key=settings.gemini_api_key, model_name=settings.gemini_model),
        image_lookup=tmdb,
        rng=rng,
        timeout=settings.generative_timeout,
        image_timeout=settings.discovery_timeout,
    )
    fallback = FallbackChain(
        [
            PreferenceDiscoveryTier(providers, timeout=settings.discovery_timeout),
            PopularDiscoveryTier(providers, timeout=settings.discovery_timeout),
            CuratedCatalogTier(),
        ],
        store=store,
    )
    collaborative = CollaborativeRecommender(store, index)
    hybrid = HybridMerger(store, builder, generative, fallback, collaborative)

    logger.info(
        "Recommendation service ready "
        f"(generative={'on' if generative.is_available else 'off'}, "
        f"discovery={[c.value for c, p in providers.items() if p.is_configured]})"
    )
    return RecommendationService(
        store=store,
        builder=builder,
        index=index,
        generative=generative,
        fallback=fallback,
        collaborative=collaborative,
        hybrid=hybrid,
        activity_feed=ActivityFeed(store, index),
    )
