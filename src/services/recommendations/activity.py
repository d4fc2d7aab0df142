"""What similar users have been logging lately."""

import logging
from collections import Counter
from datetime import datetime, timedelta

from src.constants import (
    ACTIVITY_DEFAULT_DAYS,
    ACTIVITY_FEED_MAX_ITEMS,
    ACTIVITY_FEED_MIN_SIMILARITY,
    ACTIVITY_FEED_NEIGHBORS,
    ACTIVITY_ITEMS_PER_CATEGORY,
    WEEKLY_SUMMARY_MIN_SIMILARITY,
    WEEKLY_SUMMARY_NEIGHBORS,
)
from src.models.content import ContentCategory
from src.models.schemas import (
    ActivityEntry,
    MostPopular,
    SimilarUser,
    SimilarUsersActivity,
    WeeklySummary,
)
from src.services.recommendations.matching import identity_key
from src.services.recommendations.similarity import SimilarityIndex
from src.services.recommendations.store import ContentStore, RatedItem

logger = logging.getLogger(__name__)

# Restaurants are counted but never reported as the most popular title
POPULAR_TITLE_CATEGORIES = (ContentCategory.MOVIE, ContentCategory.TV_SHOW, ContentCategory.MUSIC)


def popular_title(item: RatedItem) -> str:
    if item.category == ContentCategory.MUSIC and item.artist:
        return f"{item.artist} - {item.title}"
    return item.title


def most_popular(items: list[RatedItem]) -> MostPopular | None:
    """Most frequently logged title; earlier categories win ties."""
    best: MostPopular | None = None
    for category in POPULAR_TITLE_CATEGORIES:
        counts: Counter[tuple[str, str]] = Counter()
        titles: dict[tuple[str, str], str] = {}
        for item in items:
            if item.category != category:
                continue
            key = identity_key(category, item.title, item.artist)
            counts[key] += 1
            titles.setdefault(key, popular_title(item))

        if not counts:
            continue
        key, count = counts.most_common(1)[0]
        if best is None or count > best.count:
            best = MostPopular(type=category, title=titles[key], count=count)
    return best


class ActivityFeed:
    """Activity of neighbors in taste space."""

    def __init__(self, store: ContentStore, index: SimilarityIndex):
        self.store = store
        self.index = index

    async def _neighbors(self, user_id: int, min_similarity: float, limit: int) -> list[SimilarUser]:
        neighbors = await self.index.find_neighbors(user_id, min_similarity, limit)
        if not neighbors:
            return []
        names = await self.store.get_display_names([n.user_id for n in neighbors])
        return [n.model_copy(update={"display_name": names.get(n.user_id)}) for n in neighbors]

    async def similar_users_activity(
        self,
        user_id: int,
        days: int = ACTIVITY_DEFAULT_DAYS,
    ) -> SimilarUsersActivity:
        """Recent items of users above the feed threshold, newest first.

        Users who have never been analyzed get an empty feed.
        """
        if await self.store.load_taste_profile(user_id) is None:
            logger.debug(f"User {user_id} has no taste profile, empty activity feed")
            return SimilarUsersActivity()

        neighbors = await self._neighbors(user_id, ACTIVITY_FEED_MIN_SIMILARITY, ACTIVITY_FEED_NEIGHBORS)
        if not neighbors:
            return SimilarUsersActivity()

        by_id = {n.user_id: n for n in neighbors}
        since = datetime.utcnow() - timedelta(days=days)
        items = await self.store.get_recent_items(list(by_id), since, ACTIVITY_ITEMS_PER_CATEGORY)

        activities = [
            ActivityEntry(
                user_id=item.user_id,
                display_name=by_id[item.user_id].display_name,
                type=item.category,
                title=item.title,
                artist=item.artist,
                genre=item.genre,
                cuisine=item.cuisine,
                rating=item.rating,
                created_at=item.created_at,
                similarity=by_id[item.user_id].similarity,
            )
            for item in items
            if item.user_id in by_id
        ]
        activities.sort(key=lambda a: a.created_at, reverse=True)

        logger.info(f"Activity feed for user {user_id}: {len(activities)} items from {len(neighbors)} users")
        return SimilarUsersActivity(activities=activities[:ACTIVITY_FEED_MAX_ITEMS], similar_users=neighbors)

    async def weekly_summary(self, user_id: int) -> WeeklySummary | None:
        """Last week's activity of the closest neighbors; None when nobody is close enough."""
        if await self.store.load_taste_profile(user_id) is None:
            return None

        neighbors = await self._neighbors(user_id, WEEKLY_SUMMARY_MIN_SIMILARITY, WEEKLY_SUMMARY_NEIGHBORS)
        if not neighbors:
            return None

        since = datetime.utcnow() - timedelta(days=ACTIVITY_DEFAULT_DAYS)
        items = await self.store.get_recent_items([n.user_id for n in neighbors], since, None)
        counts = Counter(item.category for item in items)

        return WeeklySummary(
            similar_user_count=len(neighbors),
            total_activities=len(items),
            movie_count=counts[ContentCategory.MOVIE],
            tv_show_count=counts[ContentCategory.TV_SHOW],
            music_count=counts[ContentCategory.MUSIC],
            restaurant_count=counts[ContentCategory.RESTAURANT],
            most_popular=most_popular(items),
            top_users=[n.display_name or f"user {n.user_id}" for n in neighbors],
        )
