"""SQLAlchemy implementation of the ContentStore used by the recommendation core."""

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.models.content import ContentCategory, ContentItem
from src.models.schemas import TasteProfile
from src.models.taste_profile import TasteProfileRecord
from src.models.user import User
from src.services.recommendations.matching import normalize_text
from src.services.recommendations.store import RatedItem

logger = logging.getLogger(__name__)


def to_rated_item(item: ContentItem) -> RatedItem:
    """Convert an ORM row into the read-only view used by the core."""
    return RatedItem(
        user_id=item.user_id,
        category=item.category,
        title=item.title,
        rating=item.rating,
        created_at=item.created_at,
        year=item.year,
        genre=item.genre,
        director=item.director,
        seasons=item.seasons,
        artist=item.artist,
        album=item.album,
        cuisine=item.cuisine,
        location=item.location,
    )


def to_taste_profile(record: TasteProfileRecord) -> TasteProfile:
    return TasteProfile(
        user_id=record.user_id,
        movie_genres=record.movie_genres or {},
        music_genres=record.music_genres or {},
        cuisine_types=record.cuisine_types or {},
        personality_tags=record.personality_tags or [],
        taste_vector=record.taste_vector,
        last_analyzed=record.last_analyzed,
    )


class SqlContentStore:
    """ContentStore backed by SQLAlchemy async sessions.

    Every operation opens its own session, so concurrent recommendation
    branches never share one.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def get_rated_items(self, user_id: int, category: ContentCategory) -> list[RatedItem]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(ContentItem)
                .where(
                    and_(
                        ContentItem.user_id == user_id,
                        ContentItem.category == category,
                        ContentItem.rating.is_not(None),
                    )
                )
                .order_by(ContentItem.created_at.desc())
            )
            return [to_rated_item(item) for item in result.scalars().all()]

    async def item_exists(
        self,
        user_id: int,
        category: ContentCategory,
        title: str,
        artist: str | None = None,
    ) -> bool:
        """Whether the user already logged this item.

        Titles are compared with ``normalize_text`` in Python; SQLite's
        ``lower()`` only folds ASCII characters.
        """
        wanted_title = normalize_text(title)
        wanted_artist = normalize_text(artist) if category == ContentCategory.MUSIC else ""

        async with self.session_maker() as session:
            result = await session.execute(
                select(ContentItem.title, ContentItem.artist).where(
                    and_(ContentItem.user_id == user_id, ContentItem.category == category)
                )
            )
            for logged_title, logged_artist in result.all():
                if normalize_text(logged_title) != wanted_title:
                    continue
                if not wanted_artist or normalize_text(logged_artist) == wanted_artist:
                    return True
            return False

    async def save_taste_profile(self, profile: TasteProfile) -> None:
        async with self.session_maker() as session:
            result = await session.execute(
                select(TasteProfileRecord).where(TasteProfileRecord.user_id == profile.user_id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                record = TasteProfileRecord(user_id=profile.user_id)
                session.add(record)

            record.movie_genres = dict(profile.movie_genres)
            record.music_genres = dict(profile.music_genres)
            record.cuisine_types = dict(profile.cuisine_types)
            record.personality_tags = list(profile.personality_tags)
            record.taste_vector = list(profile.taste_vector)
            record.last_analyzed = profile.last_analyzed
            await session.commit()

    async def load_taste_profile(self, user_id: int) -> TasteProfile | None:
        async with self.session_maker() as session:
            result = await session.execute(
                select(TasteProfileRecord).where(TasteProfileRecord.user_id == user_id)
            )
            record = result.scalar_one_or_none()
            return to_taste_profile(record) if record else None

    async def load_all_taste_profiles(self, excluding_user_id: int) -> list[TasteProfile]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(TasteProfileRecord).where(TasteProfileRecord.user_id != excluding_user_id)
            )
            profiles = []
            for record in result.scalars().all():
                try:
                    profiles.append(to_taste_profile(record))
                except ValueError as e:
                    # Rows written with another vector layout are ignored until refreshed
                    logger.warning(f"Skipping taste profile of user {record.user_id}: {e}")
            return profiles

    async def get_display_names(self, user_ids: Iterable[int]) -> dict[int, str]:
        ids = list(user_ids)
        if not ids:
            return {}
        async with self.session_maker() as session:
            result = await session.execute(select(User).where(User.id.in_(ids)))
            return {user.id: user.display_name for user in result.scalars().all()}

    async def get_recent_items(
        self,
        user_ids: Iterable[int],
        since: datetime,
        limit_per_category: int | None,
    ) -> list[RatedItem]:
        ids = list(user_ids)
        if not ids:
            return []

        items: list[RatedItem] = []
        async with self.session_maker() as session:
            for category in ContentCategory:
                result = await session.execute(
                    select(ContentItem)
                    .where(
                        and_(
                            ContentItem.user_id.in_(ids),
                            ContentItem.category == category,
                            ContentItem.created_at >= since,
                        )
                    )
                    .order_by(ContentItem.created_at.desc())
                    .limit(limit_per_category)
                )
                items.extend(to_rated_item(item) for item in result.scalars().all())

        items.sort(key=lambda i: i.created_at, reverse=True)
        return items
