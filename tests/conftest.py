"""Pytest configuration and fixtures."""

import asyncio
import random
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.models import Base
from src.models.content import ContentCategory
from src.models.schemas import TasteProfile
from src.services.recommendations.matching import normalize_text
from src.services.recommendations.store import RatedItem


# Test database URL (uses SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class InMemoryContentStore:
    """ContentStore kept in plain lists and dicts."""

    def __init__(self) -> None:
        self.items: list[RatedItem] = []
        self.profiles: dict[int, TasteProfile] = {}
        self.names: dict[int, str] = {}

    def add(
        self,
        user_id: int,
        category: ContentCategory,
        title: str,
        rating: float | None = 4.0,
        days_ago: float = 0,
        **fields: Any,
    ) -> RatedItem:
        item = RatedItem(
            user_id=user_id,
            category=category,
            title=title,
            rating=rating,
            created_at=datetime.utcnow() - timedelta(days=days_ago),
            **fields,
        )
        self.items.append(item)
        return item

    async def get_rated_items(self, user_id: int, category: ContentCategory) -> list[RatedItem]:
        items = [
            i for i in self.items
            if i.user_id == user_id and i.category == category and i.rating is not None
        ]
        return sorted(items, key=lambda i: i.created_at, reverse=True)

    async def item_exists(
        self,
        user_id: int,
        category: ContentCategory,
        title: str,
        artist: str | None = None,
    ) -> bool:
        for item in self.items:
            if item.user_id != user_id or item.category != category:
                continue
            if normalize_text(item.title) != normalize_text(title):
                continue
            if category == ContentCategory.MUSIC and artist and normalize_text(item.artist) != normalize_text(artist):
                continue
            return True
        return False

    async def save_taste_profile(self, profile: TasteProfile) -> None:
        self.profiles[profile.user_id] = profile

    async def load_taste_profile(self, user_id: int) -> TasteProfile | None:
        return self.profiles.get(user_id)

    async def load_all_taste_profiles(self, excluding_user_id: int) -> list[TasteProfile]:
        return [p for uid, p in self.profiles.items() if uid != excluding_user_id]

    async def get_display_names(self, user_ids: list[int]) -> dict[int, str]:
        return {uid: self.names[uid] for uid in user_ids if uid in self.names}

    async def get_recent_items(
        self,
        user_ids: list[int],
        since: datetime,
        limit_per_category: int | None,
    ) -> list[RatedItem]:
        ids = set(user_ids)
        recent: list[RatedItem] = []
        for category in ContentCategory:
            matching = sorted(
                (i for i in self.items if i.user_id in ids and i.category == category and i.created_at >= since),
                key=lambda i: i.created_at,
                reverse=True,
            )
            recent.extend(matching if limit_per_category is None else matching[:limit_per_category])
        recent.sort(key=lambda i: i.created_at, reverse=True)
        return recent


class FakeGenerativeClient:
    """Returns a canned response and records prompts."""

    def __init__(
        self,
        response: str = "[]",
        configured: bool = True,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.response = response
        self.configured = configured
        self.delay = delay
        self.error = error
        self.prompts: list[str] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


class FakeDiscoveryProvider:
    """Discovery provider with canned results per label."""

    def __init__(
        self,
        by_label: dict[str, list[dict[str, Any]]] | None = None,
        popular: list[dict[str, Any]] | None = None,
        configured: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.by_label = by_label or {}
        self.popular = popular or []
        self.configured = configured
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def search_by_category_label(self, label: str, page: int = 1) -> list[dict[str, Any]]:
        self.calls.append(("label", label))
        if self.error is not None:
            raise self.error
        return list(self.by_label.get(label, []))

    async def list_popular(self, page: int = 1) -> list[dict[str, Any]]:
        self.calls.append(("popular", None))
        if self.error is not None:
            raise self.error
        return list(self.popular)


class FakeImageLookup:
    """Poster lookup that knows a fixed set of titles."""

    def __init__(self, images: dict[str, str] | None = None, error: Exception | None = None) -> None:
        self.images = images or {}
        self.error = error
        self.calls: list[str] = []

    async def find_image_for_title(self, title: str, category: ContentCategory) -> str | None:
        self.calls.append(title)
        if self.error is not None:
            raise self.error
        return self.images.get(title)


@pytest.fixture
def store() -> InMemoryContentStore:
    """Empty in-memory content store."""
    return InMemoryContentStore()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for confidence jitter."""
    return random.Random(1234)


@pytest.fixture
def model_client() -> FakeGenerativeClient:
    """Configured fake model that answers with an empty array."""
    return FakeGenerativeClient()


@pytest.fixture
def image_lookup() -> FakeImageLookup:
    return FakeImageLookup()


@pytest.fixture
def make_provider():
    """Factory for fake discovery providers."""
    return FakeDiscoveryProvider


@pytest.fixture
def make_model_client():
    """Factory for fake model clients."""
    return FakeGenerativeClient


@pytest_asyncio.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session maker bound to a fresh in-memory SQLite database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
