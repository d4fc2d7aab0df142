"""Contract of the persistence collaborator used by the recommendation core."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from src.models.content import ContentCategory
from src.models.schemas import TasteProfile


@dataclass(frozen=True)
class RatedItem:
    """Read-only view of a logged item.

    ``title`` holds the restaurant name for RESTAURANT items.
    """

    user_id: int
    category: ContentCategory
    title: str
    rating: float | None
    created_at: datetime
    year: int | None = None
    genre: str | None = None
    director: str | None = None
    seasons: int | None = None
    artist: str | None = None
    album: str | None = None
    cuisine: str | None = None
    location: str | None = None

    @property
    def tags(self) -> str | None:
        """Raw multi-value label field for the item's domain."""
        if self.category == ContentCategory.RESTAURANT:
            return self.cuisine
        return self.genre


class ContentStore(Protocol):
    """Persistence and identity operations consumed by the core."""

    async def get_rated_items(self, user_id: int, category: ContentCategory) -> list[RatedItem]:
        """Items of ``category`` the user has rated."""
        ...

    async def item_exists(
        self,
        user_id: int,
        category: ContentCategory,
        title: str,
        artist: str | None = None,
    ) -> bool:
        """Whether the user already logged this item (case-insensitive)."""
        ...

    async def save_taste_profile(self, profile: TasteProfile) -> None:
        ...

    async def load_taste_profile(self, user_id: int) -> TasteProfile | None:
        ...

    async def load_all_taste_profiles(self, excluding_user_id: int) -> list[TasteProfile]:
        ...

    async def get_display_names(self, user_ids: list[int]) -> dict[int, str]:
        ...

    async def get_recent_items(
        self,
        user_ids: list[int],
        since: datetime,
        limit_per_category: int | None,
    ) -> list[RatedItem]:
        """Items logged by ``user_ids`` since ``since``, newest first."""
        ...
