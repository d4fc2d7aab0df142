"""Logged content items (movies, TV shows, music, restaurants)."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base

if TYPE_CHECKING:
    from src.models.user import User


class ContentCategory(str, enum.Enum):
    """Kind of content a user can log."""

    MOVIE = "MOVIE"
    TV_SHOW = "TV_SHOW"
    MUSIC = "MUSIC"
    RESTAURANT = "RESTAURANT"


class ContentItem(Base):
    """One item logged by a user.

    Restaurants store their name in ``title``; the remaining columns are
    filled according to the category.
    """

    __tablename__ = "content_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    category: Mapped[ContentCategory] = mapped_column(Enum(ContentCategory), nullable=False)

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    genre: Mapped[str | None] = mapped_column(String(255), nullable=True)  # comma-joined
    director: Mapped[str | None] = mapped_column(String(255), nullable=True)
    seasons: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Music
    artist: Mapped[str | None] = mapped_column(String(255), nullable=True)
    album: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Restaurants
    cuisine: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    rating: Mapped[float | None] = mapped_column(Float, nullable=True)  # 1-5
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    user: Mapped["User"] = relationship(back_populates="items")

    __table_args__ = (
        Index("ix_content_user_category", "user_id", "category"),
        Index("ix_content_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ContentItem(id={self.id}, category={self.category.value}, title={self.title})>"
