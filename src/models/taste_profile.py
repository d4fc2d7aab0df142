"""Persisted taste profile (one row per user)."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base

if TYPE_CHECKING:
    from src.models.user import User


class TasteProfileRecord(Base):
    """Frequencies, tags and the 30-dimension taste vector of a user."""

    __tablename__ = "taste_profiles"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True
    )

    movie_genres: Mapped[dict] = mapped_column(JSON, default=dict)
    music_genres: Mapped[dict] = mapped_column(JSON, default=dict)
    cuisine_types: Mapped[dict] = mapped_column(JSON, default=dict)
    personality_tags: Mapped[list] = mapped_column(JSON, default=list)
    taste_vector: Mapped[list] = mapped_column(JSON, default=list)
    last_analyzed: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    user: Mapped["User"] = relationship(back_populates="taste_profile")

    def __repr__(self) -> str:
        return f"<TasteProfileRecord(user_id={self.user_id}, last_analyzed={self.last_analyzed})>"
