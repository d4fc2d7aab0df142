"""User model."""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.content import ContentItem
    from src.models.taste_profile import TasteProfileRecord


class User(Base, TimestampMixin):
    """Account that owns logged content and a taste profile."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Relationships
    items: Mapped[list["ContentItem"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    taste_profile: Mapped["TasteProfileRecord | None"] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )

    @property
    def display_name(self) -> str:
        """Name shown to other users."""
        return self.name or self.username

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
