"""SQLAlchemy models."""

from src.models.base import Base
from src.models.content import ContentCategory, ContentItem
from src.models.taste_profile import TasteProfileRecord
from src.models.user import User

__all__ = [
    "Base",
    "User",
    "ContentItem",
    "ContentCategory",
    "TasteProfileRecord",
]
