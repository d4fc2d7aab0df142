"""CRUD operations module."""

from src.db.crud.content import SqlContentStore, to_rated_item, to_taste_profile

__all__ = [
    "SqlContentStore",
    "to_rated_item",
    "to_taste_profile",
]
