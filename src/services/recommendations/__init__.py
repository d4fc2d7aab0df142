"""Recommendation & taste-similarity engine."""

from src.services.recommendations.store import ContentStore, RatedItem

__all__ = ["ContentStore", "RatedItem"]
