"""Cosine similarity between taste vectors and neighbor search."""

import logging
from collections.abc import Sequence

import numpy as np

from src.models.schemas import SimilarUser
from src.services.recommendations.store import ContentStore
from src.services.recommendations.taste_profile import TasteProfileBuilder

logger = logging.getLogger(__name__)


def cosine_similarity(vector1: Sequence[float], vector2: Sequence[float]) -> float:
    """Dot product over the product of norms; 0 when either vector is all zeros."""
    arr1 = np.asarray(vector1, dtype=float)
    arr2 = np.asarray(vector2, dtype=float)
    if arr1.shape != arr2.shape:
        raise ValueError(f"Cannot compare vectors of shape {arr1.shape} and {arr2.shape}")

    norm1 = float(np.linalg.norm(arr1))
    norm2 = float(np.linalg.norm(arr2))
    if norm1 == 0.0 or norm2 == 0.0:
        return 0.0
    return float(np.dot(arr1, arr2) / (norm1 * norm2))


class SimilarityIndex:
    """Ranks other users by taste-vector similarity to a given user."""

    def __init__(self, store: ContentStore, builder: TasteProfileBuilder):
        self.store = store
        self.builder = builder

    async def find_neighbors(
        self,
        user_id: int,
        min_similarity: float = 0.5,
        limit: int = 10,
    ) -> list[SimilarUser]:
        """Users whose similarity is strictly above ``min_similarity``, best first."""
        profile = await self.builder.get_or_refresh(user_id)
        others = await self.store.load_all_taste_profiles(excluding_user_id=user_id)
        if not others:
            return []

        neighbors = []
        for other in others:
            similarity = cosine_similarity(profile.taste_vector, other.taste_vector)
            if similarity > min_similarity:
                neighbors.append(SimilarUser(user_id=other.user_id, similarity=similarity))

        neighbors.sort(key=lambda n: n.similarity, reverse=True)
        logger.debug(
            f"User {user_id}: {len(neighbors)} of {len(others)} profiles above {min_similarity:.2f}"
        )
        return neighbors[:limit]
