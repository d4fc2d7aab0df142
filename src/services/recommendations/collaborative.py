"""Collaborative recommendations: top-rated items of the most similar users."""

import logging

from src.constants import (
    COLLABORATIVE_DAMPING,
    COLLABORATIVE_ITEMS_PER_NEIGHBOR,
    COLLABORATIVE_MIN_SIMILARITY,
    COLLABORATIVE_NEIGHBORS,
)
from src.models.content import ContentCategory
from src.models.schemas import Candidate, CandidateSource, SimilarUser
from src.services.recommendations.matching import candidate_key, filter_owned
from src.services.recommendations.similarity import SimilarityIndex
from src.services.recommendations.store import ContentStore, RatedItem

logger = logging.getLogger(__name__)


def candidate_from_item(
    item: RatedItem,
    confidence: float,
    source: CandidateSource,
    reason: str,
    from_user: SimilarUser | None = None,
) -> Candidate:
    """Wrap a logged item as a candidate of the same category."""
    fields = {
        "type": item.category,
        "confidence": confidence,
        "source": source,
        "reason": reason,
        "from_user": from_user,
    }
    if item.category == ContentCategory.RESTAURANT:
        fields.update(name=item.title, cuisine=item.cuisine, location=item.location)
    else:
        fields.update(title=item.title, year=item.year, genre=item.genre)
        if item.category == ContentCategory.MOVIE:
            fields["director"] = item.director
        elif item.category == ContentCategory.TV_SHOW:
            fields["seasons"] = item.seasons
        elif item.category == ContentCategory.MUSIC:
            fields.update(artist=item.artist, album=item.album)
    return Candidate(**fields)


class CollaborativeRecommender:
    """Suggests what similar users rated highest."""

    def __init__(
        self,
        store: ContentStore,
        index: SimilarityIndex,
        neighbor_limit: int = COLLABORATIVE_NEIGHBORS,
        items_per_neighbor: int = COLLABORATIVE_ITEMS_PER_NEIGHBOR,
        min_similarity: float = COLLABORATIVE_MIN_SIMILARITY,
        damping: float = COLLABORATIVE_DAMPING,
    ):
        self.store = store
        self.index = index
        self.neighbor_limit = neighbor_limit
        self.items_per_neighbor = items_per_neighbor
        self.min_similarity = min_similarity
        self.damping = damping

    async def recommend(self, user_id: int, category: ContentCategory, limit: int) -> list[Candidate]:
        if limit <= 0:
            return []

        neighbors = await self.index.find_neighbors(user_id, self.min_similarity, self.neighbor_limit)
        if not neighbors:
            logger.debug(f"No similar users for user {user_id}, no collaborative {category.value}")
            return []

        names = await self.store.get_display_names([n.user_id for n in neighbors])

        best: dict[tuple[str, str], Candidate] = {}
        for neighbor in neighbors:
            items = await self.store.get_rated_items(neighbor.user_id, category)
            top_items = sorted(items, key=lambda i: i.rating or 0, reverse=True)[: self.items_per_neighbor]

            name = names.get(neighbor.user_id) or f"user {neighbor.user_id}"
            from_user = SimilarUser(
                user_id=neighbor.user_id,
                display_name=names.get(neighbor.user_id),
                similarity=neighbor.similarity,
            )
            confidence = min(max(neighbor.similarity * self.damping, 0.0), 1.0)
            reason = f"Recommended by {name} ({neighbor.match_percent}% taste match)"

            for item in top_items:
                candidate = candidate_from_item(
                    item, confidence, CandidateSource.COLLABORATIVE, reason, from_user
                )
                key = candidate_key(candidate)
                if key not in best or best[key].confidence < candidate.confidence:
                    best[key] = candidate

        candidates = await filter_owned(self.store, user_id, list(best.values()))
        candidates.sort(key=lambda c: c.confidence, reverse=True)
        return candidates[:limit]
