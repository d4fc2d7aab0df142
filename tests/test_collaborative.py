"""Tests for collaborative recommendations."""

import pytest

from src.models.content import ContentCategory
from src.models.schemas import CandidateSource
from src.services.recommendations.collaborative import CollaborativeRecommender
from src.services.recommendations.similarity import SimilarityIndex
from src.services.recommendations.taste_profile import TasteProfileBuilder


async def make_recommender(store, *neighbor_ids: int) -> CollaborativeRecommender:
    builder = TasteProfileBuilder(store)
    for user_id in neighbor_ids:
        await builder.refresh(user_id)
    return CollaborativeRecommender(store, SimilarityIndex(store, builder))


class TestCollaborativeRecommender:
    """Tests for CollaborativeRecommender.recommend."""

    @pytest.mark.asyncio
    async def test_top_rated_items_of_neighbor(self, store):
        store.add(1, ContentCategory.MOVIE, "INCEPTION", genre="Drama")
        store.add(1, ContentCategory.MOVIE, "Se7en", genre="Drama")
        store.add(2, ContentCategory.MOVIE, "Whiplash", genre="Drama", rating=5)
        store.add(2, ContentCategory.MOVIE, "Inception", genre="Drama", rating=4.5)
        store.add(2, ContentCategory.MOVIE, "Heat", genre="Drama", rating=3)
        store.names[2] = "Ayla"
        recommender = await make_recommender(store, 2)

        recs = await recommender.recommend(1, ContentCategory.MOVIE, 5)

        # Top two of the neighbor are Whiplash and Inception; Inception is already logged
        assert [r.title for r in recs] == ["Whiplash"]
        rec = recs[0]
        assert rec.source == CandidateSource.COLLABORATIVE
        assert rec.confidence == pytest.approx(0.8)
        assert rec.reason == "Recommended by Ayla (100% taste match)"
        assert rec.from_user.user_id == 2
        assert rec.from_user.display_name == "Ayla"

    @pytest.mark.asyncio
    async def test_duplicates_keep_highest_confidence(self, store):
        store.add(1, ContentCategory.MOVIE, "Se7en", genre="Drama")
        store.add(2, ContentCategory.MOVIE, "Whiplash", genre="Drama", rating=5)
        store.add(3, ContentCategory.MOVIE, "whiplash", genre="Drama", rating=5)
        store.add(3, ContentCategory.MOVIE, "Superbad", genre="Comedy", rating=4)
        recommender = await make_recommender(store, 2, 3)

        recs = await recommender.recommend(1, ContentCategory.MOVIE, 10)

        assert [r.title for r in recs] == ["Whiplash", "Superbad"]
        assert recs[0].from_user.user_id == 2
        assert recs[0].confidence > recs[1].confidence
        assert recs[1].reason == "Recommended by user 3 (71% taste match)"

    @pytest.mark.asyncio
    async def test_music_ownership_includes_artist(self, store):
        store.add(1, ContentCategory.MUSIC, "Hurt", genre="Rock", artist="Nine Inch Nails")
        store.add(2, ContentCategory.MUSIC, "Hurt", genre="Rock", artist="Johnny Cash", rating=5)
        store.add(2, ContentCategory.MUSIC, "hurt", genre="Rock", artist="nine inch nails", rating=4)
        recommender = await make_recommender(store, 2)

        recs = await recommender.recommend(1, ContentCategory.MUSIC, 5)

        assert [(r.title, r.artist) for r in recs] == [("Hurt", "Johnny Cash")]

    @pytest.mark.asyncio
    async def test_restaurant_candidates_use_name(self, store):
        store.add(1, ContentCategory.RESTAURANT, "Zuma", cuisine="Japanese")
        store.add(2, ContentCategory.RESTAURANT, "Nobu", cuisine="Japanese", location="Istanbul", rating=5)
        recommender = await make_recommender(store, 2)

        recs = await recommender.recommend(1, ContentCategory.RESTAURANT, 5)

        assert recs[0].name == "Nobu"
        assert recs[0].title is None
        assert recs[0].location == "Istanbul"

    @pytest.mark.asyncio
    async def test_no_neighbors(self, store):
        store.add(1, ContentCategory.MOVIE, "Se7en", genre="Drama")
        recommender = await make_recommender(store)

        assert await recommender.recommend(1, ContentCategory.MOVIE, 5) == []

    @pytest.mark.asyncio
    async def test_limit(self, store):
        store.add(1, ContentCategory.MOVIE, "Se7en", genre="Drama")
        for user_id in (2, 3, 4):
            store.add(user_id, ContentCategory.MOVIE, f"Film {user_id}a", genre="Drama", rating=5)
            store.add(user_id, ContentCategory.MOVIE, f"Film {user_id}b", genre="Drama", rating=4)
        recommender = await make_recommender(store, 2, 3, 4)

        recs = await recommender.recommend(1, ContentCategory.MOVIE, 4)

        assert len(recs) == 4
        assert await recommender.recommend(1, ContentCategory.MOVIE, 0) == []
