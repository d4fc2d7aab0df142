"""Tests for the hybrid merger."""

import json

import pytest

from src.models.content import ContentCategory
from src.models.schemas import Candidate, CandidateSource
from src.services.recommendations.collaborative import CollaborativeRecommender
from src.services.recommendations.fallback import (
    CuratedCatalogTier,
    FallbackChain,
    PopularDiscoveryTier,
    PreferenceDiscoveryTier,
)
from src.services.recommendations.generative import GenerativeRecommender
from src.services.recommendations.hybrid import HybridMerger, merge_candidates, split_limit
from src.services.recommendations.matching import candidate_key
from src.services.recommendations.similarity import SimilarityIndex
from src.services.recommendations.taste_profile import TasteProfileBuilder

MOVIES_RESPONSE = json.dumps([
    {"title": "Arrival", "year": 2016, "director": "Denis Villeneuve", "reason": "Smart sci-fi"},
    {"title": "Memento", "year": 2000, "director": "Christopher Nolan", "reason": "Twisty"},
    {"title": "whiplash", "year": 2014, "director": "Damien Chazelle", "reason": "Intense"},
])


class FailingCollaborative:
    async def recommend(self, user_id, category, limit):
        raise RuntimeError("database went away")


def make_merger(store, client, providers=None, rng=None, collaborative=None, tiers=None) -> HybridMerger:
    builder = TasteProfileBuilder(store)
    index = SimilarityIndex(store, builder)
    providers = providers or {}
    if tiers is None:
        tiers = [PreferenceDiscoveryTier(providers), PopularDiscoveryTier(providers), CuratedCatalogTier()]
    return HybridMerger(
        store,
        builder,
        GenerativeRecommender(store, client, rng=rng),
        FallbackChain(tiers, store=store),
        collaborative or CollaborativeRecommender(store, index),
    )


def assert_well_formed(recs: list[Candidate], limit: int) -> None:
    keys = [candidate_key(r) for r in recs]
    assert len(keys) == len(set(keys))
    assert len(recs) <= limit
    confidences = [r.confidence for r in recs]
    assert confidences == sorted(confidences, reverse=True)


def seed_neighbors(store) -> None:
    store.add(1, ContentCategory.MOVIE, "Inception", genre="Drama", rating=5)
    store.add(2, ContentCategory.MOVIE, "Whiplash", genre="Drama", rating=5)
    store.add(2, ContentCategory.MOVIE, "Inception", genre="Drama", rating=4)
    store.names[2] = "Deniz"


class TestHelpers:
    """Tests for split_limit and merge_candidates."""

    def test_split_limit(self):
        assert split_limit(10) == (7, 3)
        assert split_limit(8) == (6, 3)
        assert split_limit(1) == (1, 1)

    def test_merge_keeps_highest_confidence(self):
        low = Candidate(type=ContentCategory.MOVIE, title="Heat", confidence=0.3, source=CandidateSource.CURATED)
        high = Candidate(type=ContentCategory.MOVIE, title="HEAT", confidence=0.7, source=CandidateSource.GENERATIVE)
        other = Candidate(type=ContentCategory.MOVIE, title="Ran", confidence=0.5, source=CandidateSource.CURATED)

        merged = merge_candidates([[low, other], [high]], 5)

        assert merged == [high, other]
        assert merge_candidates([[low, other], [high]], 1) == [high]


class TestHybridMerger:
    """Tests for HybridMerger.recommend."""

    @pytest.mark.asyncio
    async def test_generative_and_collaborative(self, store, make_model_client, rng):
        seed_neighbors(store)
        await TasteProfileBuilder(store).refresh(2)
        merger = make_merger(store, make_model_client(MOVIES_RESPONSE), rng=rng)

        recs = await merger.recommend(1, ContentCategory.MOVIE, 10)

        assert_well_formed(recs, 10)
        by_title = {r.title.casefold(): r for r in recs}
        assert "inception" not in by_title
        assert by_title["whiplash"].source == CandidateSource.COLLABORATIVE
        assert by_title["whiplash"].confidence == pytest.approx(0.8)
        assert by_title["arrival"].source == CandidateSource.GENERATIVE

    @pytest.mark.asyncio
    async def test_prose_response_falls_through(self, store, make_model_client):
        """Unusable model output degrades to collaborative and fallback results."""
        seed_neighbors(store)
        await TasteProfileBuilder(store).refresh(2)
        merger = make_merger(store, make_model_client("You should watch Arrival!"))

        recs = await merger.recommend(1, ContentCategory.MOVIE, 5)

        assert_well_formed(recs, 5)
        assert len(recs) == 5
        sources = {r.source for r in recs}
        assert CandidateSource.GENERATIVE not in sources
        assert CandidateSource.COLLABORATIVE in sources
        assert CandidateSource.CURATED in sources

    @pytest.mark.asyncio
    async def test_generation_disabled_uses_popular_tier(self, store, make_model_client, make_provider):
        """A user with no movies and no model gets popular picks."""
        client = make_model_client(MOVIES_RESPONSE, configured=False)
        provider = make_provider(popular=[{"title": "Dune", "year": 2021}, {"title": "Past Lives", "year": 2023}])
        merger = make_merger(store, client, providers={ContentCategory.MOVIE: provider})

        recs = await merger.recommend(1, ContentCategory.MOVIE, 4)

        assert client.prompts == []
        assert [r.title for r in recs[:2]] == ["Dune", "Past Lives"]
        assert recs[0].source == CandidateSource.DISCOVERY_API
        assert_well_formed(recs, 4)

    @pytest.mark.asyncio
    async def test_failing_branch_is_isolated(self, store, make_model_client, rng):
        merger = make_merger(
            store, make_model_client(MOVIES_RESPONSE), rng=rng, collaborative=FailingCollaborative()
        )

        recs = await merger.recommend(1, ContentCategory.MOVIE, 3)

        assert [r.source for r in recs] == [CandidateSource.GENERATIVE] * 3

    @pytest.mark.asyncio
    async def test_no_neighbors_fills_from_fallback(self, store, make_model_client):
        """Without similar users the primary side covers the whole limit."""
        store.add(1, ContentCategory.MOVIE, "Interstellar", genre="Sci-Fi", rating=5)
        merger = make_merger(
            store, make_model_client(configured=False), tiers=[CuratedCatalogTier()]
        )

        recs = await merger.recommend(1, ContentCategory.MOVIE, 10)

        assert len(recs) == 10
        assert {r.source for r in recs} == {CandidateSource.CURATED}
        assert "Interstellar" not in [r.title for r in recs]
        assert_well_formed(recs, 10)

    @pytest.mark.asyncio
    async def test_failed_collaborative_fills_from_fallback(self, store, make_model_client):
        merger = make_merger(
            store,
            make_model_client(configured=False),
            collaborative=FailingCollaborative(),
            tiers=[CuratedCatalogTier()],
        )

        recs = await merger.recommend(1, ContentCategory.RESTAURANT, 6)

        assert len(recs) == 6
        assert_well_formed(recs, 6)

    @pytest.mark.asyncio
    async def test_everything_empty(self, store, make_model_client):
        merger = make_merger(store, make_model_client("no idea"), tiers=[])

        assert await merger.recommend(1, ContentCategory.MUSIC, 10) == []
        assert await merger.recommend(1, ContentCategory.MUSIC, 0) == []

    @pytest.mark.asyncio
    async def test_refreshes_profile(self, store, make_model_client):
        store.add(1, ContentCategory.MUSIC, "Teardrop", genre="Electronic", artist="Massive Attack")
        merger = make_merger(store, make_model_client())

        await merger.recommend(1, ContentCategory.MUSIC, 5)

        assert store.profiles[1].music_genres == {"Electronic": 1.0}

    @pytest.mark.asyncio
    async def test_recommend_all(self, store, make_model_client):
        merger = make_merger(store, make_model_client(configured=False))

        results = await merger.recommend_all(1, 3)

        assert set(results) == set(ContentCategory)
        for category, recs in results.items():
            assert len(recs) == 3
            assert all(r.type == category for r in recs)
            assert_well_formed(recs, 3)
