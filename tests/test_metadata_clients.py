"""Tests for the discovery API adapters (no network, httpx.MockTransport)."""

import httpx
import pytest

from src.models.content import ContentCategory
from src.services.metadata.foursquare import FoursquareDiscovery, FoursquareService
from src.services.metadata.lastfm import LastFMDiscovery, LastFMService
from src.services.metadata.tmdb import TMDBDiscovery, TMDBService, get_genre_id
from src.utils.http_client import LASTFM, TMDB, close_all_clients, get_api_client


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


TMDB_MOVIES = {
    "results": [
        {"id": 27205, "title": "Inception", "release_date": "2010-07-15", "genre_ids": [878, 53],
         "poster_path": "/inception.jpg", "vote_average": 8.4},
        {"id": 329865, "title": "Arrival", "release_date": "2016-11-10", "genre_ids": [18, 878],
         "poster_path": None, "vote_average": 7.6},
        {"title": "No id, skipped"},
    ]
}


class TestTMDB:
    """Tests for TMDBService / TMDBDiscovery."""

    def test_genre_ids(self):
        assert get_genre_id("Drama", "movie") == 18
        assert get_genre_id("sci-fi", "movie") == 878
        assert get_genre_id("Sci-Fi", "tv") == 10765
        assert get_genre_id("Polka", "movie") is None

    @pytest.mark.asyncio
    async def test_discover_by_label(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=TMDB_MOVIES)

        async with mock_client(handler) as client:
            discovery = TMDBDiscovery(TMDBService(api_key="v3key", client=client), ContentCategory.MOVIE)
            results = await discovery.search_by_category_label("Sci-Fi")

        assert [r["title"] for r in results] == ["Inception", "Arrival"]
        assert results[0]["year"] == 2010
        assert results[0]["genre"] == "Science Fiction, Thriller"
        assert results[0]["image_url"] == "https://image.tmdb.org/t/p/w342/inception.jpg"

        params = requests[0].url.params
        assert requests[0].url.path == "/3/discover/movie"
        assert params["with_genres"] == "878"
        assert params["vote_average.gte"] == "7.0"
        assert params["vote_count.gte"] == "100"
        assert params["api_key"] == "v3key"

    @pytest.mark.asyncio
    async def test_unknown_label_makes_no_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with mock_client(handler) as client:
            discovery = TMDBDiscovery(TMDBService(api_key="v3key", client=client), ContentCategory.TV_SHOW)
            assert await discovery.search_by_category_label("Polka") == []

    @pytest.mark.asyncio
    async def test_trending_tv_with_bearer_token(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"results": [
                {"id": 1396, "name": "Breaking Bad", "first_air_date": "2008-01-20", "genre_ids": [18, 80]},
            ]})

        async with mock_client(handler) as client:
            discovery = TMDBDiscovery(TMDBService(api_key="eyJtoken", client=client), ContentCategory.TV_SHOW)
            results = await discovery.list_popular()

        assert results[0]["title"] == "Breaking Bad"
        assert results[0]["genre"] == "Drama, Crime"
        assert requests[0].url.path == "/3/trending/tv/week"
        assert requests[0].headers["Authorization"] == "Bearer eyJtoken"
        assert "api_key" not in requests[0].url.params

    @pytest.mark.asyncio
    async def test_error_status_is_empty(self):
        async with mock_client(lambda request: httpx.Response(429)) as client:
            service = TMDBService(api_key="v3key", client=client)
            assert await service.get_trending("movie") == []

    @pytest.mark.asyncio
    async def test_find_image_for_title(self):
        async with mock_client(lambda request: httpx.Response(200, json=TMDB_MOVIES)) as client:
            service = TMDBService(api_key="v3key", client=client)

            assert (await service.find_image_for_title("Inception", ContentCategory.MOVIE)).endswith("/inception.jpg")
            assert await service.find_image_for_title("Hurt", ContentCategory.MUSIC) is None

    def test_unconfigured(self):
        assert not TMDBDiscovery(TMDBService(api_key=""), ContentCategory.MOVIE).is_configured


class TestLastFM:
    """Tests for LastFMService / LastFMDiscovery."""

    @pytest.mark.asyncio
    async def test_top_tracks_for_tag(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"tracks": {"track": [
                {"name": "Paranoid Android", "artist": {"name": "Radiohead"}, "listeners": "1000",
                 "image": [{"size": "small", "#text": "s.png"}, {"size": "large", "#text": "l.png"}]},
                {"name": "", "artist": {"name": "Nobody"}},
            ]}})

        async with mock_client(handler) as client:
            discovery = LastFMDiscovery(LastFMService(api_key="key", client=client))
            results = await discovery.search_by_category_label("Alternative")

        assert results == [{
            "title": "Paranoid Android",
            "artist": "Radiohead",
            "genre": "alternative",
            "image_url": "l.png",
            "listeners": "1000",
        }]
        assert requests[0].url.params["method"] == "tag.gettoptracks"
        assert requests[0].url.params["tag"] == "alternative"

    @pytest.mark.asyncio
    async def test_chart_single_track_object(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["method"] == "chart.gettoptracks"
            return httpx.Response(200, json={"tracks": {"track": {"name": "Hurt", "artist": {"name": "Johnny Cash"}}}})

        async with mock_client(handler) as client:
            results = await LastFMDiscovery(LastFMService(api_key="key", client=client)).list_popular()

        assert [(r["title"], r["artist"]) for r in results] == [("Hurt", "Johnny Cash")]


class TestFoursquare:
    """Tests for FoursquareService / FoursquareDiscovery."""

    PLACES = {"results": [
        {"fsq_id": "a", "name": "Mikla", "rating": 9.1, "categories": [{"name": "Mediterranean Restaurant"}],
         "location": {"locality": "Istanbul"}, "photos": [{"prefix": "https://fsq/", "suffix": "/m.jpg"}]},
        {"fsq_id": "b", "name": "Average Place", "rating": 6.0, "categories": [{"name": "Turkish Restaurant"}]},
        {"fsq_id": "c", "name": "Unrated", "categories": [{"name": "Coffee Shop"}]},
    ]}

    @pytest.mark.asyncio
    async def test_label_search_applies_min_rating(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=self.PLACES)

        async with mock_client(handler) as client:
            service = FoursquareService(api_key="fsq", near="Istanbul,Turkey", client=client)
            results = await FoursquareDiscovery(service).search_by_category_label("Mediterranean")

        assert [r["name"] for r in results] == ["Mikla"]
        assert results[0]["cuisine"] == "Mediterranean"
        assert results[0]["image_url"] == "https://fsq/400x400/m.jpg"
        params = requests[0].url.params
        assert params["query"] == "Mediterranean restaurant"
        assert params["sort"] == "RATING"
        assert params["near"] == "Istanbul,Turkey"
        assert requests[0].headers["Authorization"] == "fsq"

    @pytest.mark.asyncio
    async def test_popular_keeps_unrated(self):
        async with mock_client(lambda request: httpx.Response(200, json=self.PLACES)) as client:
            discovery = FoursquareDiscovery(FoursquareService(api_key="fsq", client=client))
            results = await discovery.list_popular()

            assert [r["venue_type"] for r in results] == ["restaurant", "restaurant", "cafe"]
            assert await discovery.list_popular(page=2) == []

    @pytest.mark.asyncio
    async def test_transport_error_propagates_to_tier(self):
        """Adapters do not swallow transport errors; the fallback tier does."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        async with mock_client(handler) as client:
            service = FoursquareService(api_key="fsq", client=client)
            with pytest.raises(httpx.ConnectError):
                await service.search_places(sort="POPULARITY")


class TestPooledClients:
    """Tests for the shared per-API httpx clients."""

    @pytest.mark.asyncio
    async def test_one_client_per_api(self):
        tmdb = get_api_client(TMDB)

        assert get_api_client(TMDB) is tmdb
        assert get_api_client(LASTFM) is not tmdb

        await close_all_clients()

        assert tmdb.is_closed
        assert get_api_client(TMDB) is not tmdb
        await close_all_clients()

    @pytest.mark.asyncio
    async def test_adapter_uses_pooled_client(self):
        service = TMDBService(api_key="key")

        assert service.client is get_api_client(TMDB)
        await close_all_clients()
