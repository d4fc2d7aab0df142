"""TMDB API integration for movie and TV discovery and posters."""

from typing import Any

import httpx

from src.config import get_settings
from src.constants import TMDB_API_BASE_URL, TMDB_IMAGE_BASE_URL, TMDB_MIN_VOTE_AVERAGE, TMDB_MIN_VOTE_COUNT
from src.models.content import ContentCategory
from src.utils.http_client import TMDB, get_api_client

settings = get_settings()

TMDB_MEDIA_TYPES = {
    ContentCategory.MOVIE: "movie",
    ContentCategory.TV_SHOW: "tv",
}

MOVIE_GENRES = [
    ("Action", 28), ("Adventure", 12), ("Animation", 16), ("Comedy", 35),
    ("Crime", 80), ("Documentary", 99), ("Drama", 18), ("Family", 10751),
    ("Fantasy", 14), ("History", 36), ("Horror", 27), ("Music", 10402),
    ("Mystery", 9648), ("Romance", 10749), ("Science Fiction", 878),
    ("Thriller", 53), ("War", 10752), ("Western", 37),
]
TV_GENRES = [
    ("Action & Adventure", 10759), ("Animation", 16), ("Comedy", 35),
    ("Crime", 80), ("Documentary", 99), ("Drama", 18), ("Family", 10751),
    ("Kids", 10762), ("Mystery", 9648), ("Sci-Fi & Fantasy", 10765),
    ("War & Politics", 10768), ("Western", 37),
]

# Our labels that TMDB spells differently
_GENRE_ALIASES = {
    "movie": {"sci-fi": 878, "scifi": 878},
    "tv": {
        "sci-fi": 10765, "science fiction": 10765, "fantasy": 10765,
        "action": 10759, "adventure": 10759, "war": 10768, "politics": 10768,
    },
}


def get_genre_id(label: str, media_type: str) -> int | None:
    """TMDB genre id for a label (case-insensitive), None when TMDB has no such genre."""
    folded = label.strip().casefold()
    genres = MOVIE_GENRES if media_type == "movie" else TV_GENRES
    for name, genre_id in genres:
        if name.casefold() == folded:
            return genre_id
    return _GENRE_ALIASES[media_type].get(folded)


def get_genre_names(genre_ids: list[int], media_type: str) -> str | None:
    genres = dict((gid, name) for name, gid in (MOVIE_GENRES if media_type == "movie" else TV_GENRES))
    names = [genres[gid] for gid in genre_ids if gid in genres]
    return ", ".join(names[:3]) or None


class TMDBService:
    """Service for discovering movies / TV shows and finding posters on TMDB."""

    def __init__(self, api_key: str | None = None, client: httpx.AsyncClient | None = None) -> None:
        self.api_key = settings.tmdb_api_key if api_key is None else api_key
        self._client = client
        # Support both API key v3 and Bearer token
        if self.api_key and self.api_key.startswith("eyJ"):
            # Bearer token (API Read Access Token)
            self.headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            }
            self.use_api_key_param = False
        else:
            # API key v3 - pass as query parameter
            self.headers = {"Accept": "application/json"}
            self.use_api_key_param = True

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_api_client(TMDB)

    def _add_api_key(self, params: dict) -> dict:
        """Add API key to params if using v3 key."""
        if self.use_api_key_param:
            params["api_key"] = self.api_key
        return params

    def _to_result(self, item: dict[str, Any], media_type: str) -> dict[str, Any]:
        if media_type == "movie":
            title = item.get("title") or item.get("original_title", "")
            year = (item.get("release_date") or "")[:4]
        else:
            title = item.get("name") or item.get("original_name", "")
            year = (item.get("first_air_date") or "")[:4]

        return {
            "id": item.get("id"),
            "title": title,
            "year": int(year) if year.isdigit() else None,
            "genre": get_genre_names(item.get("genre_ids", []), media_type),
            "image_url": (
                f"{TMDB_IMAGE_BASE_URL}/w342{item['poster_path']}"
                if item.get("poster_path")
                else None
            ),
            "vote_average": item.get("vote_average"),
            "popularity": item.get("popularity"),
        }

    async def _get_results(self, path: str, params: dict[str, str], media_type: str) -> list[dict[str, Any]]:
        response = await self.client.get(
            f"{TMDB_API_BASE_URL}{path}",
            params=self._add_api_key(params),
            headers=self.headers,
        )
        if response.status_code != 200:
            return []

        data = response.json()
        return [self._to_result(item, media_type) for item in data.get("results", []) if item.get("id")]

    async def search(
        self,
        query: str,
        media_type: str = "movie",
        language: str = "en-US",
    ) -> list[dict[str, Any]]:
        """Search movies or TV series by title."""
        if not self.api_key:
            return []
        params = {"query": query, "language": language, "include_adult": "false"}
        results = await self._get_results(f"/search/{media_type}", params, media_type)
        return results[:10]

    async def get_trending(
        self,
        media_type: str = "movie",
        time_window: str = "week",
        language: str = "en-US",
        page: int = 1,
    ) -> list[dict[str, Any]]:
        """Get trending movies or TV shows.

        Args:
            media_type: "movie" or "tv"
            time_window: "day" or "week"
            language: Language for results
            page: Page number (1-based)
        """
        if not self.api_key:
            return []
        params = {"language": language, "page": str(page)}
        return await self._get_results(f"/trending/{media_type}/{time_window}", params, media_type)

    async def discover(
        self,
        media_type: str = "movie",
        language: str = "en-US",
        sort_by: str = "popularity.desc",
        with_genres: list[int] | None = None,
        vote_average_gte: float | None = None,
        vote_count_gte: int | None = None,
        page: int = 1,
    ) -> list[dict[str, Any]]:
        """Discover movies or TV shows with filters.

        Args:
            media_type: "movie" or "tv"
            language: Language for results
            sort_by: Sort order (popularity.desc, vote_average.desc, etc.)
            with_genres: Genre IDs to include
            vote_average_gte: Minimum vote average
            vote_count_gte: Minimum vote count
            page: Page number (1-based)
        """
        if not self.api_key:
            return []

        params = {
            "language": language,
            "sort_by": sort_by,
            "include_adult": "false",
            "page": str(page),
        }
        if with_genres:
            params["with_genres"] = ",".join(str(g) for g in with_genres)
        if vote_average_gte:
            params["vote_average.gte"] = str(vote_average_gte)
        if vote_count_gte:
            params["vote_count.gte"] = str(vote_count_gte)

        return await self._get_results(f"/discover/{media_type}", params, media_type)

    async def find_image_for_title(self, title: str, category: ContentCategory) -> str | None:
        """Poster URL of the best search match, if any."""
        media_type = TMDB_MEDIA_TYPES.get(category)
        if media_type is None or not title:
            return None
        for result in await self.search(title, media_type):
            if result.get("image_url"):
                return result["image_url"]
        return None


class TMDBDiscovery:
    """Discovery provider for one of MOVIE / TV_SHOW."""

    def __init__(self, service: TMDBService, category: ContentCategory) -> None:
        self.service = service
        self.media_type = TMDB_MEDIA_TYPES[category]

    @property
    def is_configured(self) -> bool:
        return self.service.is_configured

    async def search_by_category_label(self, label: str, page: int = 1) -> list[dict[str, Any]]:
        genre_id = get_genre_id(label, self.media_type)
        if genre_id is None:
            return []
        return await self.service.discover(
            self.media_type,
            sort_by="vote_average.desc",
            with_genres=[genre_id],
            vote_average_gte=TMDB_MIN_VOTE_AVERAGE,
            vote_count_gte=TMDB_MIN_VOTE_COUNT,
            page=page,
        )

    async def list_popular(self, page: int = 1) -> list[dict[str, Any]]:
        return await self.service.get_trending(self.media_type, "week", page=page)
