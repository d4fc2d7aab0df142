"""Last.fm API integration for music discovery."""

from typing import Any

import httpx

from src.config import get_settings
from src.constants import LASTFM_API_URL
from src.utils.http_client import LASTFM, get_api_client

settings = get_settings()


def _as_list(value: Any) -> list[dict[str, Any]]:
    """Last.fm returns a bare object instead of a list when there is one result."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return [value]
    return []


def _pick_image(images: Any) -> str | None:
    for image in _as_list(images):
        if image.get("size") in ("large", "extralarge") and image.get("#text"):
            return image["#text"]
    return None


class LastFMService:
    """Service for listing top tracks by tag and overall charts."""

    def __init__(self, api_key: str | None = None, client: httpx.AsyncClient | None = None) -> None:
        self.api_key = settings.lastfm_api_key if api_key is None else api_key
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_api_client(LASTFM)

    async def _get_tracks(self, params: dict[str, str], genre: str | None) -> list[dict[str, Any]]:
        if not self.api_key:
            return []

        response = await self.client.get(
            LASTFM_API_URL,
            params={**params, "api_key": self.api_key, "format": "json"},
        )
        if response.status_code != 200:
            return []

        data = response.json()
        results = []
        for track in _as_list(data.get("tracks", {}).get("track")):
            artist = track.get("artist")
            artist_name = artist.get("name") if isinstance(artist, dict) else artist
            if not track.get("name") or not artist_name:
                continue
            results.append({
                "title": track["name"],
                "artist": artist_name,
                "genre": genre,
                "image_url": _pick_image(track.get("image")),
                "listeners": track.get("listeners"),
            })
        return results

    async def get_top_tracks_for_tag(self, tag: str, page: int = 1, limit: int = 20) -> list[dict[str, Any]]:
        """Most listened tracks carrying ``tag`` (a genre such as "rock")."""
        params = {"method": "tag.gettoptracks", "tag": tag, "page": str(page), "limit": str(limit)}
        return await self._get_tracks(params, genre=tag)

    async def get_chart_top_tracks(self, page: int = 1, limit: int = 20) -> list[dict[str, Any]]:
        """Global chart of the most listened tracks."""
        params = {"method": "chart.gettoptracks", "page": str(page), "limit": str(limit)}
        return await self._get_tracks(params, genre=None)


class LastFMDiscovery:
    """Discovery provider for MUSIC."""

    def __init__(self, service: LastFMService) -> None:
        self.service = service

    @property
    def is_configured(self) -> bool:
        return self.service.is_configured

    async def search_by_category_label(self, label: str, page: int = 1) -> list[dict[str, Any]]:
        return await self.service.get_top_tracks_for_tag(label.lower(), page=page)

    async def list_popular(self, page: int = 1) -> list[dict[str, Any]]:
        return await self.service.get_chart_top_tracks(page=page)
