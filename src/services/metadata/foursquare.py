"""Foursquare Places API integration for restaurant discovery."""

from typing import Any

import httpx

from src.config import get_settings
from src.constants import FOURSQUARE_API_URL, FOURSQUARE_MIN_RATING, FOURSQUARE_RESTAURANT_CATEGORY
from src.utils.http_client import FOURSQUARE, get_api_client

settings = get_settings()

PLACE_FIELDS = "fsq_id,name,categories,location,rating,popularity,photos"


def _venue_type(category_name: str) -> str:
    lowered = category_name.lower()
    if "cafe" in lowered or "coffee" in lowered:
        return "cafe"
    if "bar" in lowered or "pub" in lowered:
        return "bar"
    return "restaurant"


class FoursquareService:
    """Service for searching places near the configured locality."""

    def __init__(
        self,
        api_key: str | None = None,
        near: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = settings.foursquare_api_key if api_key is None else api_key
        self.near = near or settings.foursquare_near
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_api_client(FOURSQUARE)

    async def search_places(
        self,
        query: str | None = None,
        sort: str = "RELEVANCE",
        min_rating: float | None = None,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        """Search restaurants near ``self.near``.

        Ratings are on Foursquare's 0-10 scale; places without a rating are
        dropped when ``min_rating`` is given.
        """
        if not self.api_key:
            return []

        params = {
            "near": self.near,
            "categories": FOURSQUARE_RESTAURANT_CATEGORY,
            "sort": sort,
            "limit": str(limit),
            "fields": PLACE_FIELDS,
        }
        if query:
            params["query"] = query

        response = await self.client.get(
            FOURSQUARE_API_URL,
            params=params,
            headers={"Authorization": self.api_key, "Accept": "application/json"},
        )
        if response.status_code != 200:
            return []

        results = []
        for place in response.json().get("results", []):
            rating = place.get("rating")
            if min_rating is not None and (rating is None or rating < min_rating):
                continue

            categories = place.get("categories") or [{}]
            category_name = categories[0].get("name") or "Restaurant"
            location = place.get("location") or {}
            photos = place.get("photos") or []

            results.append({
                "id": place.get("fsq_id"),
                "name": place.get("name"),
                "cuisine": category_name.replace(" Restaurant", "").strip() or category_name,
                "location": location.get("locality") or location.get("formatted_address") or self.near,
                "venue_type": _venue_type(category_name),
                "image_url": f"{photos[0]['prefix']}400x400{photos[0]['suffix']}" if photos else None,
                "rating": rating,
            })
        return [r for r in results if r["name"]]


class FoursquareDiscovery:
    """Discovery provider for RESTAURANT."""

    def __init__(self, service: FoursquareService) -> None:
        self.service = service

    @property
    def is_configured(self) -> bool:
        return self.service.is_configured

    async def search_by_category_label(self, label: str, page: int = 1) -> list[dict[str, Any]]:
        # Foursquare search is not paginated
        if page > 1:
            return []
        return await self.service.search_places(
            query=f"{label} restaurant", sort="RATING", min_rating=FOURSQUARE_MIN_RATING
        )

    async def list_popular(self, page: int = 1) -> list[dict[str, Any]]:
        if page > 1:
            return []
        return await self.service.search_places(sort="POPULARITY")
