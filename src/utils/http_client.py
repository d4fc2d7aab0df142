"""Pooled httpx clients, one per discovery API.

Clients are created on first use and reused by every adapter of the same
API until ``close_all_clients`` runs at shutdown.
"""

import httpx

from src.constants import HTTPX_TIMEOUT

TMDB = "tmdb"
LASTFM = "lastfm"
FOURSQUARE = "foursquare"

_POOL_LIMITS = httpx.Limits(max_connections=10, max_keepalive_connections=5, keepalive_expiry=30)

_clients: dict[str, httpx.AsyncClient] = {}


def get_api_client(api: str) -> httpx.AsyncClient:
    """Shared client for ``api``; a closed one is replaced."""
    client = _clients.get(api)
    if client is None or client.is_closed:
        client = httpx.AsyncClient(timeout=HTTPX_TIMEOUT, limits=_POOL_LIMITS)
        _clients[api] = client
    return client


async def close_all_clients() -> None:
    """Close every pooled client. Call once the CLI run is over."""
    clients = list(_clients.values())
    _clients.clear()
    for client in clients:
        await client.aclose()
