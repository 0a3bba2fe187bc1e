"""HTTP client utilities with retry, timeout handling, and connection pooling."""

import asyncio
import logging
import time
from typing import Any

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from jokes_mcp.config.loader import get_settings

logger = logging.getLogger(__name__)


# =============================================================================
# Connection Pooling - Shared HTTP Client
# =============================================================================

_shared_client: httpx.AsyncClient | None = None
_client_lock = asyncio.Lock()


async def get_shared_client() -> httpx.AsyncClient:
    """Get a shared HTTP client with connection pooling."""
    global _shared_client

    if _shared_client is None or _shared_client.is_closed:
        async with _client_lock:
            # Double-check after acquiring lock
            if _shared_client is None or _shared_client.is_closed:
                settings = get_settings()
                _shared_client = httpx.AsyncClient(
                    timeout=httpx.Timeout(float(settings.default_timeout)),
                    follow_redirects=True,
                    headers={
                        "User-Agent": f"{settings.server_name}/{settings.server_version}",
                    },
                    limits=httpx.Limits(
                        max_keepalive_connections=10,
                        max_connections=20,
                        keepalive_expiry=30.0,
                    ),
                )
                logger.debug("Created shared HTTP client with connection pooling")

    return _shared_client


async def close_shared_client() -> None:
    """Close the shared HTTP client (call on shutdown)."""
    global _shared_client
    if _shared_client is not None:
        await _shared_client.aclose()
        _shared_client = None
        logger.debug("Closed shared HTTP client")


# =============================================================================
# Simple In-Memory Cache
# =============================================================================

class SimpleCache:
    """Simple TTL cache for API responses."""

    def __init__(self, default_ttl: int = 300):
        self._cache: dict[str, tuple[Any, float]] = {}
        self._default_ttl = default_ttl

    def get(self, key: str) -> Any | None:
        """Get value from cache if not expired."""
        if key in self._cache:
            value, expires_at = self._cache[key]
            if time.monotonic() < expires_at:
                logger.debug(f"Cache hit: {key}")
                return value
            del self._cache[key]
        return None

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Set value in cache with TTL."""
        ttl = ttl or self._default_ttl
        self._cache[key] = (value, time.monotonic() + ttl)

    def clear(self) -> None:
        """Clear all cached values."""
        self._cache.clear()


# Global cache instance (5 minute default TTL)
response_cache = SimpleCache(default_ttl=300)


# Retry connect failures and timeouts; HTTP status errors are not retried
http_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
    reraise=True,
)


@http_retry
async def fetch_json(
    url: str,
    params: dict[str, Any] | None = None,
    cache_ttl: int | None = None,
) -> Any:
    """
    Fetch JSON from a URL with retries and optional caching.

    Raises:
        httpx.HTTPStatusError: On HTTP error status.
        httpx.TimeoutException: On timeout.
        ValueError: If response is not valid JSON.
    """
    cache_key = f"GET:{url}:{params}"
    if cache_ttl:
        cached = response_cache.get(cache_key)
        if cached is not None:
            return cached

    client = await get_shared_client()
    response = await client.get(url, params=params, headers={"Accept": "application/json"})
    response.raise_for_status()
    result = response.json()

    if cache_ttl:
        response_cache.set(cache_key, result, cache_ttl)

    return result


@http_retry
async def fetch_text(url: str, params: dict[str, Any] | None = None) -> str:
    """Fetch a plain-text body from a URL with retries."""
    client = await get_shared_client()
    response = await client.get(url, params=params, headers={"Accept": "text/plain"})
    response.raise_for_status()
    return response.text.strip()
