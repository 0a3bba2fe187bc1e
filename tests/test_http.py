"""Tests for the shared HTTP helpers."""

import httpx
import pytest

from jokes_mcp.utils import http


@pytest.fixture
def mock_transport(monkeypatch):
    """Point the shared client at an in-process transport."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/text":
            return httpx.Response(200, text="  a joke \n")
        if request.url.path == "/missing":
            return httpx.Response(404, json={"error": "nope"})
        return httpx.Response(200, json={"value": "chuck", "n": len(seen)})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(http, "_shared_client", client)
    http.response_cache.clear()
    yield seen
    http.response_cache.clear()


class TestFetchHelpers:
    @pytest.mark.asyncio
    async def test_fetch_json(self, mock_transport):
        data = await http.fetch_json("https://api.test/random", params={"category": "dev"})
        assert data["value"] == "chuck"
        assert mock_transport[0].url.params["category"] == "dev"
        assert mock_transport[0].headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_fetch_json_uses_cache(self, mock_transport):
        first = await http.fetch_json("https://api.test/categories", cache_ttl=60)
        second = await http.fetch_json("https://api.test/categories", cache_ttl=60)
        assert first == second
        assert len(mock_transport) == 1

    @pytest.mark.asyncio
    async def test_fetch_json_raises_on_bad_status(self, mock_transport):
        with pytest.raises(httpx.HTTPStatusError):
            await http.fetch_json("https://api.test/missing")
        # status errors are not retried
        assert len(mock_transport) == 1

    @pytest.mark.asyncio
    async def test_fetch_text_strips_and_asks_for_plain_text(self, mock_transport):
        text = await http.fetch_text("https://api.test/text")
        assert text == "a joke"
        assert mock_transport[0].headers["Accept"] == "text/plain"


class TestSimpleCache:
    def test_expired_entries_are_dropped(self, monkeypatch):
        cache = http.SimpleCache(default_ttl=10)
        now = [100.0]
        monkeypatch.setattr(http.time, "monotonic", lambda: now[0])

        cache.set("k", "v")
        assert cache.get("k") == "v"
        now[0] = 111.0
        assert cache.get("k") is None
