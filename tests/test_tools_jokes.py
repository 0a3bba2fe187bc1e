"""Tests for the joke provider tools, with outbound HTTP stubbed."""

import json

import httpx
import pytest

from jokes_mcp.mcp.errors import INVALID_PARAMS, ToolError
from jokes_mcp.mcp.registry import ToolRegistry, get_registry
from jokes_mcp.tools.chuck_norris import client as chuck_client
from jokes_mcp.tools.chuck_norris.tools import (
    categories_handler,
    joke_by_category_handler,
    random_joke_handler,
)
from jokes_mcp.tools.dad_jokes import client as dad_client
from jokes_mcp.tools.dad_jokes.tools import dad_joke_handler
from jokes_mcp.tools.meta.tools import register_tools as register_meta_tools


def _status_error(status_code: int, url: str = "https://example.test/") -> httpx.HTTPStatusError:
    request = httpx.Request("GET", url)
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


@pytest.fixture
def chuck_api(monkeypatch):
    """Replace fetch_json in the Chuck Norris client; record requested URLs."""
    calls = []

    async def fake_fetch_json(url, params=None, cache_ttl=None):
        calls.append((url, params))
        if url.endswith("/categories"):
            return ["animal", "dev"]
        if params and params.get("category") == "missing":
            raise _status_error(404, url)
        category = params["category"] if params else "any"
        return {"value": f"Chuck joke ({category})"}

    monkeypatch.setattr(chuck_client, "fetch_json", fake_fetch_json)
    return calls


class TestChuckNorrisTools:
    @pytest.mark.asyncio
    async def test_random_joke(self, chuck_api):
        result = await random_joke_handler({})
        assert result[0].type == "text"
        assert result[0].text == "Chuck joke (any)"
        assert chuck_api == [("https://api.chucknorris.io/jokes/random", None)]

    @pytest.mark.asyncio
    async def test_joke_by_category(self, chuck_api):
        result = await joke_by_category_handler({"category": "dev"})
        assert result[0].text == "Chuck joke (dev)"
        assert chuck_api[0][1] == {"category": "dev"}

    @pytest.mark.asyncio
    async def test_unknown_category_raises_tool_error(self, chuck_api):
        with pytest.raises(ToolError, match="Unknown Chuck Norris category: missing"):
            await joke_by_category_handler({"category": "missing"})

    @pytest.mark.asyncio
    async def test_categories_are_joined(self, chuck_api):
        result = await categories_handler({})
        assert result[0].text == "animal, dev"

    @pytest.mark.asyncio
    async def test_network_failure_raises_tool_error(self, monkeypatch):
        async def broken(url, params=None, cache_ttl=None):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(chuck_client, "fetch_json", broken)
        with pytest.raises(ToolError, match="connection refused"):
            await random_joke_handler({})


class TestDadJokeTool:
    @pytest.mark.asyncio
    async def test_dad_joke(self, monkeypatch):
        async def fake_fetch_text(url, params=None):
            assert url == "https://icanhazdadjoke.com/"
            return "I'm reading a book about anti-gravity. It's impossible to put down."

        monkeypatch.setattr(dad_client, "fetch_text", fake_fetch_text)
        result = await dad_joke_handler({})
        assert "anti-gravity" in result[0].text

    @pytest.mark.asyncio
    async def test_bad_status_raises_tool_error(self, monkeypatch):
        async def failing(url, params=None):
            raise _status_error(503, url)

        monkeypatch.setattr(dad_client, "fetch_text", failing)
        with pytest.raises(ToolError):
            await dad_joke_handler({})


class TestListMethodsTool:
    @pytest.mark.asyncio
    async def test_lists_every_registered_tool(self):
        registry = ToolRegistry()
        registry.load_provider("dad_jokes")
        register_meta_tools(registry)

        handler = registry.lookup("list-methods").handler
        result = await handler({})
        methods = json.loads(result[0].text)
        assert [m["name"] for m in methods] == ["getDadJoke", "list-methods"]
        assert methods[0]["description"] == "Random Dad joke"
        assert methods[0]["inputSchema"]["type"] == "object"


class TestToolCallsThroughGateway:
    def test_category_tool_requires_category(self, client, sample_jsonrpc_request, chuck_api):
        get_registry().load_provider("chuck_norris")
        data = client.post(
            "/mcp",
            json=sample_jsonrpc_request("tools/call", {"name": "getChuckJokeByCategory"}),
        ).json()
        assert data["error"]["code"] == INVALID_PARAMS
        assert "category" in data["error"]["message"]
        assert chuck_api == []

    def test_category_tool_returns_joke(self, client, sample_jsonrpc_request, chuck_api):
        get_registry().load_provider("chuck_norris")
        data = client.post(
            "/mcp",
            json=sample_jsonrpc_request(
                "tools/call",
                {"name": "getChuckJokeByCategory", "arguments": {"category": "dev"}},
            ),
        ).json()
        assert data["result"]["content"] == [{"type": "text", "text": "Chuck joke (dev)"}]
