"""Pytest configuration and fixtures."""

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from jokes_mcp.main import app
from jokes_mcp.config.loader import get_settings
from jokes_mcp.mcp.errors import ToolError
from jokes_mcp.mcp.models import TextContent, Tool
from jokes_mcp.mcp.registry import ToolRegistry, get_registry, reset_registry
from jokes_mcp.mcp.transport_sse import reset_session_manager


class CountingHandler:
    """Stub tool handler that records how often it was invoked."""

    def __init__(self, reply=None, error: Exception | None = None):
        self.calls: list[dict[str, Any]] = []
        self.reply = reply
        self.error = error

    async def __call__(self, arguments: dict[str, Any]) -> list[TextContent]:
        self.calls.append(arguments)
        if self.error is not None:
            raise self.error
        if self.reply is not None:
            return self.reply(arguments)
        return [TextContent(text=f"Echo: {arguments.get('message', '')}")]

    @property
    def call_count(self) -> int:
        return len(self.calls)


async def _slow_reply(arguments: dict[str, Any]) -> list[TextContent]:
    await asyncio.sleep(arguments.get("delay", 0))
    return [TextContent(text=arguments["label"])]


ECHO_SCHEMA = {
    "type": "object",
    "properties": {"message": {"type": "string"}},
    "required": ["message"],
}

SLOW_SCHEMA = {
    "type": "object",
    "properties": {
        "label": {"type": "string"},
        "delay": {"type": "number"},
    },
    "required": ["label"],
}


def register_stub_tools(registry: ToolRegistry) -> dict[str, CountingHandler]:
    """Register echo / fail / empty stubs plus a slow tool; return the counters."""
    handlers = {
        "echo": CountingHandler(),
        "fail": CountingHandler(error=ToolError("backend unavailable")),
        "empty": CountingHandler(reply=lambda arguments: []),
    }
    registry.register(
        Tool(name="echo", description="Echo a message", inputSchema=ECHO_SCHEMA),
        handler=handlers["echo"],
    )
    registry.register(
        Tool(name="fail", description="Always fails"),
        handler=handlers["fail"],
    )
    registry.register(
        Tool(name="empty", description="Returns no content"),
        handler=handlers["empty"],
    )
    registry.register(
        Tool(name="slow", description="Sleeps, then returns its label", inputSchema=SLOW_SCHEMA),
        handler=_slow_reply,
    )
    return handlers


@pytest.fixture
def client():
    """Synchronous test client for FastAPI app."""
    return TestClient(app)


@pytest.fixture
async def async_client():
    """Async test client for FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def stub_tools():
    """Reset global registry and sessions, then register the stub tools."""
    reset_registry()
    reset_session_manager()
    handlers = register_stub_tools(get_registry())
    yield handlers
    reset_session_manager()
    reset_registry()


@pytest.fixture
def registry():
    """A fresh, empty tool registry."""
    return ToolRegistry()


@pytest.fixture
def settings():
    """Get application settings."""
    return get_settings()


@pytest.fixture
def streaming_disabled(monkeypatch):
    """Turn the streaming transport off for the duration of a test."""
    monkeypatch.setenv("STREAMING_ENABLED", "false")
    get_settings.cache_clear()
    yield
    monkeypatch.delenv("STREAMING_ENABLED")
    get_settings.cache_clear()


@pytest.fixture
def sample_jsonrpc_request():
    """Sample JSON-RPC request factory."""
    def _make_request(method: str, params: dict = None, id: int | str = 1):
        return {
            "jsonrpc": "2.0",
            "id": id,
            "method": method,
            "params": params or {},
        }
    return _make_request
