"""MCP method handlers for JSON-RPC requests."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from jokes_mcp.config.loader import get_settings
from jokes_mcp.mcp.errors import InvalidParamsError, MethodNotFoundError
from jokes_mcp.mcp.invoker import ToolInvoker
from jokes_mcp.mcp.models import (
    Capabilities,
    InitializeParams,
    InitializeResult,
    ServerInfo,
    SetLevelParams,
    ToolsListResult,
)
from jokes_mcp.mcp.registry import ToolRegistry

logger = logging.getLogger(__name__)

# MCP protocol versions we support, newest last
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26")
PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[-1]


@dataclass
class ClientState:
    """Handshake state of one connection or streaming session."""

    initialized: bool = False
    protocol_version: str | None = None
    client_name: str | None = None
    client_version: str | None = None
    log_level: str | None = None


MethodHandler = Callable[[dict[str, Any], ClientState], Awaitable[dict[str, Any]]]


class MCPHandlers:
    """
    Handlers for MCP protocol methods.

    One instance is shared by all connections; anything a client changes
    lives in the ClientState passed to dispatch.
    """

    def __init__(self, registry: ToolRegistry):
        self.registry = registry
        self.invoker = ToolInvoker(registry)
        self._handlers: dict[str, MethodHandler] = {
            "initialize": self.handle_initialize,
            "notifications/initialized": self.handle_initialized,
            "logging/setLevel": self.handle_set_level,
            "tools/list": self.handle_tools_list,
            "tools/call": self.handle_tools_call,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._handlers)

    async def handle_initialize(self, params: dict[str, Any], state: ClientState) -> dict[str, Any]:
        """Handle the initialize request."""
        protocol_version = PROTOCOL_VERSION
        try:
            init_params = InitializeParams(**params)
        except ValidationError as e:
            # Be lenient with clients that skip the handshake details
            logger.warning(f"Invalid initialize params: {e}")
        else:
            if init_params.protocolVersion in SUPPORTED_PROTOCOL_VERSIONS:
                protocol_version = init_params.protocolVersion
            state.client_name = init_params.clientInfo.name
            state.client_version = init_params.clientInfo.version

        state.protocol_version = protocol_version

        settings = get_settings()
        result = InitializeResult(
            protocolVersion=protocol_version,
            capabilities=Capabilities(),
            serverInfo=ServerInfo(
                name=settings.server_name,
                version=settings.server_version,
            ),
            instructions=settings.server_description,
        )
        return result.model_dump()

    async def handle_initialized(self, params: dict[str, Any], state: ClientState) -> dict[str, Any]:
        """Handle the notifications/initialized notification."""
        state.initialized = True
        logger.info("Client confirmed initialization")
        return {}

    async def handle_set_level(self, params: dict[str, Any], state: ClientState) -> dict[str, Any]:
        """Handle logging/setLevel; the level is remembered for this client only."""
        try:
            state.log_level = SetLevelParams(**params).level
        except ValidationError:
            logger.debug(f"Ignoring unrecognised log level: {params.get('level')!r}")
        return {}

    async def handle_tools_list(self, params: dict[str, Any], state: ClientState) -> dict[str, Any]:
        """Handle the tools/list request."""
        result = ToolsListResult(tools=self.registry.list_tools())
        return result.model_dump(exclude_none=True)

    async def handle_tools_call(self, params: dict[str, Any], state: ClientState) -> dict[str, Any]:
        """Handle the tools/call request."""
        return await self.invoker.call(params)

    async def dispatch(self, method: str, params: dict[str, Any], state: ClientState) -> dict[str, Any]:
        """
        Dispatch a method call to the appropriate handler.

        Raises a JsonRpcError subclass for protocol-level failures; the
        caller converts it into an error response.
        """
        handler = self._handlers.get(method)
        if handler is None:
            raise MethodNotFoundError(f"Method not found: {method}")
        if not isinstance(params, dict):
            raise InvalidParamsError("params must be an object")
        return await handler(params, state)
