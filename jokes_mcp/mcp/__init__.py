"""MCP (Model Context Protocol) implementation with JSON-RPC 2.0."""

from jokes_mcp.mcp.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcErrorObject,
    Tool,
    TextContent,
    ToolCallResult,
)
from jokes_mcp.mcp.registry import ToolRegistry
from jokes_mcp.mcp.errors import (
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    ToolError,
)

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcErrorObject",
    "Tool",
    "TextContent",
    "ToolCallResult",
    "ToolRegistry",
    "ToolError",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
]
