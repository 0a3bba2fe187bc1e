"""Pydantic models for MCP JSON-RPC 2.0 protocol."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


# =============================================================================
# JSON-RPC 2.0 Base Models
# =============================================================================


class JsonRpcRequest(BaseModel):
    """
    JSON-RPC 2.0 request object.

    ``id`` defaults to None without being validated, so an absent id marks a
    notification while an explicit ``null`` (or a boolean, float, ...) fails
    validation together with any other bad field.
    """

    jsonrpc: Literal["2.0"]
    id: StrictInt | StrictStr = Field(default=None)
    method: StrictStr = Field(..., min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set


class JsonRpcErrorObject(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            data["data"] = self.data
        return data


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcErrorObject | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Custom serialization: exactly one of result or error is emitted."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump()
        else:
            data["result"] = self.result
        return data


# =============================================================================
# MCP Content Types
# =============================================================================


class TextContent(BaseModel):
    """Text content returned by tools."""

    type: Literal["text"] = "text"
    text: str


# =============================================================================
# MCP Tool Models
# =============================================================================


class Tool(BaseModel):
    """MCP tool definition."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique tool name")
    description: str = Field(..., description="Human-readable description")
    inputSchema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema for tool input",
    )
    outputSchema: dict[str, Any] | None = Field(
        default=None, description="JSON Schema for structured tool output"
    )

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        kwargs.setdefault("exclude_none", True)
        return super().model_dump(**kwargs)


class ToolCallResult(BaseModel):
    """Result of a tool call."""

    content: list[TextContent] = Field(..., min_length=1)


# =============================================================================
# MCP Protocol Models
# =============================================================================


class ClientInfo(BaseModel):
    """Client information sent during initialization."""

    name: str
    version: str


class ServerInfo(BaseModel):
    """Server information returned during initialization."""

    name: str
    version: str


class Capabilities(BaseModel):
    """Server capabilities."""

    tools: dict[str, Any] = Field(default_factory=lambda: {"listChanged": False})
    logging: dict[str, Any] = Field(default_factory=dict)


class InitializeParams(BaseModel):
    """Parameters for initialize request."""

    protocolVersion: str
    capabilities: dict[str, Any] = Field(default_factory=dict)
    clientInfo: ClientInfo


class InitializeResult(BaseModel):
    """Result of initialize request."""

    protocolVersion: str
    capabilities: Capabilities
    serverInfo: ServerInfo
    instructions: str | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        kwargs.setdefault("exclude_none", True)
        return super().model_dump(**kwargs)


class ToolsListResult(BaseModel):
    """Result of tools/list request."""

    tools: list[Tool]


class ToolCallParams(BaseModel):
    """Parameters for tools/call request."""

    name: StrictStr = Field(..., min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)


class SetLevelParams(BaseModel):
    """Parameters for logging/setLevel request."""

    level: Literal[
        "debug", "info", "notice", "warning", "error", "critical", "alert", "emergency"
    ]
