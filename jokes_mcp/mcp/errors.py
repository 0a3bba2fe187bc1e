"""JSON-RPC 2.0 error codes, exceptions and error response helpers."""

from typing import Any

# Standard JSON-RPC 2.0 error codes
INVALID_REQUEST = -32600  # The JSON sent is not a valid Request object
METHOD_NOT_FOUND = -32601  # The method does not exist / is not available
INVALID_PARAMS = -32602  # Invalid method parameter(s)
INTERNAL_ERROR = -32603  # Internal JSON-RPC error


def error_message(code: int) -> str:
    """Get the standard message for a JSON-RPC error code."""
    messages = {
        INVALID_REQUEST: "Invalid Request",
        METHOD_NOT_FOUND: "Method not found",
        INVALID_PARAMS: "Invalid params",
        INTERNAL_ERROR: "Internal error",
    }
    return messages.get(code, "Unknown error")


def make_error_data(code: int, message: str | None = None, data: Any = None) -> dict[str, Any]:
    """Create an error object for JSON-RPC response."""
    error: dict[str, Any] = {
        "code": code,
        "message": message or error_message(code),
    }
    if data is not None:
        error["data"] = data
    return error


# =============================================================================
# Exceptions raised inside the dispatch chain
# =============================================================================


class JsonRpcError(Exception):
    """Base class for failures that map onto a JSON-RPC error object."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str | None = None, data: Any = None):
        self.message = message or error_message(self.code)
        self.data = data
        super().__init__(self.message)

    def to_error_data(self) -> dict[str, Any]:
        return make_error_data(self.code, self.message, self.data)


class InvalidRequestError(JsonRpcError):
    code = INVALID_REQUEST


class MethodNotFoundError(JsonRpcError):
    code = METHOD_NOT_FOUND


class InvalidParamsError(JsonRpcError):
    code = INVALID_PARAMS


class InternalError(JsonRpcError):
    code = INTERNAL_ERROR


class ToolError(Exception):
    """Raised by tool handlers when the underlying operation fails."""


class DuplicateToolError(ValueError):
    """A tool with the same name is already registered."""
