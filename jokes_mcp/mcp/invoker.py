"""Tool invocation: lookup, argument validation and result normalization."""

import logging
from typing import Any

from jsonschema import Draft202012Validator

from jokes_mcp.mcp.errors import (
    InternalError,
    InvalidParamsError,
    MethodNotFoundError,
)
from jokes_mcp.mcp.models import TextContent, ToolCallResult
from jokes_mcp.mcp.registry import ToolRegistry

logger = logging.getLogger(__name__)


def _describe_error(error: Any) -> dict[str, Any]:
    """Flatten a jsonschema ValidationError into a JSON-safe diagnostic."""
    field = ".".join(str(p) for p in error.absolute_path)
    if error.validator == "required":
        # The missing property is not part of the path, only of the message
        missing = [name for name in error.validator_value if name not in error.instance]
        field = ", ".join(missing)
    return {"field": field, "message": error.message}


class ToolInvoker:
    """Resolves tools/call params to a registered tool and runs it."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def validate_arguments(self, schema: dict[str, Any], arguments: dict[str, Any]) -> None:
        """Raise InvalidParamsError listing every schema violation."""
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(arguments), key=lambda e: [str(p) for p in e.path])
        if not errors:
            return

        problems = [_describe_error(e) for e in errors]
        summary = "; ".join(p["message"] for p in problems)
        raise InvalidParamsError(f"Invalid arguments: {summary}", data=problems)

    async def call(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle a tools/call request and return the protocol result."""
        name = params.get("name")
        if name is None or name == "":
            raise InvalidParamsError("tool name is required")
        if not isinstance(name, str):
            raise InvalidParamsError("tool name must be a string")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError("arguments must be an object")

        tool = self.registry.lookup(name)
        if tool is None:
            raise MethodNotFoundError(f"Unknown tool: {name}")

        self.validate_arguments(tool.input_schema, arguments)

        logger.info(f"Calling tool: {name}")
        try:
            content = await tool.handler(arguments)
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            raise InternalError(f"Tool execution error: {e}") from e

        if not content:
            logger.error(f"Tool {name} returned no content")
            raise InternalError(f"Tool execution error: {name} returned no content")

        # Handlers may hand back raw dicts; coerce without touching order
        blocks = [
            block if isinstance(block, TextContent) else TextContent.model_validate(block)
            for block in content
        ]
        return ToolCallResult(content=blocks).model_dump()
