"""Introspection tools describing the server's own tool set."""

import json
from typing import Any

from jokes_mcp.mcp.models import TextContent, Tool
from jokes_mcp.mcp.registry import ToolRegistry


def make_list_methods_handler(registry: ToolRegistry):
    """Build a list-methods handler bound to the given registry."""

    async def list_methods_handler(arguments: dict[str, Any]) -> list[TextContent]:
        methods = [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.inputSchema,
            }
            for tool in registry.list_tools()
        ]
        return [TextContent(text=json.dumps(methods, indent=2))]

    return list_methods_handler


def register_tools(registry: ToolRegistry) -> None:
    registry.register(
        Tool(
            name="list-methods",
            description="Lists all available MCP methods.",
            inputSchema={"type": "object", "properties": {}},
        ),
        handler=make_list_methods_handler(registry),
    )
