"""Dad joke provider tools."""

from typing import Any

import httpx

from jokes_mcp.mcp.errors import ToolError
from jokes_mcp.mcp.models import TextContent, Tool
from jokes_mcp.mcp.registry import ToolRegistry
from jokes_mcp.tools.dad_jokes.client import get_client


async def dad_joke_handler(arguments: dict[str, Any]) -> list[TextContent]:
    """Handle getDadJoke tool call."""
    try:
        joke = await get_client().random_joke()
    except httpx.HTTPError as e:
        raise ToolError(f"Could not fetch a dad joke: {e}") from e
    if not joke:
        raise ToolError("icanhazdadjoke returned an empty joke")
    return [TextContent(text=joke)]


def register_tools(registry: ToolRegistry) -> None:
    registry.register(
        Tool(
            name="getDadJoke",
            description="Random Dad joke",
            inputSchema={"type": "object", "properties": {}},
        ),
        handler=dad_joke_handler,
    )
