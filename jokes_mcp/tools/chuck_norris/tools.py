"""Chuck Norris provider tools."""

from typing import Any

import httpx

from jokes_mcp.mcp.errors import ToolError
from jokes_mcp.mcp.models import TextContent, Tool
from jokes_mcp.mcp.registry import ToolRegistry
from jokes_mcp.tools.chuck_norris.client import get_client


async def random_joke_handler(arguments: dict[str, Any]) -> list[TextContent]:
    """Handle getChuckJoke tool call."""
    try:
        joke = await get_client().random_joke()
    except (httpx.HTTPError, KeyError) as e:
        raise ToolError(f"Could not fetch a Chuck Norris joke: {e}") from e
    return [TextContent(text=joke)]


async def joke_by_category_handler(arguments: dict[str, Any]) -> list[TextContent]:
    """Handle getChuckJokeByCategory tool call."""
    category = arguments["category"]
    try:
        joke = await get_client().random_joke(category=category)
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            raise ToolError(f"Unknown Chuck Norris category: {category}") from e
        raise ToolError(f"Could not fetch a Chuck Norris joke: {e}") from e
    except (httpx.HTTPError, KeyError) as e:
        raise ToolError(f"Could not fetch a Chuck Norris joke: {e}") from e
    return [TextContent(text=joke)]


async def categories_handler(arguments: dict[str, Any]) -> list[TextContent]:
    """Handle getChuckCategories tool call."""
    try:
        categories = await get_client().categories()
    except httpx.HTTPError as e:
        raise ToolError(f"Could not fetch Chuck Norris categories: {e}") from e
    return [TextContent(text=", ".join(categories))]


def register_tools(registry: ToolRegistry) -> None:
    """Register all Chuck Norris tools with the registry."""

    registry.register(
        Tool(
            name="getChuckJoke",
            description="Random Chuck Norris joke",
            inputSchema={"type": "object", "properties": {}},
        ),
        handler=random_joke_handler,
    )

    registry.register(
        Tool(
            name="getChuckJokeByCategory",
            description="Chuck Norris joke from a given category",
            inputSchema={
                "type": "object",
                "properties": {
                    "category": {
                        "type": "string",
                        "description": "Joke category, see getChuckCategories",
                    },
                },
                "required": ["category"],
            },
        ),
        handler=joke_by_category_handler,
    )

    registry.register(
        Tool(
            name="getChuckCategories",
            description="List Chuck categories",
            inputSchema={"type": "object", "properties": {}},
        ),
        handler=categories_handler,
    )
