"""Swagger 2.0 discovery document for API-management tooling."""

from typing import Any

from jokes_mcp.config.loader import Settings
from jokes_mcp.mcp.registry import ToolRegistry


def build_swagger_document(registry: ToolRegistry, settings: Settings) -> dict[str, Any]:
    """
    Describe the /mcp endpoint for connector tooling.

    The tool list is taken from the registry exactly as tools/list returns it.
    """
    tools = [tool.model_dump() for tool in registry.list_tools()]
    return {
        "swagger": "2.0",
        "info": {
            "title": "Jokes MCP Server",
            "description": "Streamable MCP endpoint for Copilot Studio",
            "version": settings.server_version,
        },
        "host": settings.public_host,
        "basePath": "/",
        "schemes": ["https"],
        "paths": {
            "/mcp": {
                "post": {
                    "summary": "Streamable MCP endpoint",
                    "operationId": "InvokeMcp",
                    "x-ms-agentic-protocol": "mcp-streamable-1.0",
                    "responses": {"200": {"description": "Success"}},
                },
            },
        },
        "x-mcp-tools": tools,
    }
