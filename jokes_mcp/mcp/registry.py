"""Tool registry for managing MCP tools."""

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from jokes_mcp.mcp.errors import DuplicateToolError
from jokes_mcp.mcp.models import TextContent, Tool

logger = logging.getLogger(__name__)

# Type alias for tool handlers
ToolHandler = Callable[[dict[str, Any]], Awaitable[list[TextContent]]]


@dataclass(frozen=True)
class RegisteredTool:
    """A registered tool: its definition paired with its handler."""

    definition: Tool
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.definition.inputSchema


class ToolRegistry:
    """
    Registry for MCP tools with plugin-style provider loading.

    Tools are registered once at startup and only read afterwards, so the
    registry can be shared by every connection without locking.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}
        self._providers: set[str] = set()

    def register(self, definition: Tool, handler: ToolHandler) -> None:
        """Register a tool; raises DuplicateToolError if the name is taken."""
        if definition.name in self._tools:
            raise DuplicateToolError(f"Tool '{definition.name}' is already registered")
        self._tools[definition.name] = RegisteredTool(definition=definition, handler=handler)
        logger.info(f"Registered tool: {definition.name}")

    def lookup(self, name: str) -> RegisteredTool | None:
        """Get a tool by name, or None if it is not registered."""
        return self._tools.get(name)

    def list_tools(self) -> list[Tool]:
        """List all registered tool definitions in registration order."""
        return [tool.definition for tool in self._tools.values()]

    def load_provider(self, provider_name: str) -> bool:
        """
        Load a provider module and register its tools.

        Providers are expected to be in jokes_mcp/tools/<provider_name>/
        and have a register_tools(registry) function.
        """
        if provider_name in self._providers:
            logger.debug(f"Provider '{provider_name}' already loaded")
            return True

        module_path = f"jokes_mcp.tools.{provider_name}.tools"
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.warning(f"Could not import provider '{provider_name}': {e}")
            return False

        if not hasattr(module, "register_tools"):
            logger.warning(f"Provider '{provider_name}' has no register_tools function")
            return False

        # DuplicateToolError is a configuration error and propagates
        module.register_tools(self)
        self._providers.add(provider_name)
        logger.info(f"Loaded provider: {provider_name}")
        return True

    def load_providers(self, provider_names: list[str]) -> dict[str, bool]:
        """Load multiple providers, returning success status for each."""
        results = {}
        for name in provider_names:
            results[name] = self.load_provider(name)
        return results

    @property
    def tool_count(self) -> int:
        """Return the number of registered tools."""
        return len(self._tools)

    @property
    def provider_count(self) -> int:
        """Return the number of loaded providers."""
        return len(self._providers)


# Global registry instance
_registry: ToolRegistry | None = None


def get_registry() -> ToolRegistry:
    """Get the global tool registry, creating it if necessary."""
    global _registry
    if _registry is None:
        _registry = ToolRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (useful for testing)."""
    global _registry
    _registry = None
