"""Utility modules: logging and HTTP client."""

from jokes_mcp.utils.logging import setup_logging, get_logger
from jokes_mcp.utils.http import get_shared_client, close_shared_client

__all__ = [
    "setup_logging",
    "get_logger",
    "get_shared_client",
    "close_shared_client",
]
