"""Configuration loading and management."""

from jokes_mcp.config.loader import Settings, get_settings, load_provider_config

__all__ = ["Settings", "get_settings", "load_provider_config"]
