"""Configuration loading from environment and YAML files."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

# Providers registered when no YAML config is found
DEFAULT_PROVIDERS = ["chuck_norris", "dad_jokes", "meta"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Timeouts
    default_timeout: int = 30

    # Streaming transport
    streaming_enabled: bool = True
    keepalive_interval: float = 30.0  # seconds between SSE ping comments; 0 disables
    session_timeout: int = 1800  # idle seconds before a session is dropped
    session_cleanup_interval: int = 60

    # Server info
    server_name: str = "jokes-mcp"
    server_version: str = "2.0.0"
    server_description: str = "Chuck Norris & Dad jokes exposed as MCP tools"

    # Host advertised in the Swagger document
    public_host: str = "localhost:8000"

    # Host and port
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_provider_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load provider configuration from YAML file.

    Args:
        config_path: Path to the config file. If None, uses default location.

    Returns:
        Dictionary with configuration data.
    """
    default = {"enabled_providers": list(DEFAULT_PROVIDERS)}

    if config_path is None:
        possible_paths = [
            Path("config/providers.yaml"),
            Path(__file__).parent.parent.parent / "config" / "providers.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            return default

    config_path = Path(config_path)
    if not config_path.exists():
        return default

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return config


def get_enabled_providers(config: dict[str, Any] | None = None) -> list[str]:
    """Get list of enabled provider names."""
    if config is None:
        config = load_provider_config()
    return config.get("enabled_providers", list(DEFAULT_PROVIDERS))
