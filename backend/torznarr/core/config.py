"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from:
    1. .env file
    2. Environment variables - override .env values
    3. Init settings (values passed to Settings()) - highest priority

    All settings are prefixed with TORZNARR_ (e.g., TORZNARR_ENV=production).

    See: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TORZNARR_",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Application
    env: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Application environment (development, production, testing)",
    )

    # Host settings
    host_bind_address: str = Field(
        default="127.0.0.1",
        description="Host address to bind the server to",
    )

    host_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port number to bind the server to",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    logs_dir: Path | None = Field(
        default=None,
        description="Directory for JSON log files; stdout only when unset",
    )

    # Indexer HTTP traffic
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for requests to remote indexers",
    )

    user_agent: str = Field(
        default="Torznarr/0.1.0",
        description="User-Agent header sent to remote indexers",
    )

    # Capabilities cache
    capabilities_cache_ttl_seconds: int = Field(
        default=86400 * 7,  # 7 days
        ge=0,
        description="How long a fetched capabilities document stays cached",
    )

    capabilities_cache_max_entries: int = Field(
        default=512,
        ge=1,
        description="Maximum number of indexer connections with cached capabilities",
    )

    @property
    def is_debug(self) -> bool:
        """Check if running in debug/development mode."""
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.env == "testing"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings instance.

    Creates and caches the settings instance on first call.
    Subsequent calls return the cached instance.

    Returns:
        Settings instance
    """
    return Settings()


def reload_settings() -> Settings:
    """Reload settings from all sources (.env, env vars).

    Clears the cache and creates a new Settings instance.

    Returns:
        New Settings instance
    """
    get_settings.cache_clear()
    return get_settings()
