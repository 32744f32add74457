"""Connection settings for one Torznab indexer instance."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

DEFAULT_API_PATH = "/api"

# TV/SD and TV/HD
DEFAULT_CATEGORIES = (5030, 5040)

_ADDITIONAL_PARAMETERS_PATTERN = re.compile(r"^(&[^&=]+=[^&]*)+$")


class TorznabSettings(BaseModel):
    """Connection configuration for a Torznab indexer."""

    base_url: str = Field(..., description="Root endpoint of the indexer")
    api_path: str = Field(DEFAULT_API_PATH, description="Path to the API, usually /api")
    api_key: str | None = Field(None, description="API key, if the indexer requires one")
    categories: list[int] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES),
        description="Categories searched by default; empty means no restriction",
    )
    anime_categories: list[int] = Field(
        default_factory=list,
        description="Categories used for anime searches",
    )
    additional_parameters: str | None = Field(
        None,
        description="Extra query parameters appended to every request, e.g. &extended=1",
    )

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("URL is required")
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("URL must be an absolute http(s) URL")
        return value

    @field_validator("api_path", mode="before")
    @classmethod
    def _validate_api_path(cls, value: str | None) -> str:
        if value is None or not str(value).strip():
            return DEFAULT_API_PATH
        value = str(value).strip()
        if not value.startswith("/"):
            raise ValueError("API path must start with /")
        return value

    @field_validator("api_key", "additional_parameters")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("additional_parameters")
    @classmethod
    def _validate_additional_parameters(cls, value: str | None) -> str | None:
        if value is not None and not _ADDITIONAL_PARAMETERS_PATTERN.match(value):
            raise ValueError("Additional parameters must look like &name=value")
        return value

    @property
    def connection_key(self) -> str:
        """Identity of the remote endpoint, used to key capability caches."""
        # Newline never occurs in a URL
        return "\n".join((self.base_url, self.api_path, self.api_key or ""))

    @property
    def api_url(self) -> str:
        """Base URL joined with the API path, without a query string."""
        return f"{self.base_url.rstrip('/')}{self.api_path.rstrip('/')}"
