"""Tests for Torznab connection settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from torznarr.core.indexers.settings import TorznabSettings


def test_defaults() -> None:
    """Test that only the base URL is required."""
    settings = TorznabSettings(base_url="https://indexer.example")

    assert settings.api_path == "/api"
    assert settings.api_key is None
    assert settings.categories == [5030, 5040]
    assert settings.anime_categories == []
    assert settings.additional_parameters is None


def test_default_category_lists_are_not_shared() -> None:
    """Test that each instance gets its own category list."""
    first = TorznabSettings(base_url="https://a.example")
    second = TorznabSettings(base_url="https://b.example")

    first.categories.append(5070)

    assert second.categories == [5030, 5040]


@pytest.mark.parametrize("base_url", ["", "   ", "indexer.example", "ftp://indexer.example"])
def test_invalid_base_url(base_url: str) -> None:
    """Test that the base URL must be an absolute http(s) URL."""
    with pytest.raises(ValidationError):
        TorznabSettings(base_url=base_url)


def test_blank_values_normalized() -> None:
    """Test that blank optional strings are treated as unset."""
    settings = TorznabSettings(
        base_url=" https://indexer.example ", api_path=" ", api_key="  ", additional_parameters=""
    )

    assert settings.base_url == "https://indexer.example"
    assert settings.api_path == "/api"
    assert settings.api_key is None
    assert settings.additional_parameters is None


def test_api_path_must_be_absolute() -> None:
    """Test that a relative API path is rejected."""
    with pytest.raises(ValidationError, match="must start with /"):
        TorznabSettings(base_url="https://indexer.example", api_path="api")


@pytest.mark.parametrize("value", ["minsize=1", "&minsize", "&=1", "&a=1&&b=2"])
def test_invalid_additional_parameters(value: str) -> None:
    """Test that additional parameters must be &name=value pairs."""
    with pytest.raises(ValidationError):
        TorznabSettings(base_url="https://indexer.example", additional_parameters=value)


def test_api_url_and_connection_key() -> None:
    """Test derived URL and cache identity."""
    settings = TorznabSettings(
        base_url="https://indexer.example/", api_path="/torznab/", api_key="secret"
    )

    assert settings.api_url == "https://indexer.example/torznab"
    assert settings.connection_key == "https://indexer.example/\n/torznab/\nsecret"

    keyless = settings.model_copy(update={"api_key": None})
    assert keyless.connection_key != settings.connection_key


def test_connection_key_distinguishes_path_from_api_key() -> None:
    """Test that moving characters between api_path and api_key changes the key."""
    with_key = TorznabSettings(base_url="https://x.example", api_path="/api", api_key="x")
    longer_path = TorznabSettings(base_url="https://x.example", api_path="/apix")

    assert with_key.connection_key != longer_path.connection_key
