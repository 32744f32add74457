"""Tests for localized message lookup."""

from __future__ import annotations

from torznarr.core.localization import EN_STRINGS, LocalizationService


def test_known_key() -> None:
    """Test that a known key returns the English text."""
    service = LocalizationService()

    assert service.get_localized_string("IndexerValidationInvalidApiKey") == "Invalid API Key"


def test_tokens_substituted() -> None:
    """Test that {exceptionMessage} is replaced by the token value."""
    service = LocalizationService()

    message = service.get_localized_string(
        "IndexerValidationUnableToConnect", {"exceptionMessage": "Connection refused"}
    )

    assert message.startswith("Unable to connect to indexer: Connection refused.")


def test_missing_token_left_in_place() -> None:
    """Test that placeholders without a token stay visible."""
    service = LocalizationService()

    message = service.get_localized_string("IndexerValidationUnableToConnect", {"other": 1})

    assert "{exceptionMessage}" in message


def test_unknown_key_returned_unchanged() -> None:
    """Test that a missing translation falls back to the key itself."""
    service = LocalizationService()

    assert service.get_localized_string("NoSuchKey") == "NoSuchKey"


def test_custom_string_table() -> None:
    """Test that a custom table replaces the English strings."""
    service = LocalizationService({"Greeting": "Hallo {name}"})

    assert service.get_localized_string("Greeting", {"name": "Welt"}) == "Hallo Welt"
    assert service.get_localized_string("IndexerValidationInvalidApiKey") == (
        "IndexerValidationInvalidApiKey"
    )


def test_validation_keys_present() -> None:
    """Test that every key used by indexer validation has English text."""
    for key in (
        "IndexerValidationSearchParametersNotSupported",
        "IndexerValidationUnableToConnect",
        "IndexerValidationJackettAllNotSupported",
        "IndexerValidationJackettAllNotSupportedHelpText",
    ):
        assert EN_STRINGS[key]
