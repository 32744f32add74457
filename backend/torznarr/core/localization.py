"""User-facing message lookup for indexer validation results."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import structlog

logger = structlog.get_logger("torznarr.localization")

_TOKEN_PATTERN = re.compile(r"\{(\w+)\}")

# English strings, keyed the same way as the UI string tables
EN_STRINGS: dict[str, str] = {
    "IndexerValidationSearchParametersNotSupported": (
        "Indexer does not support required search parameters"
    ),
    "IndexerValidationUnableToConnect": (
        "Unable to connect to indexer: {exceptionMessage}. "
        "Check the log surrounding this error for details"
    ),
    "IndexerValidationUnableToConnectHttpError": (
        "Unable to connect to indexer, please check your DNS settings and ensure "
        "IPv6 is working or disabled. {exceptionMessage}."
    ),
    "IndexerValidationUnableToConnectTimeout": (
        "Unable to connect to indexer, possibly due to a timeout. "
        "Try again or check your network settings. {exceptionMessage}."
    ),
    "IndexerValidationJackettAllNotSupported": (
        "Jackett's all endpoint is not supported, please add indexers individually"
    ),
    "IndexerValidationJackettAllNotSupportedHelpText": (
        "Jackett's all endpoint is not supported, please add indexers individually. "
        "Searches against it fan out to every configured indexer, ignore per-indexer "
        "capabilities and hide which indexer returned a release."
    ),
    "IndexerValidationInvalidApiKey": "Invalid API Key",
    "IndexerValidationRequestLimitReached": "Request limit reached: {exceptionMessage}",
    "IndexerValidationFeedNotSupported": "Indexer feed is not supported: {exceptionMessage}",
    "IndexerValidationNoRssFeedQueryAvailable": (
        "No RSS feed query available. This may be an issue with the indexer "
        "or your indexer category settings."
    ),
    "IndexerValidationNoResultsInConfiguredCategories": (
        "Query successful, but no results in the configured categories were returned "
        "from your indexer. This may be an issue with the indexer or your indexer "
        "category settings."
    ),
}


class LocalizationService:
    """Look up user-facing strings by key.

    Unknown keys come back unchanged so a missing translation is visible
    rather than fatal.
    """

    def __init__(self, strings: Mapping[str, str] | None = None) -> None:
        self._strings = dict(EN_STRINGS if strings is None else strings)

    def get_localized_string(self, key: str, tokens: Mapping[str, Any] | None = None) -> str:
        """Return the string for ``key`` with ``{name}`` placeholders substituted.

        Placeholders without a matching token are left as written.
        """
        text = self._strings.get(key)
        if text is None:
            logger.debug("Missing localized string", key=key)
            return key

        if not tokens:
            return text

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1)
            return str(tokens[name]) if name in tokens else match.group(0)

        return _TOKEN_PATTERN.sub(_replace, text)
