"""Search indexers and the Torznab capability negotiation engine."""

from torznarr.core.indexers.base import HttpIndexerBase, IndexerDefinition, SearchIndexer
from torznarr.core.indexers.capabilities import (
    CapabilitiesProvider,
    NewznabCapabilities,
    NewznabCapabilitiesProvider,
    NewznabCategory,
)
from torznarr.core.indexers.settings import TorznabSettings
from torznarr.core.indexers.torznab import TorznabIndexer, build_settings
from torznarr.core.indexers.validation import ValidationFailure, has_errors

__all__ = [
    "CapabilitiesProvider",
    "HttpIndexerBase",
    "IndexerDefinition",
    "NewznabCapabilities",
    "NewznabCapabilitiesProvider",
    "NewznabCategory",
    "SearchIndexer",
    "TorznabIndexer",
    "TorznabSettings",
    "ValidationFailure",
    "build_settings",
    "has_errors",
]
