"""Torznarr: Torznab indexer capability negotiation and validation."""

__version__ = "0.1.0"
