"""Errors raised while talking to a remote indexer."""

from __future__ import annotations


class IndexerError(Exception):
    """The indexer answered, but with something unusable."""


class ApiKeyError(IndexerError):
    """The indexer rejected the configured API key."""


class RequestLimitReachedError(IndexerError):
    """The indexer refused the request because a usage limit was hit."""


class UnsupportedFeedError(IndexerError):
    """The response is not a feed this client understands."""
