"""Data models shared by request generation, fetching and parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class IndexerRequest:
    """A single HTTP GET against an indexer API."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IndexerResponse:
    """Raw answer to an IndexerRequest, handed to a parser."""

    request: IndexerRequest
    content: str
    status_code: int = 200


@dataclass(frozen=True)
class EpisodeSearchCriteria:
    """What the application is looking for in an episode or season search.

    ``episode`` of None means a whole-season search. ``absolute_episode`` is
    only used for anime searches.
    """

    series_title: str
    season: int
    episode: int | None = None
    tvdb_id: int | None = None
    tvrage_id: int | None = None
    is_anime: bool = False
    absolute_episode: int | None = None


class TorrentRelease(BaseModel):
    """A release parsed out of a Torznab feed."""

    title: str
    guid: str
    download_url: str
    info_url: str | None = None
    publish_date: datetime | None = None
    size: int = 0
    categories: list[int] = Field(default_factory=list)
    seeders: int | None = None
    peers: int | None = None
    info_hash: str | None = None
    magnet_url: str | None = None
    tvdb_id: int | None = None
    indexer: str | None = None
