"""Torznab RSS response parser."""

from __future__ import annotations

from email.utils import parsedate_to_datetime
from xml.etree import ElementTree as ET

import structlog

from torznarr.core.indexers.exceptions import (
    ApiKeyError,
    IndexerError,
    RequestLimitReachedError,
    UnsupportedFeedError,
)
from torznarr.core.indexers.models import IndexerResponse, TorrentRelease

logger = structlog.get_logger("torznarr.indexers.parser")

TORZNAB_NS = "http://torznab.com/schemas/2015/feed"
_ATTR_TAG = f"{{{TORZNAB_NS}}}attr"


def parse_xml(content: str) -> ET.Element:
    """Parse an indexer XML document, mapping syntax errors to UnsupportedFeedError."""
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        raise UnsupportedFeedError(f"Response is not valid XML: {e}") from e


def raise_for_error_element(root: ET.Element) -> None:
    """Raise the matching IndexerError if ``root`` is a Newznab/Torznab <error>."""
    if root.tag != "error":
        return

    description = root.get("description", "")
    try:
        code = int(root.get("code", "0"))
    except ValueError:
        code = 0

    if 100 <= code <= 199:
        raise ApiKeyError(f"Invalid API key: {description}")
    if "request limit reached" in description.lower():
        raise RequestLimitReachedError(description)
    raise IndexerError(f"Torznab error detected: {description}")


def _to_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


class TorznabRssParser:
    """Turn a Torznab RSS page into TorrentRelease records.

    The parser is stateless; one instance can parse any number of pages.
    """

    def parse(self, response: IndexerResponse) -> list[TorrentRelease]:
        root = parse_xml(response.content)
        raise_for_error_element(root)

        channel = root.find("channel")
        if root.tag != "rss" or channel is None:
            raise UnsupportedFeedError(f"Expected an RSS feed, got <{root.tag}>")

        releases: list[TorrentRelease] = []
        for item in channel.iterfind("item"):
            release = self._parse_item(item)
            if release is None:
                logger.debug("Skipping item without title or link", url=response.request.url)
                continue
            releases.append(release)

        return releases

    def _parse_item(self, item: ET.Element) -> TorrentRelease | None:
        attrs: dict[str, list[str]] = {}
        for attr in item.iterfind(_ATTR_TAG):
            name = attr.get("name")
            if name:
                attrs.setdefault(name.lower(), []).append(attr.get("value", ""))

        def first(name: str) -> str | None:
            values = attrs.get(name)
            return values[0] if values else None

        title = (item.findtext("title") or "").strip()
        enclosure = item.find("enclosure")
        link = (item.findtext("link") or "").strip()
        download_url = enclosure.get("url", "") if enclosure is not None else ""
        download_url = download_url or link
        if not title or not download_url:
            return None

        magnet_url = first("magneturl")
        if not magnet_url and download_url.startswith("magnet:"):
            magnet_url = download_url

        size = _to_int(first("size"))
        if size is None and enclosure is not None:
            size = _to_int(enclosure.get("length"))
        if size is None:
            size = _to_int(item.findtext("size"))

        categories = [c for c in (_to_int(v) for v in attrs.get("category", [])) if c is not None]
        for element in item.iterfind("category"):
            category = _to_int(element.text)
            if category is not None and category not in categories:
                categories.append(category)

        seeders = _to_int(first("seeders"))
        peers = _to_int(first("peers"))
        leechers = _to_int(first("leechers"))
        if peers is None and seeders is not None and leechers is not None:
            peers = seeders + leechers

        publish_date = None
        pub_date = item.findtext("pubDate")
        if pub_date:
            try:
                publish_date = parsedate_to_datetime(pub_date)
            except (TypeError, ValueError):
                logger.debug("Unparseable pubDate", value=pub_date, title=title)

        return TorrentRelease(
            title=title,
            guid=(item.findtext("guid") or download_url).strip(),
            download_url=download_url,
            info_url=item.findtext("comments") or None,
            publish_date=publish_date,
            size=size or 0,
            categories=categories,
            seeders=seeders,
            peers=peers,
            info_hash=first("infohash"),
            magnet_url=magnet_url,
            tvdb_id=_to_int(first("tvdbid")),
        )
