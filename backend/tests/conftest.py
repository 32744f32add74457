"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
from prometheus_client import REGISTRY

from torznarr.core.indexers.capabilities import NewznabCapabilities
from torznarr.core.indexers.settings import TorznabSettings
from torznarr.core.indexers.torznab import TorznabIndexer
from torznarr.core.localization import LocalizationService

CAPS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<caps>
  <server version="1.0" title="Test Indexer"/>
  <limits max="100" default="50"/>
  <searching>
    <search available="yes" supportedParams="q"/>
    <tv-search available="yes" supportedParams="q,season,ep,tvdbid"/>
    <movie-search available="no" supportedParams="q,imdbid"/>
  </searching>
  <categories>
    <category id="5000" name="TV">
      <subcat id="5040" name="TV/HD"/>
      <subcat id="5030" name="TV/SD"/>
    </category>
    <category id="2000" name="Movies"/>
    <category id="8000" name="Other"/>
  </categories>
</caps>
"""

RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:torznab="http://torznab.com/schemas/2015/feed">
  <channel>
    <title>Test Indexer</title>
    <item>
      <title>Show.Name.S01E02.720p.HDTV.x264-GRP</title>
      <guid>https://indexer.example/details/1</guid>
      <link>https://indexer.example/download/1.torrent</link>
      <comments>https://indexer.example/details/1</comments>
      <pubDate>Sat, 17 Oct 2026 12:00:00 +0000</pubDate>
      <enclosure url="https://indexer.example/download/1.torrent" length="1073741824"
                 type="application/x-bittorrent"/>
      <torznab:attr name="category" value="5040"/>
      <torznab:attr name="seeders" value="12"/>
      <torznab:attr name="leechers" value="3"/>
      <torznab:attr name="infohash" value="0123456789abcdef0123456789abcdef01234567"/>
      <torznab:attr name="tvdbid" value="12345"/>
    </item>
    <item>
      <title>Show.Name.S01E03.1080p.WEB-DL-GRP</title>
      <guid>https://indexer.example/details/2</guid>
      <link>magnet:?xt=urn:btih:abcdef</link>
      <torznab:attr name="size" value="2147483648"/>
      <torznab:attr name="seeders" value="5"/>
      <torznab:attr name="peers" value="9"/>
    </item>
  </channel>
</rss>
"""

EMPTY_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:torznab="http://torznab.com/schemas/2015/feed">
  <channel><title>Test Indexer</title></channel>
</rss>
"""


@pytest.fixture(autouse=True)
def reset_prometheus_registry():
    """Reset Prometheus registry so every test can create a fresh app."""
    for collector in list(REGISTRY._collector_to_names.keys()):
        REGISTRY.unregister(collector)
    yield
    for collector in list(REGISTRY._collector_to_names.keys()):
        REGISTRY.unregister(collector)


class FakeCapabilitiesProvider:
    """Capabilities provider returning a fixed snapshot or raising a fixed error."""

    def __init__(
        self,
        capabilities: NewznabCapabilities | None = None,
        error: Exception | None = None,
    ) -> None:
        self.capabilities = capabilities or NewznabCapabilities()
        self.error = error
        self.calls = 0

    async def get_capabilities(self, settings: TorznabSettings) -> NewznabCapabilities:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.capabilities


@pytest.fixture
def localization() -> LocalizationService:
    return LocalizationService()


@pytest.fixture
def settings() -> TorznabSettings:
    return TorznabSettings(base_url="https://indexer.example", api_key="secret")


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def rss_client(content: str = RSS_XML, status_code: int = 200) -> httpx.AsyncClient:
    """AsyncClient answering every request with the same feed."""
    return mock_client(lambda request: httpx.Response(status_code, text=content))


@pytest.fixture
def make_indexer(
    localization: LocalizationService,
    settings: TorznabSettings,
) -> Callable[..., TorznabIndexer]:
    """Factory for Torznab indexers with fake collaborators."""

    def _make(
        capabilities: NewznabCapabilities | None = None,
        error: Exception | None = None,
        client: httpx.AsyncClient | None = None,
        indexer_settings: TorznabSettings | None = None,
    ) -> TorznabIndexer:
        return TorznabIndexer(
            indexer_settings or settings,
            capabilities_provider=FakeCapabilitiesProvider(capabilities, error),
            http_client=client or rss_client(),
            localization=localization,
        )

    return _make
