"""Discovery of what a remote Newznab/Torznab indexer supports (t=caps)."""

from __future__ import annotations

from typing import Protocol
from urllib import parse as urllib_parse
from xml.etree import ElementTree as ET

import httpx
import structlog
from pydantic import BaseModel, Field

from torznarr.core.cache import AsyncTTLCache, InFlightDeduper
from torznarr.core.indexers.exceptions import UnsupportedFeedError
from torznarr.core.indexers.parser import parse_xml, raise_for_error_element
from torznarr.core.indexers.settings import TorznabSettings
from torznarr.core.metrics import capabilities_requests_total

logger = structlog.get_logger("torznarr.indexers.capabilities")


class NewznabCategory(BaseModel):
    """One entry of an indexer's category taxonomy."""

    id: int
    name: str
    subcategories: list[NewznabCategory] = Field(default_factory=list)


class NewznabCapabilities(BaseModel):
    """Snapshot of a remote indexer's self-reported capabilities.

    A search parameter list of None means the indexer declared that search
    mode unavailable.
    """

    default_page_size: int = 100
    max_page_size: int = 100
    supported_search_parameters: list[str] | None = Field(default_factory=lambda: ["q"])
    supported_tv_search_parameters: list[str] | None = Field(
        default_factory=lambda: ["q", "rid", "season", "ep"]
    )
    supported_movie_search_parameters: list[str] | None = None
    supports_aggregate_id_search: bool = False
    categories: list[NewznabCategory] = Field(default_factory=list)

    @property
    def supports_tv_search(self) -> bool:
        return self.supported_tv_search_parameters is not None


class CapabilitiesProvider(Protocol):
    """Anything that can resolve the capabilities of an indexer."""

    async def get_capabilities(self, settings: TorznabSettings) -> NewznabCapabilities: ...


def _parse_search_element(
    element: ET.Element | None, default: list[str] | None
) -> list[str] | None:
    if element is None or element.get("available") != "yes":
        return None
    supported = element.get("supportedParams")
    if supported is None:
        return default
    return [param.strip() for param in supported.split(",") if param.strip()]


def _parse_category(element: ET.Element) -> NewznabCategory | None:
    try:
        category_id = int(element.get("id", ""))
    except ValueError:
        return None
    category = NewznabCategory(id=category_id, name=element.get("name", ""))
    for subcat_element in element.iterfind("subcat"):
        subcat = _parse_category(subcat_element)
        if subcat is not None:
            category.subcategories.append(subcat)
    return category


def parse_capabilities(xml_text: str) -> NewznabCapabilities:
    """Parse a t=caps document.

    Elements that are missing leave the protocol defaults in place.

    Raises:
        ApiKeyError, RequestLimitReachedError, IndexerError: for <error> documents
        UnsupportedFeedError: for malformed or non-caps documents
    """
    root = parse_xml(xml_text)
    raise_for_error_element(root)
    if root.tag != "caps":
        raise UnsupportedFeedError(f"Expected a capabilities document, got <{root.tag}>")

    capabilities = NewznabCapabilities()

    limits = root.find("limits")
    if limits is not None:
        try:
            max_page_size = int(limits.get("max") or 0)
            default_page_size = int(limits.get("default") or 0)
        except ValueError as e:
            raise UnsupportedFeedError(f"Invalid limits in capabilities: {e}") from e
        # Limits that are not positive keep the protocol default
        if max_page_size > 0:
            capabilities.max_page_size = max_page_size
        if default_page_size > 0:
            capabilities.default_page_size = default_page_size

    searching = root.find("searching")
    if searching is not None:
        capabilities.supported_search_parameters = _parse_search_element(
            searching.find("search"), ["q"]
        )
        tv_search = searching.find("tv-search")
        capabilities.supported_tv_search_parameters = _parse_search_element(
            tv_search, ["q", "rid", "season", "ep"]
        )
        if tv_search is not None:
            capabilities.supports_aggregate_id_search = (
                tv_search.get("supportsAggregateIdSearch") == "yes"
            )
        capabilities.supported_movie_search_parameters = _parse_search_element(
            searching.find("movie-search"), ["q"]
        )

    categories = root.find("categories")
    if categories is not None:
        for element in categories.iterfind("category"):
            category = _parse_category(element)
            if category is not None:
                capabilities.categories.append(category)

    return capabilities


class NewznabCapabilitiesProvider:
    """Fetch capabilities over HTTP and cache them per connection identity.

    Failed fetches are never cached: the next caller retries, and a snapshot
    that is already cached stays untouched.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        ttl_seconds: int = 86400 * 7,
        max_entries: int = 512,
        cache: AsyncTTLCache[str, NewznabCapabilities] | None = None,
    ) -> None:
        self.client = client
        if cache is None:
            cache = AsyncTTLCache(default_ttl_seconds=ttl_seconds, max_entries=max_entries)
        self._cache: AsyncTTLCache[str, NewznabCapabilities] = cache
        self._inflight: InFlightDeduper[str, NewznabCapabilities] = InFlightDeduper()

    async def get_capabilities(self, settings: TorznabSettings) -> NewznabCapabilities:
        key = settings.connection_key
        cached = await self._cache.get(key)
        if cached is not None:
            capabilities_requests_total.labels(outcome="cache_hit").inc()
            return cached

        async def _fetch_and_store() -> NewznabCapabilities:
            capabilities = await self.fetch_capabilities(settings)
            await self._cache.set(key, capabilities)
            return capabilities

        return await self._inflight.run(key, _fetch_and_store)

    async def invalidate(self, settings: TorznabSettings) -> None:
        """Drop the cached snapshot for these settings, if any."""
        await self._cache.delete(settings.connection_key)

    async def fetch_capabilities(self, settings: TorznabSettings) -> NewznabCapabilities:
        """Download and parse capabilities, bypassing the cache."""
        params = {"t": "caps"}
        if settings.api_key:
            params["apikey"] = settings.api_key
        url = f"{settings.api_url}?{urllib_parse.urlencode(params)}"
        # Mask API key in logged URL
        log_url = url.split("apikey=")[0] + "apikey=***" if "apikey=" in url else url

        try:
            logger.debug("Fetching indexer capabilities", url=log_url)
            response = await self.client.get(url)
            response.raise_for_status()
            capabilities = parse_capabilities(response.text)
        except UnsupportedFeedError as e:
            capabilities_requests_total.labels(outcome="failed").inc()
            logger.warning("Failed to parse indexer capabilities", url=log_url, error=str(e))
            raise
        except Exception as e:
            capabilities_requests_total.labels(outcome="failed").inc()
            logger.warning(
                "Failed to get indexer capabilities",
                url=log_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        capabilities_requests_total.labels(outcome="fetched").inc()
        logger.debug(
            "Indexer capabilities fetched",
            url=log_url,
            categories=len(capabilities.categories),
            max_page_size=capabilities.max_page_size,
        )
        return capabilities


async def try_get_capabilities(
    provider: CapabilitiesProvider, settings: TorznabSettings
) -> NewznabCapabilities | None:
    """Best-effort capabilities lookup.

    Returns None instead of raising, for callers that have a safe default
    (page size, category options).
    """
    try:
        return await provider.get_capabilities(settings)
    except Exception as e:
        logger.debug(
            "Capabilities unavailable, using defaults",
            base_url=settings.base_url,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None
