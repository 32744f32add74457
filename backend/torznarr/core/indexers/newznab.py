"""Newznab/Torznab search request generation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib import parse as urllib_parse

import structlog

from torznarr.core.indexers.capabilities import CapabilitiesProvider, NewznabCapabilities
from torznarr.core.indexers.models import EpisodeSearchCriteria, IndexerRequest
from torznarr.core.indexers.settings import TorznabSettings

if TYPE_CHECKING:
    from torznarr.core.indexers.base import IndexerDefinition

logger = structlog.get_logger("torznarr.indexers.newznab")

# One paged query: page 0, page 1, ... Fetching stops at the first short page.
PagedQuery = list[IndexerRequest]

DEFAULT_MAX_PAGES = 30


class NewznabRequestGenerator:
    """Build API requests from settings, negotiated capabilities and page size."""

    def __init__(
        self,
        capabilities_provider: CapabilitiesProvider,
        settings: TorznabSettings,
        page_size: int,
        definition: IndexerDefinition | None = None,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        """Initialize the request generator.

        Args:
            capabilities_provider: Source of the indexer's capabilities
            settings: Connection settings of the indexer
            page_size: Results per page; 0 disables paging
            definition: Definition the settings belong to (for logging)
            max_pages: Upper bound of pages requested per query
        """
        self.capabilities_provider = capabilities_provider
        self.settings = settings
        self.page_size = page_size
        self.definition = definition
        self.max_pages = max_pages
        self.logger = logger.bind(indexer=definition.name if definition else settings.base_url)

    async def get_recent_requests(self) -> list[PagedQuery]:
        """Requests for the RSS sync: newest releases in all configured categories."""
        settings = self.settings
        categories = list(dict.fromkeys([*settings.categories, *settings.anime_categories]))
        if not categories:
            return []

        capabilities = await self.capabilities_provider.get_capabilities(self.settings)
        search_type = "tvsearch" if capabilities.supports_tv_search else "search"
        return [self._paged(search_type, categories, {})]

    async def get_search_requests(self, criteria: EpisodeSearchCriteria) -> list[PagedQuery]:
        """Requests for an episode or season search.

        Returns an empty list when the indexer's capabilities cannot express
        the search.
        """
        capabilities = await self.capabilities_provider.get_capabilities(self.settings)

        if criteria.is_anime:
            return self._anime_requests(criteria, capabilities)

        categories = self.settings.categories
        tv_params = capabilities.supported_tv_search_parameters

        if tv_params is None:
            basic = capabilities.supported_search_parameters or []
            if "q" not in basic:
                self.logger.debug("Indexer supports neither tv-search nor text search")
                return []
            return [self._paged("search", categories, {"q": self._text_query(criteria)})]

        episode_params: dict[str, Any] = {}
        if "season" in tv_params:
            episode_params["season"] = criteria.season
        if criteria.episode is not None and "ep" in tv_params:
            episode_params["ep"] = criteria.episode

        if criteria.tvdb_id and "tvdbid" in tv_params:
            params = {"tvdbid": criteria.tvdb_id, **episode_params}
        elif criteria.tvrage_id and "rid" in tv_params:
            params = {"rid": criteria.tvrage_id, **episode_params}
        elif "q" in tv_params:
            params = {"q": criteria.series_title, **episode_params}
        else:
            self.logger.debug(
                "No usable identifier for tv-search",
                supported=tv_params,
                tvdb_id=criteria.tvdb_id,
            )
            return []

        return [self._paged("tvsearch", categories, params)]

    def _anime_requests(
        self, criteria: EpisodeSearchCriteria, capabilities: NewznabCapabilities
    ) -> list[PagedQuery]:
        if not self.settings.anime_categories:
            return []
        if "q" not in (capabilities.supported_search_parameters or []):
            return []

        query = criteria.series_title
        if criteria.absolute_episode is not None:
            query = f"{query} {criteria.absolute_episode:02d}"
        return [self._paged("search", self.settings.anime_categories, {"q": query})]

    @staticmethod
    def _text_query(criteria: EpisodeSearchCriteria) -> str:
        if criteria.episode is None:
            return f"{criteria.series_title} S{criteria.season:02d}"
        return f"{criteria.series_title} S{criteria.season:02d}E{criteria.episode:02d}"

    def _paged(self, search_type: str, categories: list[int], params: dict[str, Any]) -> PagedQuery:
        if self.page_size == 0:
            return [self._build_request(search_type, categories, params)]

        return [
            self._build_request(
                search_type,
                categories,
                {**params, "limit": self.page_size, "offset": page * self.page_size},
            )
            for page in range(self.max_pages)
        ]

    def _build_request(
        self, search_type: str, categories: list[int], params: dict[str, Any]
    ) -> IndexerRequest:
        """Build a Newznab API request URL."""
        all_params: dict[str, Any] = {"t": search_type}
        if categories:
            all_params["cat"] = ",".join(str(cat) for cat in categories)
        all_params["extended"] = 1
        if self.settings.api_key:
            all_params["apikey"] = self.settings.api_key
        all_params.update(params)

        url = f"{self.settings.api_url}?{urllib_parse.urlencode(all_params)}"
        if self.settings.additional_parameters:
            url += self.settings.additional_parameters

        return IndexerRequest(url=url)
