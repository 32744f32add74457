"""Torznab indexer: capability negotiation and acceptance testing."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import httpx

from torznarr.core.indexers.base import DownloadProtocol, HttpIndexerBase, IndexerDefinition
from torznarr.core.indexers.capabilities import CapabilitiesProvider, try_get_capabilities
from torznarr.core.indexers.categories import get_field_select_options
from torznarr.core.indexers.newznab import NewznabRequestGenerator
from torznarr.core.indexers.parser import TorznabRssParser
from torznarr.core.indexers.settings import TorznabSettings
from torznarr.core.indexers.validation import ValidationFailure, add_if_not_none, has_errors
from torznarr.core.localization import LocalizationService

# Hard ceiling on results per page, whatever the indexer advertises
MAX_PAGE_SIZE = 100

# Jackett's aggregate endpoint, in its legacy and current form.
# NOTE: matched by substring, so a change of these upstream paths goes unnoticed.
JACKETT_ALL_PATHS = ("/torznab/all", "/api/v2.0/indexers/all/results/torznab")

# Identifiers usable for a tv-search; at least one of them is required
TV_SEARCH_ID_PARAMETERS = ("q", "tvdbid", "rid")
TV_SEARCH_EPISODE_PARAMETERS = ("season", "ep")


def build_settings(
    url: str,
    api_path: str | None = None,
    categories: list[int] | None = None,
    anime_categories: list[int] | None = None,
) -> TorznabSettings:
    """Settings for a built-in definition.

    Overrides left as None keep the defaults; an explicit empty list clears
    the categories. A blank ``api_path`` keeps the default path.
    """
    overrides: dict[str, Any] = {}
    if categories is not None:
        overrides["categories"] = list(categories)
    if anime_categories is not None:
        overrides["anime_categories"] = list(anime_categories)
    if api_path is not None and api_path.strip():
        overrides["api_path"] = api_path
    return TorznabSettings(base_url=url, **overrides)


class TorznabIndexer(HttpIndexerBase):
    """Torznab (torrent flavour of Newznab) indexer."""

    name = "Torznab"
    protocol: DownloadProtocol = "torrent"

    def __init__(
        self,
        settings: TorznabSettings,
        capabilities_provider: CapabilitiesProvider,
        http_client: httpx.AsyncClient,
        localization: LocalizationService,
        definition: IndexerDefinition | None = None,
    ) -> None:
        super().__init__(settings, http_client, localization, definition)
        self.capabilities_provider = capabilities_provider

    async def get_page_size(self) -> int:
        """Larger of the advertised default and maximum, capped at MAX_PAGE_SIZE.

        Falls back to MAX_PAGE_SIZE when capabilities are unavailable.
        """
        capabilities = await try_get_capabilities(self.capabilities_provider, self.settings)
        if capabilities is None:
            return MAX_PAGE_SIZE
        return min(
            MAX_PAGE_SIZE, max(capabilities.default_page_size, capabilities.max_page_size)
        )

    async def get_request_generator(self) -> NewznabRequestGenerator:
        """Create a request generator for this indexer.

        Returns:
            Generator using the negotiated page size and these settings
        """
        return NewznabRequestGenerator(
            self.capabilities_provider,
            settings=self.settings,
            page_size=await self.get_page_size(),
            definition=self.definition,
        )

    def get_parser(self) -> TorznabRssParser:
        """Return the parser for Torznab RSS responses."""
        return TorznabRssParser()

    @classmethod
    def default_definitions(cls) -> Iterator[IndexerDefinition]:
        """Yield the built-in Torznab definitions.

        Each call starts a fresh enumeration with new settings objects.

        Returns:
            Iterator of disabled IndexerDefinition instances
        """
        yield cls._get_definition("HD4Free.xyz", build_settings("http://hd4free.xyz"))
        yield cls._get_definition(
            "AnimeTosho Torrents",
            build_settings(
                "https://feed.animetosho.org",
                api_path="/nabapi",
                categories=[],
                anime_categories=[5070],
            ),
        )
        yield cls._get_definition(
            "Nyaa Pantsu",
            build_settings(
                "https://nyaa.pantsu.cat",
                api_path="/feed/torznab",
                categories=[],
                anime_categories=[5070],
            ),
        )

    @classmethod
    def _get_definition(cls, name: str, settings: TorznabSettings) -> IndexerDefinition:
        # Nothing runs against a built-in indexer until the user enables it
        return IndexerDefinition(
            name=name,
            implementation=cls.__name__,
            protocol=cls.protocol,
            settings=settings,
            enable_rss=False,
            enable_automatic_search=False,
            enable_interactive_search=False,
            supports_rss=cls.supports_rss,
            supports_search=cls.supports_search,
        )

    async def _test(self, failures: list[ValidationFailure]) -> None:
        """Run connectivity, aggregate endpoint and capabilities checks in order."""
        await super()._test(failures)

        # Secondary checks would only bury the connectivity problem
        if has_errors(failures):
            return

        add_if_not_none(failures, self._jackett_all())
        add_if_not_none(failures, await self._test_capabilities())

    async def _test_capabilities(self) -> ValidationFailure | None:
        """Check that the indexer can serve episode searches.

        Returns:
            None when basic search supports q, or tv-search supports an
            identifier plus season and ep; an error-level failure otherwise
        """
        loc = self.localization.get_localized_string
        try:
            capabilities = await self.capabilities_provider.get_capabilities(self.settings)
        except Exception as e:
            self.logger.warning("Unable to connect to indexer", error=str(e), exc_info=e)
            return ValidationFailure(
                message=loc("IndexerValidationUnableToConnect", {"exceptionMessage": str(e)})
            )

        search_params = capabilities.supported_search_parameters
        if search_params is not None and "q" in search_params:
            return None

        tv_params = capabilities.supported_tv_search_parameters
        if (
            tv_params is not None
            and any(param in tv_params for param in TV_SEARCH_ID_PARAMETERS)
            and all(param in tv_params for param in TV_SEARCH_EPISODE_PARAMETERS)
        ):
            return None

        return ValidationFailure(message=loc("IndexerValidationSearchParametersNotSupported"))

    def _jackett_all(self) -> ValidationFailure | None:
        """Warn when the settings point at Jackett's aggregate endpoint."""
        locations = (self.settings.api_path, self.settings.base_url)
        if not any(path in location for path in JACKETT_ALL_PATHS for location in locations):
            return None

        loc = self.localization.get_localized_string
        return ValidationFailure(
            field="api_path",
            message=loc("IndexerValidationJackettAllNotSupported"),
            is_warning=True,
            detailed_description=loc("IndexerValidationJackettAllNotSupportedHelpText"),
        )

    async def request_action(self, action: str, query: dict[str, str]) -> dict[str, Any]:
        """Answer a UI query about this indexer.

        Args:
            action: Action name; "newznabCategories" lists category options
            query: Query parameters of the UI request

        Returns:
            {"options": [...]} for newznabCategories, the base result otherwise
        """
        if action == "newznabCategories":
            # None selects the default category set
            capabilities = await try_get_capabilities(self.capabilities_provider, self.settings)
            categories = capabilities.categories if capabilities is not None else None
            return {"options": get_field_select_options(categories)}

        return await super().request_action(action, query)
