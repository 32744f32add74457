"""Base classes for search indexers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any, Literal

import httpx
import structlog
from pydantic import BaseModel

from torznarr.core.indexers.exceptions import (
    ApiKeyError,
    IndexerError,
    RequestLimitReachedError,
    UnsupportedFeedError,
)
from torznarr.core.indexers.models import (
    EpisodeSearchCriteria,
    IndexerRequest,
    IndexerResponse,
    TorrentRelease,
)
from torznarr.core.indexers.newznab import NewznabRequestGenerator, PagedQuery
from torznarr.core.indexers.parser import TorznabRssParser
from torznarr.core.indexers.settings import TorznabSettings
from torznarr.core.indexers.validation import ValidationFailure, add_if_not_none, has_errors
from torznarr.core.localization import LocalizationService
from torznarr.core.metrics import indexer_validations_total

DownloadProtocol = Literal["usenet", "torrent"]


class IndexerDefinition(BaseModel):
    """A configured (or ready-to-configure) indexer instance."""

    name: str
    implementation: str
    protocol: DownloadProtocol
    settings: TorznabSettings
    enable_rss: bool = True
    enable_automatic_search: bool = True
    enable_interactive_search: bool = True
    supports_rss: bool = True
    supports_search: bool = True


class SearchIndexer(ABC):
    """What every indexer protocol variant provides to the application."""

    name: str
    protocol: DownloadProtocol
    supports_rss: bool = True
    supports_search: bool = True

    @abstractmethod
    async def get_request_generator(self) -> NewznabRequestGenerator:
        """Request generator configured for this indexer."""

    @abstractmethod
    def get_parser(self) -> TorznabRssParser:
        """Parser for this indexer's responses."""

    @abstractmethod
    async def test(self) -> list[ValidationFailure]:
        """Run the acceptance test; an error-level failure means do not enable."""

    @abstractmethod
    async def request_action(self, action: str, query: dict[str, str]) -> dict[str, Any]:
        """Answer a named UI query about this indexer."""

    @classmethod
    @abstractmethod
    def default_definitions(cls) -> Iterator[IndexerDefinition]:
        """Built-in definitions offered when adding an indexer of this kind."""


class HttpIndexerBase(SearchIndexer):
    """Indexer that pages through an HTTP API via a request generator and parser."""

    def __init__(
        self,
        settings: TorznabSettings,
        http_client: httpx.AsyncClient,
        localization: LocalizationService,
        definition: IndexerDefinition | None = None,
    ) -> None:
        """Initialize the indexer.

        Args:
            settings: Connection settings of the indexer
            http_client: Shared client used for all indexer traffic
            localization: Source of user-facing failure messages
            definition: Saved definition, when the indexer has one
        """
        self.settings = settings
        self.http_client = http_client
        self.localization = localization
        self.definition = definition
        self.logger = structlog.get_logger(f"torznarr.indexers.{self.name.lower()}").bind(
            indexer=definition.name if definition else settings.base_url
        )

    async def get_page_size(self) -> int:
        """Results requested per page; 0 disables paging."""
        return 0

    async def fetch_page(self, request: IndexerRequest) -> list[TorrentRelease]:
        """Fetch and parse a single page.

        Raises:
            httpx.HTTPError: transport failures and non-2xx answers
            IndexerError: the indexer answered with an error document
        """
        response = await self.http_client.get(request.url, headers=request.headers)
        response.raise_for_status()
        releases = self.get_parser().parse(
            IndexerResponse(
                request=request, content=response.text, status_code=response.status_code
            )
        )
        indexer_name = self.definition.name if self.definition else self.name
        for release in releases:
            release.indexer = indexer_name
        return releases

    async def fetch_recent(self) -> list[TorrentRelease]:
        """Newest releases (RSS sync)."""
        generator = await self.get_request_generator()
        return await self._fetch_queries(await generator.get_recent_requests(), generator.page_size)

    async def fetch(self, criteria: EpisodeSearchCriteria) -> list[TorrentRelease]:
        """Releases matching an episode/season search."""
        generator = await self.get_request_generator()
        queries = await generator.get_search_requests(criteria)
        return await self._fetch_queries(queries, generator.page_size)

    async def _fetch_queries(
        self, queries: list[PagedQuery], page_size: int
    ) -> list[TorrentRelease]:
        """Fetch every page of every query.

        A query stops at its first short page. Fetch errors are logged and
        the releases collected so far are returned.

        Args:
            queries: Paged queries from the request generator
            page_size: Results per page; 0 means a single page per query
        """
        releases: list[TorrentRelease] = []
        try:
            for query in queries:
                for request in query:
                    page = await self.fetch_page(request)
                    releases.extend(page)
                    if page_size == 0 or len(page) < page_size:
                        break
        except (IndexerError, httpx.HTTPError) as e:
            self.logger.warning(
                "Fetching releases failed",
                error=str(e),
                error_type=type(e).__name__,
                collected=len(releases),
            )
        return releases

    async def test(self) -> list[ValidationFailure]:
        """Run the acceptance test and record its outcome.

        Returns:
            Collected failures; empty when every check passed
        """
        failures: list[ValidationFailure] = []
        await self._test(failures)

        if has_errors(failures):
            result = "failed"
        elif failures:
            result = "warning"
        else:
            result = "passed"
        indexer_validations_total.labels(implementation=self.name, result=result).inc()
        self.logger.info("Indexer test completed", result=result, failures=len(failures))
        return failures

    async def _test(self, failures: list[ValidationFailure]) -> None:
        """Append the result of each check to failures."""
        add_if_not_none(failures, await self._test_connection())

    async def _test_connection(self) -> ValidationFailure | None:
        """Fetch the first RSS page and make sure it parses and is not empty."""
        loc = self.localization.get_localized_string
        try:
            generator = await self.get_request_generator()
            queries = await generator.get_recent_requests()
            first_request = next((query[0] for query in queries if query), None)
            if first_request is None:
                return ValidationFailure(message=loc("IndexerValidationNoRssFeedQueryAvailable"))

            releases = await self.fetch_page(first_request)
            if not releases:
                return ValidationFailure(
                    message=loc("IndexerValidationNoResultsInConfiguredCategories")
                )
        except ApiKeyError as e:
            self.logger.warning("Indexer rejected the API key", error=str(e))
            return ValidationFailure(field="api_key", message=loc("IndexerValidationInvalidApiKey"))
        except RequestLimitReachedError as e:
            self.logger.warning("Request limit reached", error=str(e))
            return ValidationFailure(
                message=loc("IndexerValidationRequestLimitReached", {"exceptionMessage": str(e)})
            )
        except UnsupportedFeedError as e:
            self.logger.warning("Indexer feed is not supported", error=str(e))
            return ValidationFailure(
                message=loc("IndexerValidationFeedNotSupported", {"exceptionMessage": str(e)})
            )
        except IndexerError as e:
            self.logger.warning("Unable to connect to indexer", error=str(e))
            return ValidationFailure(
                message=loc("IndexerValidationUnableToConnect", {"exceptionMessage": str(e)})
            )
        except httpx.TimeoutException as e:
            self.logger.warning("Unable to connect to indexer, timed out", error=str(e))
            tokens = {"exceptionMessage": str(e)}
            return ValidationFailure(message=loc("IndexerValidationUnableToConnectTimeout", tokens))
        except httpx.HTTPError as e:
            self.logger.warning(
                "Unable to connect to indexer", error=str(e), error_type=type(e).__name__
            )
            message = loc("IndexerValidationUnableToConnectHttpError", {"exceptionMessage": str(e)})
            return ValidationFailure(message=message)
        except Exception as e:
            self.logger.warning("Unable to connect to indexer", error=str(e), exc_info=e)
            return ValidationFailure(
                message=loc("IndexerValidationUnableToConnect", {"exceptionMessage": str(e)})
            )

        return None

    async def request_action(self, action: str, query: dict[str, str]) -> dict[str, Any]:
        """Fallback for actions this indexer does not handle.

        Returns:
            Empty result
        """
        self.logger.debug("Unknown indexer action", action=action)
        return {}
