"""Tests for Newznab/Torznab request generation."""

from __future__ import annotations

import httpx
import pytest
from conftest import FakeCapabilitiesProvider

from torznarr.core.indexers.capabilities import NewznabCapabilities
from torznarr.core.indexers.models import EpisodeSearchCriteria
from torznarr.core.indexers.newznab import NewznabRequestGenerator
from torznarr.core.indexers.settings import TorznabSettings


def _generator(
    capabilities: NewznabCapabilities | None = None,
    page_size: int = 0,
    max_pages: int = 30,
    **settings_overrides,
) -> NewznabRequestGenerator:
    settings = TorznabSettings(
        base_url="https://indexer.example", api_key="secret", **settings_overrides
    )
    return NewznabRequestGenerator(
        FakeCapabilitiesProvider(capabilities),
        settings=settings,
        page_size=page_size,
        max_pages=max_pages,
    )


def _params(url: str) -> dict[str, str]:
    return dict(httpx.URL(url).params)


class TestRecentRequests:
    @pytest.mark.asyncio
    async def test_tv_search_in_configured_categories(self) -> None:
        generator = _generator(anime_categories=[5070, 5030])

        (query,) = await generator.get_recent_requests()

        assert len(query) == 1
        assert query[0].url.startswith("https://indexer.example/api?t=tvsearch&cat=")
        assert _params(query[0].url) == {
            "t": "tvsearch",
            "cat": "5030,5040,5070",
            "extended": "1",
            "apikey": "secret",
        }

    @pytest.mark.asyncio
    async def test_basic_search_when_tv_search_unavailable(self) -> None:
        generator = _generator(NewznabCapabilities(supported_tv_search_parameters=None))

        (query,) = await generator.get_recent_requests()

        assert _params(query[0].url)["t"] == "search"

    @pytest.mark.asyncio
    async def test_no_categories_no_requests(self) -> None:
        generator = _generator(categories=[], anime_categories=[])

        assert await generator.get_recent_requests() == []

    @pytest.mark.asyncio
    async def test_paging(self) -> None:
        generator = _generator(page_size=50, max_pages=3)

        (query,) = await generator.get_recent_requests()

        assert [(_params(r.url)["limit"], _params(r.url)["offset"]) for r in query] == [
            ("50", "0"),
            ("50", "50"),
            ("50", "100"),
        ]

    @pytest.mark.asyncio
    async def test_additional_parameters_appended(self) -> None:
        generator = _generator(additional_parameters="&minsize=100&freeleech=1")

        (query,) = await generator.get_recent_requests()

        assert query[0].url.endswith("&minsize=100&freeleech=1")


class TestSearchRequests:
    @pytest.mark.asyncio
    async def test_tvdb_id_preferred(self) -> None:
        caps = NewznabCapabilities(
            supported_tv_search_parameters=["q", "tvdbid", "rid", "season", "ep"]
        )
        generator = _generator(caps)
        criteria = EpisodeSearchCriteria(
            series_title="Show Name", season=1, episode=2, tvdb_id=12345, tvrage_id=678
        )

        (query,) = await generator.get_search_requests(criteria)

        params = _params(query[0].url)
        assert params["t"] == "tvsearch"
        assert params["tvdbid"] == "12345"
        assert params["season"] == "1"
        assert params["ep"] == "2"
        assert "rid" not in params
        assert "q" not in params

    @pytest.mark.asyncio
    async def test_rage_id_when_tvdb_not_supported(self) -> None:
        generator = _generator()
        criteria = EpisodeSearchCriteria(
            series_title="Show Name", season=1, episode=2, tvdb_id=12345, tvrage_id=678
        )

        (query,) = await generator.get_search_requests(criteria)

        params = _params(query[0].url)
        assert params["rid"] == "678"
        assert "tvdbid" not in params

    @pytest.mark.asyncio
    async def test_title_query_fallback(self) -> None:
        generator = _generator()
        criteria = EpisodeSearchCriteria(series_title="Show Name", season=3)

        (query,) = await generator.get_search_requests(criteria)

        params = _params(query[0].url)
        assert params["q"] == "Show Name"
        assert params["season"] == "3"
        assert "ep" not in params

    @pytest.mark.asyncio
    async def test_no_usable_identifier(self) -> None:
        caps = NewznabCapabilities(supported_tv_search_parameters=["tvdbid", "season", "ep"])
        generator = _generator(caps)
        criteria = EpisodeSearchCriteria(series_title="Show Name", season=1, episode=1)

        assert await generator.get_search_requests(criteria) == []

    @pytest.mark.asyncio
    async def test_text_search_without_tv_search(self) -> None:
        caps = NewznabCapabilities(supported_tv_search_parameters=None)
        generator = _generator(caps)

        (episode_query,) = await generator.get_search_requests(
            EpisodeSearchCriteria(series_title="Show Name", season=1, episode=2)
        )
        (season_query,) = await generator.get_search_requests(
            EpisodeSearchCriteria(series_title="Show Name", season=1)
        )

        assert _params(episode_query[0].url)["q"] == "Show Name S01E02"
        assert _params(season_query[0].url)["q"] == "Show Name S01"
        assert _params(season_query[0].url)["t"] == "search"

    @pytest.mark.asyncio
    async def test_no_search_mode_available(self) -> None:
        caps = NewznabCapabilities(
            supported_search_parameters=None, supported_tv_search_parameters=None
        )
        generator = _generator(caps)
        criteria = EpisodeSearchCriteria(series_title="Show Name", season=1, episode=2)

        assert await generator.get_search_requests(criteria) == []

    @pytest.mark.asyncio
    async def test_empty_categories_omit_cat(self) -> None:
        generator = _generator(categories=[])
        criteria = EpisodeSearchCriteria(series_title="Show Name", season=1, episode=2)

        (query,) = await generator.get_search_requests(criteria)

        assert "cat" not in _params(query[0].url)

    @pytest.mark.asyncio
    async def test_anime_search(self) -> None:
        generator = _generator(categories=[], anime_categories=[5070])
        criteria = EpisodeSearchCriteria(
            series_title="Anime Show", season=1, is_anime=True, absolute_episode=7
        )

        (query,) = await generator.get_search_requests(criteria)

        params = _params(query[0].url)
        assert params["t"] == "search"
        assert params["cat"] == "5070"
        assert params["q"] == "Anime Show 07"

    @pytest.mark.asyncio
    async def test_anime_search_needs_anime_categories(self) -> None:
        generator = _generator()
        criteria = EpisodeSearchCriteria(series_title="Anime Show", season=1, is_anime=True)

        assert await generator.get_search_requests(criteria) == []
