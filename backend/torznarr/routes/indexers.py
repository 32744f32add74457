"""Torznab indexer API routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from torznarr.core.indexers.base import IndexerDefinition
from torznarr.core.indexers.settings import TorznabSettings
from torznarr.core.indexers.torznab import TorznabIndexer
from torznarr.core.indexers.validation import ValidationFailure, has_errors
from torznarr.core.tracing import get_trace_id

logger = structlog.get_logger("torznarr.routes.indexers")


class TorznabIndexerResource(BaseModel):
    """An indexer as submitted by the configuration UI, possibly not saved yet."""

    name: str | None = Field(None, description="Display name, used in logs")
    settings: TorznabSettings


class IndexerTestResponse(BaseModel):
    """Outcome of an indexer validation run."""

    success: bool = Field(..., description="False when any failure is error-level")
    failures: list[ValidationFailure]
    trace_id: str | None = None


def get_torznab_indexer(payload: TorznabIndexerResource, request: Request) -> TorznabIndexer:
    """Build a Torznab indexer around the app-wide HTTP client and capabilities cache."""
    state = request.app.state
    definition = None
    if payload.name:
        definition = IndexerDefinition(
            name=payload.name,
            implementation=TorznabIndexer.__name__,
            protocol=TorznabIndexer.protocol,
            settings=payload.settings,
        )
    return TorznabIndexer(
        payload.settings,
        capabilities_provider=state.capabilities_provider,
        http_client=state.http_client,
        localization=state.localization,
        definition=definition,
    )


def create_indexers_router() -> APIRouter:
    """Create the Torznab indexers router.

    Returns:
        Configured APIRouter instance
    """
    router_instance = APIRouter(prefix="/api/indexers/torznab")

    @router_instance.get("/schema", response_model=list[IndexerDefinition])
    async def get_schema() -> list[IndexerDefinition]:
        """Built-in Torznab definitions, disabled until the user enables them."""
        logger.debug("Listing default Torznab definitions", trace_id=get_trace_id())
        return list(TorznabIndexer.default_definitions())

    @router_instance.post("/test", response_model=IndexerTestResponse)
    async def test_indexer(
        indexer: TorznabIndexer = Depends(get_torznab_indexer),
    ) -> IndexerTestResponse:
        """Run the acceptance test against a (not yet saved) indexer.

        Warnings alone still report success.
        """
        trace_id = get_trace_id()
        logger.debug(
            "Testing Torznab indexer", trace_id=trace_id, base_url=indexer.settings.base_url
        )

        failures = await indexer.test()
        success = not has_errors(failures)
        if not success:
            logger.warning(
                "Torznab indexer test failed",
                trace_id=trace_id,
                base_url=indexer.settings.base_url,
                messages=[failure.message for failure in failures],
            )
        return IndexerTestResponse(success=success, failures=failures, trace_id=trace_id)

    @router_instance.post("/action/{action}")
    async def request_action(
        action: str,
        request: Request,
        indexer: TorznabIndexer = Depends(get_torznab_indexer),
    ) -> dict[str, Any]:
        """Named UI query about an indexer, e.g. newznabCategories."""
        logger.debug("Indexer action requested", trace_id=get_trace_id(), action=action)
        return await indexer.request_action(action, dict(request.query_params))

    return router_instance
