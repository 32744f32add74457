"""Application entry point for Torznarr."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI

from torznarr import __version__
from torznarr.core.config import get_settings, reload_settings
from torznarr.core.indexers.capabilities import CapabilitiesProvider, NewznabCapabilitiesProvider
from torznarr.core.localization import LocalizationService
from torznarr.core.logging import setup_logging
from torznarr.core.metrics import setup_metrics
from torznarr.core.middleware import TracingMiddleware
from torznarr.core.routes import create_app_router

logger = structlog.get_logger("torznarr.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting Torznarr application",
        version=__version__,
        env=settings.env,
        host=settings.host_bind_address,
        port=settings.host_port,
    )

    yield

    logger.info("Shutting down Torznarr application")
    if app.state.owns_http_client:
        await app.state.http_client.aclose()
        logger.info("Indexer HTTP client closed")


def create_app(
    http_client: httpx.AsyncClient | None = None,
    capabilities_provider: CapabilitiesProvider | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        http_client: Client used for indexer traffic; one is created from
            settings when omitted
        capabilities_provider: Capabilities source; a caching HTTP provider
            is created when omitted
    """
    settings = get_settings()

    setup_logging(debug=settings.is_debug, logs_dir=settings.logs_dir, log_level=settings.log_level)

    app = FastAPI(
        title="Torznarr",
        description="Torznab indexer capability negotiation and validation",
        version=__version__,
        lifespan=lifespan,
    )

    # One HTTP client and one capabilities cache shared by every indexer
    app.state.owns_http_client = http_client is None
    if http_client is None:
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds),
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
        )
    app.state.http_client = http_client
    app.state.capabilities_provider = capabilities_provider or NewznabCapabilitiesProvider(
        http_client,
        ttl_seconds=settings.capabilities_cache_ttl_seconds,
        max_entries=settings.capabilities_cache_max_entries,
    )
    app.state.localization = LocalizationService()

    app.add_middleware(TracingMiddleware)
    setup_metrics(app, __version__)

    app.include_router(create_app_router())

    return app


def main() -> None:
    """Main entry point."""
    import uvicorn

    current_settings = reload_settings()
    logger.info(
        "Starting server with settings",
        host=current_settings.host_bind_address,
        port=current_settings.host_port,
    )

    uvicorn.run(
        create_app(),
        host=current_settings.host_bind_address,
        port=current_settings.host_port,
        log_config=None,  # structlog owns logging configuration
    )


if __name__ == "__main__":
    main()
