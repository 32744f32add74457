"""Application routes."""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from torznarr.routes import general
from torznarr.routes.indexers import create_indexers_router

logger = structlog.get_logger("torznarr.routes")


def create_app_router() -> APIRouter:
    """Create and configure main application router."""
    router = APIRouter()
    router.include_router(general.router, tags=["general"])
    router.include_router(create_indexers_router(), tags=["indexers"])
    logger.debug("Application routes registered", routes_count=len(router.routes))
    return router
