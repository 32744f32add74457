"""FastAPI middleware for request/response handling."""

from __future__ import annotations

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from torznarr.core.tracing import trace_context

logger = structlog.get_logger("torznarr.middleware")


class TracingMiddleware(BaseHTTPMiddleware):
    """Bind a trace ID to every request.

    Reuses the caller's X-Trace-ID header when present. All logs emitted
    while the request is processed, including indexer validation logs,
    carry the trace_id, and the response echoes it back.
    """

    async def dispatch(self, request: Request, call_next):
        with trace_context(request.headers.get("X-Trace-ID")) as trace_id:
            logger.debug("Processing request", method=request.method, path=request.url.path)

            response = await call_next(request)
            response.headers["X-Trace-ID"] = trace_id

            logger.debug(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            return response
