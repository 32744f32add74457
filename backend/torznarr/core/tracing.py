"""Request trace ids carried through structlog contextvars."""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import contextmanager

import structlog.contextvars as contextvars


def generate_trace_id() -> str:
    """Generate a unique trace ID (32 hex characters)."""
    return uuid.uuid4().hex


def get_trace_id() -> str | None:
    """Get the current trace ID from context, if any."""
    return contextvars.get_contextvars().get("trace_id")


@contextmanager
def trace_context(trace_id: str | None = None) -> Generator[str]:
    """Bind a trace ID for the duration of the block.

    Any context bound before entering is restored on exit, so an indexer
    test started from inside a request keeps the request's trace id.

    Args:
        trace_id: Trace ID to use. A new one is generated when None.

    Yields:
        The trace ID being used
    """
    previous = dict(contextvars.get_contextvars())
    trace_id = trace_id or generate_trace_id()

    contextvars.clear_contextvars()
    contextvars.bind_contextvars(trace_id=trace_id)
    try:
        yield trace_id
    finally:
        contextvars.clear_contextvars()
        if previous:
            contextvars.bind_contextvars(**previous)
