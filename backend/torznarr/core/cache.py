"""Async in-memory TTL cache and in-flight request deduplication.

Notes:
- In-memory only, async-safe via asyncio.Lock
- Deterministic eviction policy: FIFO by insertion order
- TTL calculations use a monotonic clock (time.monotonic)
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")

NowFn = Callable[[], float]


@dataclass(frozen=True)
class _Entry(Generic[V]):
    value: V
    expires_at: float


class AsyncTTLCache(Generic[K, V]):
    """Async-safe in-memory TTL cache bounded by ``max_entries``."""

    def __init__(
        self,
        *,
        default_ttl_seconds: int,
        max_entries: int,
        now_fn: NowFn | None = None,
    ) -> None:
        if default_ttl_seconds < 0:
            raise ValueError("default_ttl_seconds must be >= 0")
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self._default_ttl = float(default_ttl_seconds)
        self._max_entries = max_entries
        self._now: NowFn = now_fn or time.monotonic
        # Insertion order doubles as eviction order
        self._data: OrderedDict[K, _Entry[V]] = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: K) -> V | None:
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._now():
                del self._data[key]
                return None
            return entry.value

    async def set(self, key: K, value: V, ttl_seconds: int | None = None) -> None:
        if ttl_seconds is not None and ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0 when provided")
        async with self._lock:
            self._purge_expired_unlocked()
            ttl = float(ttl_seconds) if ttl_seconds is not None else self._default_ttl
            self._data.pop(key, None)
            self._data[key] = _Entry(value=value, expires_at=self._now() + ttl)
            while len(self._data) > self._max_entries:
                self._data.popitem(last=False)

    async def delete(self, key: K) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def _purge_expired_unlocked(self) -> None:
        now = self._now()
        expired = [k for k, entry in self._data.items() if entry.expires_at <= now]
        for k in expired:
            del self._data[k]


class InFlightDeduper(Generic[K, V]):
    """Deduplicate concurrent in-flight requests by key.

    - Only one underlying coroutine runs per key at a time.
    - All awaiters share the same task; a cancelled waiter does not cancel
      the underlying task (asyncio.shield).
    - On success or failure the in-flight entry is removed, so a failed
      fetch is retried by the next caller.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._inflight: dict[K, asyncio.Task[V]] = {}

    async def run(self, key: K, coro_factory: Callable[[], Awaitable[V]]) -> V:
        """Run or join the in-flight task for ``key``."""
        async with self._lock:
            task = self._inflight.get(key)
            if task is None or task.done():

                async def _runner() -> V:
                    return await coro_factory()

                task = asyncio.create_task(_runner())

                def _cleanup(done: asyncio.Task[V]) -> None:
                    if self._inflight.get(key) is done:
                        self._inflight.pop(key, None)

                task.add_done_callback(_cleanup)
                self._inflight[key] = task

        return await asyncio.shield(task)

    def has_inflight(self, key: K) -> bool:
        """Whether a non-done task is tracked for key."""
        task = self._inflight.get(key)
        return task is not None and not task.done()


__all__ = ["AsyncTTLCache", "InFlightDeduper"]
