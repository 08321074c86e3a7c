"""
Single-slot TTL cache.

Holds one collection and the time it was fetched. Staleness is only
noticed when somebody asks; the request that finds the entry stale pays
for the refresh. Concurrent requests that find it stale each refresh
(no single-flight), which is harmless because the load is idempotent.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    records: tuple[T, ...]
    fetched_at: float


class SingleSlotTTLCache(Generic[T]):
    """
    Cache for exactly one collection with a freshness window.

    The lock only guards reading and replacing the entry; it is never held
    while the fetch function runs, so one slow upstream call does not
    serialize every other request behind it.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entry: CacheEntry[T] | None = None
        self._lock = asyncio.Lock()
        self.log = logger.bind(component="SingleSlotTTLCache", cache=name)

    def _is_fresh(self, entry: CacheEntry[T] | None) -> bool:
        return entry is not None and self.clock() - entry.fetched_at < self.ttl_seconds

    async def get_or_fetch(self, fetch: Callable[[], Awaitable[list[T]]]) -> list[T]:
        """
        Return the cached collection, calling fetch() if missing or stale.

        A failing fetch propagates its exception and leaves the slot as it
        was; stale data is never served in place of an error.

        Returns:
            A new list; mutating it does not touch the cache
        """
        async with self._lock:
            entry = self._entry
            if self._is_fresh(entry):
                return list(entry.records)

        self.log.info("cache_refresh", had_entry=entry is not None)
        records = tuple(await fetch())

        async with self._lock:
            self._entry = CacheEntry(records=records, fetched_at=self.clock())

        return list(records)

    def age(self) -> float | None:
        """Seconds since the current entry was fetched, or None if empty."""
        entry = self._entry
        if entry is None:
            return None
        return self.clock() - entry.fetched_at
