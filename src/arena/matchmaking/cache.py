"""Per-category working-set cache with time-based expiry."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from arena.core.types import PoolEntry


@dataclass
class _CacheEntry:
    entries: list[PoolEntry]
    expires_at: float


class WorkingSetCache:
    """
    Caches one working set per category until its TTL elapses.

    Shared by every request in the process. There is no locking: a refresh
    replaces the whole dict slot in one assignment, so a concurrent reader
    sees either the old or the new working set, and two requests racing on
    an expired slot both fetch and the last write wins.

    Args:
        ttl_seconds: Lifetime of a cached working set
        clock: Monotonic time source, injectable for tests

    Example:
        >>> cache = WorkingSetCache(ttl_seconds=60)
        >>> cache.put("overall", entries)
        >>> cache.get("overall") is not None
        True
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    def get(self, category: str) -> list[PoolEntry] | None:
        """Get the cached working set, or None if missing or expired."""
        cached = self._entries.get(category)
        if cached is None or cached.expires_at <= self.clock():
            return None
        return cached.entries

    def put(self, category: str, entries: list[PoolEntry]) -> None:
        """Cache a working set for one TTL."""
        self._entries[category] = _CacheEntry(
            entries=list(entries),
            expires_at=self.clock() + self.ttl_seconds,
        )

    def invalidate(self, category: str | None = None) -> None:
        """Drop one category's working set, or all of them."""
        if category is None:
            self._entries.clear()
        else:
            self._entries.pop(category, None)
