"""In-memory TTL cache for resolved item collections.

Architecture:
    TTLCache is an explicitly owned instance injected into each resource
    accessor; there is no module-level cache. Each instance carries its own
    default TTL so every resource category can be configured independently.

Design Decisions:
    - Lazy expiry: entries are checked and dropped on read, no sweeper thread
    - Substring invalidation: a mutation drops every list key mentioning the
      affected scope without knowing the exact keys
    - One lock around the map; compute functions run outside of it
    - Bounded size with least-recently-used eviction
    - Only plain collections are stored; a ListResult is rejected because its
      truncation notice depends on the limits of the call that produced it
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..models.results import ListResult

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class _CacheEntry(Generic[V]):
    value: V
    expires_at: float


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache statistics."""

    size: int
    max_size: int
    default_ttl: float
    hits: int
    misses: int


class TTLCache(Generic[V]):
    """Key-to-value store with per-entry expiry and pattern invalidation."""

    def __init__(
        self,
        default_ttl: float,
        *,
        max_size: int = 1000,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            default_ttl: Lifetime in seconds for entries stored without a ttl
            max_size: Maximum number of entries before LRU eviction
            name: Label used in log records
            clock: Monotonic time source
        """
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._default_ttl = default_ttl
        self._max_size = max_size
        self._name = name
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry[V]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def get(self, key: str) -> V | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                self._misses += 1
                logger.debug("cache_expired", extra={"cache": self._name, "key": key})
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: V, ttl: float | None = None) -> None:
        """Store ``value`` under ``key``.

        Reserved for warming the cache with data already known to be
        complete; fetch-or-cache paths go through get_or_compute().

        Raises:
            TypeError: If ``value`` is a ListResult
            ValueError: If ``ttl`` is not positive
        """
        if isinstance(value, ListResult):
            raise TypeError("TTLCache stores item collections, not ListResult values")
        lifetime = self._default_ttl if ttl is None else ttl
        if lifetime <= 0:
            raise ValueError("ttl must be positive")

        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(
                    "cache_evicted",
                    extra={"cache": self._name, "key": evicted, "reason": "max_size"},
                )
            self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + lifetime)
            self._entries.move_to_end(key)

    def invalidate(self, pattern: str | None = None) -> int:
        """Drop entries.

        Args:
            pattern: None clears everything; otherwise every key containing
                ``pattern`` as a substring is removed

        Returns:
            Number of entries removed
        """
        with self._lock:
            if not pattern:
                removed = len(self._entries)
                self._entries.clear()
            else:
                doomed = [key for key in self._entries if pattern in key]
                for key in doomed:
                    del self._entries[key]
                removed = len(doomed)
            remaining = len(self._entries)

        if removed:
            logger.debug(
                "cache_invalidated",
                extra={
                    "cache": self._name,
                    "pattern": pattern,
                    "removed": removed,
                    "remaining": remaining,
                },
            )
        return removed

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[V]],
        ttl: float | None = None,
    ) -> V:
        """Return the cached value or compute, store and return it.

        Errors from ``compute`` propagate unchanged and nothing is stored.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("cache_hit", extra={"cache": self._name, "key": key})
            return cached

        try:
            value = await compute()
        except Exception as e:
            logger.error(
                "cache_compute_failed",
                extra={
                    "cache": self._name,
                    "key": key,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise

        self.set(key, value, ttl)
        logger.debug("cache_miss_stored", extra={"cache": self._name, "key": key})
        return value

    def cleanup(self) -> int:
        """Remove all expired entries now; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("cache_cleanup", extra={"cache": self._name, "removed": len(expired)})
        return len(expired)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                max_size=self._max_size,
                default_ttl=self._default_ttl,
                hits=self._hits,
                misses=self._misses,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._clock() < entry.expires_at
