"""Bounded in-memory result cache using cachetools.FIFOCache.

One instance exists per entity type and is shared by every request handler
and worker thread in the process.  ``cachetools`` containers are not
thread-safe on their own, so every operation runs under a re-entrant lock;
a reader therefore never observes a half-written entry, and the size check
plus eviction plus insert of ``put`` is a single critical section.

Eviction order is first-in, first-out: when a new key arrives at capacity,
the least-recently-inserted entry is dropped.  Reads never promote an
entry.  Overwriting an existing key counts as a fresh insertion and moves
it to the back of the queue without evicting anything.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog
from cachetools import FIFOCache

from library_catalog.interfaces.cache_provider import IResultCache
from library_catalog.utils.errors import CapacityInvariantViolation, ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time counters for one cache instance."""

    name: str
    size: int
    capacity: int
    hits: int
    misses: int
    evictions: int
    clears: int


class _NotifyingFIFOCache(FIFOCache):
    """FIFOCache that reports every capacity-driven eviction."""

    def __init__(self, maxsize: int, on_evict: Callable[[str], None]) -> None:
        super().__init__(maxsize=maxsize)
        self._on_evict = on_evict

    def popitem(self):  # noqa: ANN201
        key, value = super().popitem()
        self._on_evict(key)
        return key, value


class BoundedResultCache(IResultCache[V], Generic[V]):
    """Thread-safe FIFO cache of query results for one entity type.

    Parameters
    ----------
    name:
        Label used in logs and stats (e.g. ``"author"``).
    capacity:
        Maximum number of resident keys.  Must be at least 1.
    """

    def __init__(self, name: str, capacity: int = 100) -> None:
        if capacity < 1:
            raise ConfigurationError(
                f"Cache capacity must be at least 1, got {capacity}",
                entity_name=name,
            )
        self._name = name
        self._capacity = capacity
        self._lock = threading.RLock()
        self._data: FIFOCache[str, tuple[V, ...]] = _NotifyingFIFOCache(
            maxsize=capacity, on_evict=self._record_eviction
        )
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._clears = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    # ------------------------------------------------------------------
    # IResultCache implementation
    # ------------------------------------------------------------------

    def get(self, key: str) -> tuple[V, ...] | None:
        """Return the cached values for *key*, or ``None`` if absent."""
        with self._lock:
            values = self._data.get(key)
            if values is None:
                self._misses += 1
            else:
                self._hits += 1
        if values is None:
            logger.debug("cache_miss", cache=self._name, key=key)
        else:
            logger.debug("cache_hit", cache=self._name, key=key, size=len(values))
        return values

    def put(self, key: str, values: Sequence[V]) -> None:
        """Store an immutable snapshot of *values* under *key*.

        Raises
        ------
        CapacityInvariantViolation
            Only if the underlying container failed to evict, which would
            be a defect in this class.
        """
        snapshot = tuple(values)
        with self._lock:
            if key in self._data:
                # Re-insert so iteration order stays equal to eviction order.
                del self._data[key]
            self._data[key] = snapshot
            size = len(self._data)
            if size > self._capacity:
                raise CapacityInvariantViolation(
                    f"Cache holds {size} entries but capacity is {self._capacity}",
                    entity_name=self._name,
                )
        logger.info("cache_put", cache=self._name, key=key, cache_size=size)

    def contains_key(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            dropped = len(self._data)
            self._data.clear()
            self._clears += 1
        logger.info("cache_cleared", cache=self._name, dropped=dropped)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def keys(self) -> list[str]:
        """Return resident keys, oldest insertion first."""
        with self._lock:
            return list(self._data.keys())

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                name=self._name,
                size=len(self._data),
                capacity=self._capacity,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                clears=self._clears,
            )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _record_eviction(self, key: str) -> None:
        # Called from inside put(), so the lock is already held.
        self._evictions += 1
        logger.debug("cache_evict", cache=self._name, key=key)
