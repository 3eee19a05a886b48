"""Abstract base class for per-entity result caches.

Defines the contract the catalogue services use to memoise query results.
Keys are opaque strings built by :func:`library_catalog.utils.cache_key`;
values are ordered sequences of one entity type.

Unlike most contracts in this package the operations are synchronous: the
cache is shared by request handlers on the event loop and by thread-pool
workers, and every operation is a short critical section that never blocks
on I/O.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Generic, TypeVar

V = TypeVar("V")


class IResultCache(ABC, Generic[V]):
    """Contract for bounded, thread-safe query-result caches."""

    @abstractmethod
    def get(self, key: str) -> tuple[V, ...] | None:
        """Retrieve the values stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.

        Returns
        -------
        tuple or None
            The cached values in insertion order, or ``None`` when *key* is
            absent.  An empty tuple means an empty result was cached, which
            is a different condition from absence.
        """

    @abstractmethod
    def put(self, key: str, values: Sequence[V]) -> None:
        """Store *values* under *key*, replacing any previous entry.

        When the cache is full and *key* is new, exactly one resident entry
        is evicted first.

        Parameters
        ----------
        key:
            The cache key.
        values:
            The query result.  Implementations store an immutable snapshot,
            so later changes to the caller's list are not observed.
        """

    @abstractmethod
    def contains_key(self, key: str) -> bool:
        """Return ``True`` if *key* is resident."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry (coarse invalidation)."""
