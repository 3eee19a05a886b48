"""Coarse-grained invalidation of the per-entity result caches.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services.
# Depends on: IResultCache (one instance per EntityType).
#
# Every successful create/update/delete is reported here by the owning
# service, naming each entity type whose cached query results the
# mutation could change.  The coordinator maps those types through the
# invalidation policy and clears every affected cache *wholesale* -- it
# never tries to work out which individual keys went stale.
#
#   AUTHOR   -> {AUTHOR}
#   CATEGORY -> {CATEGORY}
#   BOOK     -> {BOOK, CATEGORY}   (category results embed book summaries)
#
# Mutations that reach across entities report every type involved:
#   author rename, or delete with books    -> AUTHOR, BOOK
#   any book mutation                      -> BOOK, AUTHOR
#   category books changed, rename, delete -> CATEGORY, BOOK, AUTHOR
# because books are looked up by author name and category name, and
# authors by the categories of their books.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from library_catalog.interfaces.cache_provider import IResultCache
from library_catalog.models.catalog import EntityType
from library_catalog.providers.cache.memory_cache import BoundedResultCache, CacheStats

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_INVALIDATION_POLICY: Mapping[EntityType, frozenset[EntityType]] = {
    EntityType.AUTHOR: frozenset({EntityType.AUTHOR}),
    EntityType.CATEGORY: frozenset({EntityType.CATEGORY}),
    EntityType.BOOK: frozenset({EntityType.BOOK, EntityType.CATEGORY}),
}


class CacheCoordinator:
    """Owns the per-entity caches and clears them after mutations.

    Parameters
    ----------
    caches:
        One cache per :class:`EntityType`.
    policy:
        Mutated type -> cache types to clear.  Defaults to
        :data:`DEFAULT_INVALIDATION_POLICY`.
    """

    def __init__(
        self,
        caches: Mapping[EntityType, IResultCache],
        policy: Mapping[EntityType, frozenset[EntityType]] | None = None,
    ) -> None:
        self._caches = dict(caches)
        self._policy = dict(policy if policy is not None else DEFAULT_INVALIDATION_POLICY)

    @classmethod
    def with_capacities(cls, capacities: Mapping[str, int]) -> CacheCoordinator:
        """Build one :class:`BoundedResultCache` per entity type.

        *capacities* is keyed by lower-case entity name, as returned by
        :func:`library_catalog.config.loader.cache_capacities`.
        """
        caches = {
            entity: BoundedResultCache(entity.value.lower(), capacities[entity.value.lower()])
            for entity in EntityType
        }
        return cls(caches)

    def cache_for(self, entity_type: EntityType) -> IResultCache:
        return self._caches[entity_type]

    def affected_by(self, *entity_types: EntityType) -> set[EntityType]:
        """Return the union of cache types the policy maps *entity_types* to."""
        affected: set[EntityType] = set()
        for entity_type in entity_types:
            affected.update(self._policy.get(entity_type, {entity_type}))
        return affected

    def on_mutation(self, *entity_types: EntityType) -> set[EntityType]:
        """Clear every cache affected by a mutation of *entity_types*.

        Must be called only after the persistence call has succeeded.
        Returns the set of cache types that were cleared.
        """
        affected = self.affected_by(*entity_types)
        for entity_type in sorted(affected, key=lambda e: e.value):
            cache = self._caches.get(entity_type)
            if cache is not None:
                cache.clear()
        logger.info(
            "caches_invalidated",
            mutated=sorted(e.value for e in entity_types),
            cleared=sorted(e.value for e in affected),
        )
        return affected

    def stats(self) -> list[CacheStats]:
        """Return stats for every cache that exposes them."""
        return [
            cache.stats()
            for cache in self._caches.values()
            if isinstance(cache, BoundedResultCache)
        ]
