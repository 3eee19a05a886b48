"""Read-through caching shared by the catalogue services.

    key = cache_key(operation, *params)
    hit  -> return the cached tuple
    miss -> query the repository; cache the result only if it is non-empty

Empty results are never cached, so "absent" and "present but empty" can
only differ if a caller puts an empty sequence directly.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

import structlog

from library_catalog.interfaces.cache_provider import IResultCache
from library_catalog.models.catalog import EntityType
from library_catalog.services.cache_coordinator import CacheCoordinator
from library_catalog.utils.errors import NotFoundError
from library_catalog.utils.logging import get_logger

T = TypeVar("T")


class CachedService(Generic[T]):
    """Base for services whose reads go through one entity's result cache."""

    entity_type: EntityType

    def __init__(self, coordinator: CacheCoordinator) -> None:
        self._coordinator = coordinator
        self._cache: IResultCache[T] = coordinator.cache_for(self.entity_type)
        self._logger: structlog.BoundLogger = get_logger(type(self).__module__)

    async def _read_many(
        self,
        key: str,
        loader: Callable[[], Awaitable[Sequence[T]]],
        not_found: str | None = None,
    ) -> list[T]:
        """Return the cached or freshly loaded results for *key*.

        If *not_found* is given, an empty result raises :class:`NotFoundError`
        with that message instead of returning an empty list.
        """
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        values = await loader()
        if values:
            self._cache.put(key, values)
        elif not_found is not None:
            raise NotFoundError(not_found, entity_name=self.entity_type.value.lower())
        return list(values)

    async def _read_one(
        self,
        key: str,
        loader: Callable[[], Awaitable[T | None]],
        not_found: str,
    ) -> T:
        async def load_as_list() -> list[T]:
            value = await loader()
            return [] if value is None else [value]

        return (await self._read_many(key, load_as_list, not_found))[0]

    def _mutated(self, *entity_types: EntityType) -> None:
        self._coordinator.on_mutation(*(entity_types or (self.entity_type,)))
