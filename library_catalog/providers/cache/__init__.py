"""Cache providers.

BoundedResultCache is a lock-guarded FIFO cache -- fast but not shared
across processes.  One instance per entity type lives for the whole
process and is cleared wholesale by the CacheCoordinator after mutations.
"""

from library_catalog.providers.cache.memory_cache import BoundedResultCache, CacheStats

__all__ = ["BoundedResultCache", "CacheStats"]
