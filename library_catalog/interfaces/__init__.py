"""Public interface definitions for the catalogue's collaborators.

Business logic depends on these abstract base classes only; concrete
adapters live in ``library_catalog/providers/`` and are wired together in
``library_catalog/main.py``.  Unit tests inject fakes or mocks instead.

CONCRETE PROVIDER MAP:
    Interface              ->  Concrete implementations
    ─────────────────────────────────────────────────────────
    IResultCache           ->  BoundedResultCache
    IAuthorRepository      ->  MemoryCatalogRepository.authors
    IBookRepository        ->  MemoryCatalogRepository.books
    ICategoryRepository    ->  MemoryCatalogRepository.categories
"""

from library_catalog.interfaces.cache_provider import IResultCache
from library_catalog.interfaces.catalog_repository import (
    IAuthorRepository,
    IBookRepository,
    ICategoryRepository,
)

__all__ = [
    "IAuthorRepository",
    "IBookRepository",
    "ICategoryRepository",
    "IResultCache",
]
