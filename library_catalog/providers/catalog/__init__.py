"""Catalogue persistence providers."""

from library_catalog.providers.catalog.memory_repository import MemoryCatalogRepository

__all__ = ["MemoryCatalogRepository"]
