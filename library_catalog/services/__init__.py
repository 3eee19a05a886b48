"""Application services: catalogue use cases, cache coordination, reports."""

from library_catalog.services.author_service import AuthorService
from library_catalog.services.book_service import BookService
from library_catalog.services.cache_coordinator import (
    DEFAULT_INVALIDATION_POLICY,
    CacheCoordinator,
)
from library_catalog.services.category_service import CategoryService
from library_catalog.services.report_service import ReportService

__all__ = [
    "DEFAULT_INVALIDATION_POLICY",
    "AuthorService",
    "BookService",
    "CacheCoordinator",
    "CategoryService",
    "ReportService",
]
