"""Utility modules for the library catalogue.

- **errors** -- Domain-specific exception hierarchy rooted at
  LibraryCatalogError; the API middleware maps each subclass to an HTTP
  status so services never build responses themselves.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **cache_keys** -- Deterministic cache-key construction shared by every
  catalogue service.
"""

from library_catalog.utils.cache_keys import cache_key
from library_catalog.utils.errors import (
    AlreadyExistsError,
    CapacityInvariantViolation,
    ConfigurationError,
    InvalidReferenceError,
    InvalidTaskTransitionError,
    LibraryCatalogError,
    NotFoundError,
    ReportGenerationError,
    TaskNotFoundError,
)
from library_catalog.utils.logging import configure_logging, get_logger

__all__ = [
    "AlreadyExistsError",
    "CapacityInvariantViolation",
    "ConfigurationError",
    "InvalidReferenceError",
    "InvalidTaskTransitionError",
    "LibraryCatalogError",
    "NotFoundError",
    "ReportGenerationError",
    "TaskNotFoundError",
    "cache_key",
    "configure_logging",
    "get_logger",
]
