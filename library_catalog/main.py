"""Library catalogue FastAPI application entry point.

Wires together the repository, the per-entity result caches, the cache
coordinator, the catalogue services and the report pipeline.  Loads
configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.

Everything is built once per process in :func:`_build_all`; the lifespan
hook copies the resulting :class:`CatalogContext` onto ``app.state`` where
the route dependencies find it.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, fields
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from library_catalog.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from library_catalog.api.routes import router as api_router
from library_catalog.config.loader import cache_capacities, load_config
from library_catalog.config.settings import Settings
from library_catalog.pipeline.job_registry import JobRegistry
from library_catalog.pipeline.report_worker import ReportGenerationWorker
from library_catalog.providers.catalog.memory_repository import MemoryCatalogRepository
from library_catalog.services.author_service import AuthorService
from library_catalog.services.book_service import BookService
from library_catalog.services.cache_coordinator import CacheCoordinator
from library_catalog.services.category_service import CategoryService
from library_catalog.services.report_service import ReportService
from library_catalog.utils.logging import configure_logging, get_logger

_APP_VERSION = "0.1.0"

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    app_env=settings.app_env,
)
_logger: structlog.BoundLogger = get_logger(__name__)


@dataclass
class CatalogContext:
    """Process-wide singletons shared by every request handler."""

    settings: Settings
    config: dict[str, Any]
    repository: MemoryCatalogRepository
    cache_coordinator: CacheCoordinator
    author_service: AuthorService
    book_service: BookService
    category_service: CategoryService
    job_registry: JobRegistry
    report_service: ReportService


# ---------------------------------------------------------------------------
# Component construction
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any] | None = None) -> CatalogContext:
    """Construct every provider and service instance for the application."""
    app_config = app_config if app_config is not None else load_config(settings=app_settings)

    repository = MemoryCatalogRepository()
    coordinator = CacheCoordinator.with_capacities(cache_capacities(app_config))

    registry = JobRegistry()
    worker = ReportGenerationWorker.from_settings(registry, app_settings)
    report_service = ReportService(registry, worker, max_workers=app_settings.report_workers)

    return CatalogContext(
        settings=app_settings,
        config=app_config,
        repository=repository,
        cache_coordinator=coordinator,
        author_service=AuthorService(repository.authors, coordinator),
        book_service=BookService(repository.books, coordinator),
        category_service=CategoryService(repository.categories, coordinator),
        job_registry=registry,
        report_service=report_service,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build the catalogue context on startup; drain report workers on shutdown."""
    context = _build_all(application.state.settings)

    for field in fields(context):
        setattr(application.state, field.name, getattr(context, field.name))

    _logger.info(
        "app_startup",
        version=_APP_VERSION,
        environment=context.settings.app_env,
        cache_capacities={s.name: s.capacity for s in context.cache_coordinator.stats()},
        report_workers=context.settings.report_workers,
    )

    yield

    context.report_service.shutdown(wait=True)
    _logger.info("app_shutdown", report_tasks=len(context.job_registry))


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Library Catalog API",
        version=_APP_VERSION,
        description=(
            "Manage authors, books and categories behind bounded result caches, "
            "and generate daily log reports in the background."
        ),
        lifespan=_lifespan,
    )
    application.state.settings = app_settings or settings

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "library_catalog.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
