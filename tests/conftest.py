"""Shared pytest fixtures for the library catalogue test suite."""

from __future__ import annotations

import time
from datetime import date
from pathlib import Path

import pytest

from library_catalog.config.settings import Settings
from library_catalog.models.report import TaskRecord
from library_catalog.pipeline.job_registry import JobRegistry
from library_catalog.pipeline.report_worker import ReportGenerationWorker
from library_catalog.providers.catalog.memory_repository import MemoryCatalogRepository
from library_catalog.services.author_service import AuthorService
from library_catalog.services.book_service import BookService
from library_catalog.services.cache_coordinator import CacheCoordinator
from library_catalog.services.category_service import CategoryService

REPORT_DATE = date(2024, 1, 1)


def wait_for_terminal(registry: JobRegistry, task_id: str, timeout: float = 5.0) -> TaskRecord:
    """Poll *registry* until the task is COMPLETED or FAILED."""
    deadline = time.monotonic() + timeout
    while True:
        record = registry.get(task_id)
        if record.status.is_terminal:
            return record
        if time.monotonic() > deadline:
            pytest.fail(f"task {task_id} still {record.status.value} after {timeout}s")
        time.sleep(0.01)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@pytest.fixture
def repository() -> MemoryCatalogRepository:
    return MemoryCatalogRepository()


@pytest.fixture
def coordinator() -> CacheCoordinator:
    return CacheCoordinator.with_capacities({"author": 10, "book": 10, "category": 10})


@pytest.fixture
def author_service(
    repository: MemoryCatalogRepository, coordinator: CacheCoordinator
) -> AuthorService:
    return AuthorService(repository.authors, coordinator)


@pytest.fixture
def book_service(
    repository: MemoryCatalogRepository, coordinator: CacheCoordinator
) -> BookService:
    return BookService(repository.books, coordinator)


@pytest.fixture
def category_service(
    repository: MemoryCatalogRepository, coordinator: CacheCoordinator
) -> CategoryService:
    return CategoryService(repository.categories, coordinator)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "logs"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "generated_reports"


@pytest.fixture
def source_log(source_dir: Path) -> Path:
    """A daily log for REPORT_DATE."""
    path = source_dir / f"library-{REPORT_DATE.isoformat()}.log"
    path.write_text("INFO started\nINFO book created id=1\n", encoding="utf-8")
    return path


@pytest.fixture
def registry() -> JobRegistry:
    return JobRegistry()


@pytest.fixture
def worker(registry: JobRegistry, source_dir: Path, output_dir: Path) -> ReportGenerationWorker:
    return ReportGenerationWorker(registry, source_dir=source_dir, output_dir=output_dir)


@pytest.fixture
def test_settings(source_dir: Path, output_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        reports_source_dir=str(source_dir),
        reports_output_dir=str(output_dir),
        report_workers=4,
        config_path=str(source_dir / "missing-config.yaml"),
    )


@pytest.fixture
def report_date() -> date:
    return REPORT_DATE


@pytest.fixture
def wait_terminal():  # noqa: ANN201
    """Return the polling helper so tests can wait on background tasks."""
    return wait_for_terminal
