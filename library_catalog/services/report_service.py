"""Asynchronous log-report generation.

# ─── HOW REPORT GENERATION WORKS ─────────────────────────────────────
#
#   POST /logs/reports ──initiate(date)──→ ReportService
#        1. make sure the output directory exists (best effort)
#        2. JobRegistry.register()          → task_id (PENDING)
#        3. executor.submit(worker.run, …)  → returns immediately
#   GET  /logs/reports/{id}/status   ──→ get_status(task_id)
#   GET  /logs/reports/{id}/download ──→ get_artifact_path(task_id)
#
# The work always goes through the ThreadPoolExecutor; ``initiate`` never
# runs the worker on the calling thread.  No cancellation and no timeout:
# a task that never gets a pool thread stays PENDING until one frees up.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path

import structlog

from library_catalog.models.report import TaskRecord
from library_catalog.pipeline.job_registry import JobRegistry
from library_catalog.pipeline.report_worker import ReportGenerationWorker
from library_catalog.utils.logging import get_logger


class ReportService:
    """Starts report tasks out of band and answers status queries.

    Parameters
    ----------
    registry:
        The process-wide task registry.
    worker:
        Performs the actual file generation for one task.
    max_workers:
        Size of the owned thread pool.
    """

    def __init__(
        self,
        registry: JobRegistry,
        worker: ReportGenerationWorker,
        max_workers: int = 4,
    ) -> None:
        self._registry = registry
        self._worker = worker
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="report-worker"
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def initiate(self, report_date: date) -> str:
        """Register a report task for *report_date* and schedule it.

        Returns the task id without waiting for the work to start.
        """
        self._prepare_output_dir()
        task_id = self._registry.register(report_date)
        self._executor.submit(self._worker.run, task_id, report_date)
        self._logger.info(
            "report_generation_scheduled",
            task_id=task_id,
            report_date=report_date.isoformat(),
        )
        return task_id

    def get_status(self, task_id: str) -> TaskRecord:
        """Return the task's current record; ``TaskNotFoundError`` if unknown."""
        return self._registry.get(task_id)

    def get_artifact_path(self, task_id: str) -> Path | None:
        return self._registry.resolve_artifact_path(task_id)

    def list_tasks(self) -> list[TaskRecord]:
        return self._registry.snapshot()

    def source_log_path(self, report_date: date) -> Path:
        """Return the path of the raw daily log for *report_date*."""
        return self._worker.source_path(report_date)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks; by default wait for running ones to finish."""
        self._executor.shutdown(wait=wait)
        self._logger.info("report_service_shutdown", tasks=len(self._registry))

    def _prepare_output_dir(self) -> None:
        # A failure here is not fatal: the worker retries the mkdir and
        # records a FAILED task if it still cannot write.
        try:
            self._worker.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._logger.warning(
                "report_output_dir_unavailable",
                path=str(self._worker.output_dir),
                error=str(exc),
            )
