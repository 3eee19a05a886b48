"""Report generation worker.

Copies the daily application log for a requested date into a per-task
file under the generated-reports directory, driving the task's
:class:`~library_catalog.models.report.TaskRecord` through
``PENDING -> IN_PROGRESS -> COMPLETED | FAILED`` on the way.

The worker runs on a thread-pool thread, never on the request thread.
Failures are recorded on the task and never raised: callers learn about
them only by polling status.  There is no retry; a failed task stays
failed and the client must request a new one.
"""

from __future__ import annotations

import shutil
from datetime import date
from pathlib import Path

import structlog

from library_catalog.config.settings import Settings
from library_catalog.models.report import ReportStatus, TaskRecord
from library_catalog.pipeline.job_registry import JobRegistry
from library_catalog.utils.errors import InvalidTaskTransitionError, ReportGenerationError
from library_catalog.utils.logging import get_logger


def _start(record: TaskRecord) -> TaskRecord:
    # Only a PENDING task may start; a second run for the same id is refused.
    if record.status is not ReportStatus.PENDING:
        raise InvalidTaskTransitionError(
            f"Task {record.task_id} is already {record.status.value}"
        )
    return record.with_status(ReportStatus.IN_PROGRESS)


class ReportGenerationWorker:
    """Produces one generated log file per task.

    Parameters
    ----------
    registry:
        The process-wide :class:`JobRegistry` holding the task records.
    source_dir:
        Directory containing the daily source logs.
    source_pattern:
        File-name pattern of a daily log; ``{date}`` becomes the ISO date.
    output_dir:
        Directory that receives ``<task_id>_<date>.log`` files.
    """

    def __init__(
        self,
        registry: JobRegistry,
        source_dir: str | Path = "logs",
        source_pattern: str = "library-{date}.log",
        output_dir: str | Path = "logs/generated_reports",
    ) -> None:
        self._registry = registry
        self._source_dir = Path(source_dir)
        self._source_pattern = source_pattern
        self._output_dir = Path(output_dir)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @classmethod
    def from_settings(cls, registry: JobRegistry, settings: Settings) -> ReportGenerationWorker:
        return cls(
            registry,
            source_dir=settings.reports_source_dir,
            source_pattern=settings.reports_source_pattern,
            output_dir=settings.reports_output_dir,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def source_path(self, report_date: date) -> Path:
        """Return where the source log for *report_date* is expected."""
        return self._source_dir / self._source_pattern.format(date=report_date.isoformat())

    def target_path(self, task_id: str, report_date: date) -> Path:
        """Return the per-task output path; the task id keeps concurrent runs apart."""
        return self._output_dir / f"{task_id}_{report_date.isoformat()}.log"

    def run(self, task_id: str, report_date: date) -> None:
        """Generate the report for *task_id*.  Never raises."""
        try:
            started = self._registry.transition(task_id, _start)
        except InvalidTaskTransitionError as exc:
            self._logger.warning("report_task_not_startable", task_id=task_id, error=exc.message)
            return
        if started is None:
            self._logger.warning("report_task_unknown", task_id=task_id)
            return

        try:
            target = self._generate(task_id, report_date)
        except ReportGenerationError as exc:
            self._fail(task_id, exc.message)
            return
        except Exception as exc:
            self._logger.exception("report_generation_crashed", task_id=task_id)
            self._fail(task_id, f"Error generating log file for task {task_id}: {exc}")
            return

        self._registry.transition(task_id, lambda record: record.completed(str(target)))
        self._logger.info(
            "report_generation_completed",
            task_id=task_id,
            report_date=report_date.isoformat(),
            file_path=str(target),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _generate(self, task_id: str, report_date: date) -> Path:
        source = self.source_path(report_date)
        if not source.is_file():
            raise ReportGenerationError(
                f"Source log file not found for date: {report_date.isoformat()} "
                f"at path {source.resolve()}"
            )

        target = self.target_path(task_id, report_date)
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as exc:
            raise ReportGenerationError(
                f"Error generating log file for task {task_id}: {exc}"
            ) from exc
        return target

    def _fail(self, task_id: str, message: str) -> TaskRecord | None:
        self._logger.warning("report_generation_failed", task_id=task_id, error=message)
        return self._registry.transition(task_id, lambda record: record.failed(message))
