"""Process-wide registry of report tasks.

Maps a task id to its current :class:`TaskRecord`.  The request thread
inserts records and the worker thread moves them through their lifecycle,
so every read-modify-write happens under one lock and callers only ever
see frozen snapshots.

# ─── HOW STATUS TRANSITIONS WORK ──────────────────────────────────────
#
#   ReportService ──register()──→ JobRegistry  (PENDING)
#   Worker ──transition(id, fn)──→ JobRegistry ──fn(current)──→ new record
#
#   - ``fn`` is a pure function from the current record to the next one
#     (usually ``TaskRecord.with_status`` / ``completed`` / ``failed``)
#   - the swap is checked so a task never moves backwards and never
#     leaves COMPLETED or FAILED
#   - an unknown id is a silent no-op: a status poll that races the
#     worker start must see PENDING, not an error
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from datetime import date
from pathlib import Path

import structlog

from library_catalog.models.report import ReportStatus, TaskRecord
from library_catalog.utils.errors import InvalidTaskTransitionError, TaskNotFoundError
from library_catalog.utils.logging import get_logger


class JobRegistry:
    """Thread-safe mapping from task id to its latest :class:`TaskRecord`."""

    def __init__(self) -> None:
        self._records: dict[str, TaskRecord] = {}
        self._lock = threading.Lock()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def register(self, report_date: date | None = None) -> str:
        """Create a PENDING record and return its freshly generated id."""
        task_id = str(uuid.uuid4())
        record = TaskRecord(task_id=task_id, report_date=report_date)
        with self._lock:
            self._records[task_id] = record
        self._logger.info(
            "report_task_registered",
            task_id=task_id,
            report_date=report_date.isoformat() if report_date else None,
        )
        return task_id

    def transition(
        self,
        task_id: str,
        fn: Callable[[TaskRecord], TaskRecord],
    ) -> TaskRecord | None:
        """Atomically replace the record for *task_id* with ``fn(current)``.

        Returns the new record, or ``None`` when *task_id* is unknown.

        Raises
        ------
        InvalidTaskTransitionError
            If ``fn`` would move the task to an earlier lifecycle state,
            change a terminal record, or change the task id.
        """
        with self._lock:
            current = self._records.get(task_id)
            if current is None:
                self._logger.debug("report_task_transition_skipped", task_id=task_id)
                return None
            updated = fn(current)
            _check_transition(current, updated)
            self._records[task_id] = updated

        if updated.status is not current.status:
            self._logger.info(
                "report_task_transition",
                task_id=task_id,
                from_status=current.status.value,
                to_status=updated.status.value,
            )
        return updated

    def get(self, task_id: str) -> TaskRecord:
        """Return the current record for *task_id*.

        Raises
        ------
        TaskNotFoundError
            If *task_id* was never registered.
        """
        with self._lock:
            record = self._records.get(task_id)
        if record is None:
            raise TaskNotFoundError(task_id)
        return record

    def resolve_artifact_path(self, task_id: str) -> Path | None:
        """Return the generated file path, only when the task is COMPLETED."""
        record = self.get(task_id)
        if record.status is ReportStatus.COMPLETED and record.file_path:
            return Path(record.file_path)
        return None

    def snapshot(self) -> list[TaskRecord]:
        """Return every record, oldest first."""
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: r.created_at)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _check_transition(current: TaskRecord, updated: TaskRecord) -> None:
    if updated.task_id != current.task_id:
        raise InvalidTaskTransitionError(
            f"Transition may not change task id {current.task_id} to {updated.task_id}"
        )
    if current.status.is_terminal and updated != current:
        raise InvalidTaskTransitionError(
            f"Task {current.task_id} is already {current.status.value}"
        )
    if updated.status.rank < current.status.rank:
        raise InvalidTaskTransitionError(
            f"Task {current.task_id} cannot move from "
            f"{current.status.value} back to {updated.status.value}"
        )
