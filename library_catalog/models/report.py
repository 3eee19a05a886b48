"""Report task models for asynchronous log-report generation.

A :class:`TaskRecord` is the immutable snapshot of one report task.  The
:class:`~library_catalog.pipeline.job_registry.JobRegistry` owns the only
reference that is ever replaced; callers always receive a frozen copy, and
status changes produce new records via the ``with_*`` helpers.

Lifecycle::

    PENDING ──→ IN_PROGRESS ──→ COMPLETED   (file_path set)
                            └─→ FAILED      (error_message set)
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReportStatus(str, Enum):  # noqa: UP042
    """Lifecycle states for a report task."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def rank(self) -> int:
        """Position in the lifecycle; both terminal states share the last rank."""
        return _STATUS_RANK[self]

    @property
    def is_terminal(self) -> bool:
        return self in (ReportStatus.COMPLETED, ReportStatus.FAILED)


_STATUS_RANK = {
    ReportStatus.PENDING: 0,
    ReportStatus.IN_PROGRESS: 1,
    ReportStatus.COMPLETED: 2,
    ReportStatus.FAILED: 2,
}


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class TaskRecord(BaseModel):
    """Immutable status record for one report task."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    status: ReportStatus = ReportStatus.PENDING
    # The date whose log the task copies; None for parameterless tasks.
    report_date: date | None = None
    file_path: str | None = None
    error_message: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def with_status(self, status: ReportStatus) -> TaskRecord:
        return self.model_copy(update={"status": status, "updated_at": _utcnow()})

    def completed(self, file_path: str) -> TaskRecord:
        return self.model_copy(
            update={
                "status": ReportStatus.COMPLETED,
                "file_path": file_path,
                "updated_at": _utcnow(),
            }
        )

    def failed(self, error_message: str) -> TaskRecord:
        return self.model_copy(
            update={
                "status": ReportStatus.FAILED,
                "error_message": error_message,
                "updated_at": _utcnow(),
            }
        )
