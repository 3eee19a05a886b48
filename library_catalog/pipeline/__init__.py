"""Background report pipeline: task registry and the worker that fills it."""

from library_catalog.pipeline.job_registry import JobRegistry
from library_catalog.pipeline.report_worker import ReportGenerationWorker

__all__ = ["JobRegistry", "ReportGenerationWorker"]
