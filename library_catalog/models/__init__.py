"""Domain models for the library catalogue.

All models are frozen Pydantic v2 classes; copies are made with
``model_copy(update={...})``.
"""

from library_catalog.models.catalog import Author, Book, BookSummary, Category, EntityType
from library_catalog.models.report import ReportStatus, TaskRecord

__all__ = [
    "Author",
    "Book",
    "BookSummary",
    "Category",
    "EntityType",
    "ReportStatus",
    "TaskRecord",
]
