"""Pydantic request/response schemas for the library catalogue API.

Convention: request bodies end with "Request", response bodies with
"Response".  Catalogue entities are returned using the domain models
directly; only shapes that exist purely for HTTP are defined here.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from library_catalog.models.report import ReportStatus, TaskRecord


# ---------------------------------------------------------------------------
# Catalogue requests
# ---------------------------------------------------------------------------

# Surrounding whitespace is stripped before the length check, so "   " is rejected.
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]


class AuthorRequest(BaseModel):
    """Body for creating or renaming an author."""

    name: Name


class BookRequest(BaseModel):
    """Body for creating or updating a book.

    On update, omitting ``category_ids`` leaves the book's categories as
    they are; an explicit empty list removes them all.
    """

    title: Title
    author_id: int | None = None
    category_ids: list[int] | None = None


class BulkBookRequest(BaseModel):
    """Several books created in one all-or-nothing call."""

    books: list[BookRequest] = Field(min_length=1)


class CategoryRequest(BaseModel):
    """Body for creating or updating a category.

    ``book_ids`` replaces the category's book list when given.
    """

    name: Name
    book_ids: list[int] | None = None


# ---------------------------------------------------------------------------
# Report responses
# ---------------------------------------------------------------------------


class ReportInitiatedResponse(BaseModel):
    """Returned with 202 when a report task has been scheduled."""

    task_id: str


class ReportStatusResponse(BaseModel):
    """Status of one report task, as seen by a polling client."""

    task_id: str
    status: ReportStatus
    report_date: date | None = None
    file_path: str | None = None
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: TaskRecord) -> ReportStatusResponse:
        return cls(**record.model_dump())


class ReportListResponse(BaseModel):
    tasks: list[ReportStatusResponse] = Field(default_factory=list)
    total: int = 0


# ---------------------------------------------------------------------------
# Operational responses
# ---------------------------------------------------------------------------


class CacheStatsResponse(BaseModel):
    """Counters for one result cache."""

    name: str
    size: int
    capacity: int
    hits: int
    misses: int
    evictions: int
    clears: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    caches: dict[str, int] = Field(default_factory=dict)
    report_tasks: int = 0


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
