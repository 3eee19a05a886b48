"""FastAPI routes for the library catalogue.

Service dependencies are resolved from ``app.state`` via ``Depends`` using
the ``Annotated`` pattern.  Application errors raised by the services are
turned into HTTP responses by ``ErrorHandlingMiddleware``; handlers only
build responses for the non-error cases.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/authors                            GET     List authors
# /api/v1/authors/search?name=               GET     Authors by name fragment
# /api/v1/authors/by-category?category=      GET     Authors with books in a category
# /api/v1/authors/{id}                       GET     One author
# /api/v1/authors                            POST    Create author
# /api/v1/authors/{id}                       PUT     Rename author
# /api/v1/authors/{id}                       DELETE  Delete author
# /api/v1/books                              GET     List books
# /api/v1/books/search?title=                GET     Books by title fragment
# /api/v1/books/by-author?author=            GET     Books by author name fragment
# /api/v1/books/by-author/{author_id}        GET     Books of an author
# /api/v1/books/by-category?category=        GET     Books by category name
# /api/v1/books/by-category/{category_id}    GET     Books in a category
# /api/v1/books/{id}                         GET     One book
# /api/v1/books                              POST    Create book
# /api/v1/books/bulk                         POST    Create several books
# /api/v1/books/{id}                         PUT     Update book
# /api/v1/books/{id}                         DELETE  Delete book
# /api/v1/categories                         GET     List categories
# /api/v1/categories/search?name=            GET     Categories by name
# /api/v1/categories/by-book?title=          GET     Categories of matching books
# /api/v1/categories/by-book/{book_id}       GET     Categories of one book
# /api/v1/categories/{id}                    GET     One category
# /api/v1/categories                         POST    Create category
# /api/v1/categories/{id}                    PUT     Update category
# /api/v1/categories/{id}                    DELETE  Delete category
# /api/v1/logs?date=                         GET     Download a daily log
# /api/v1/logs/reports?date=                 POST    Start report generation
# /api/v1/logs/reports                       GET     List report tasks
# /api/v1/logs/reports/{id}/status           GET     Poll a report task
# /api/v1/logs/reports/{id}/download         GET     Download a finished report
# /api/v1/cache/stats                        GET     Result cache counters
# /api/v1/health                             GET     Health check
#
# Literal paths (``/search``, ``/by-category``, ``/by-book``) are declared
# before ``/{id}`` so they are not captured by the id route.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import FileResponse, JSONResponse

from library_catalog.api.schemas import (
    AuthorRequest,
    BookRequest,
    BulkBookRequest,
    CacheStatsResponse,
    CategoryRequest,
    ErrorResponse,
    HealthResponse,
    ReportInitiatedResponse,
    ReportListResponse,
    ReportStatusResponse,
)
from library_catalog.models.catalog import Author, Book, Category
from library_catalog.models.report import ReportStatus
from library_catalog.services.author_service import AuthorService
from library_catalog.services.book_service import BookService
from library_catalog.services.cache_coordinator import CacheCoordinator
from library_catalog.services.category_service import CategoryService
from library_catalog.services.report_service import ReportService
from library_catalog.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_NOT_FOUND = {404: {"model": ErrorResponse}}


# ---------------------------------------------------------------------------
# Dependency injection helpers -- resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_author_service(request: Request) -> AuthorService:
    return request.app.state.author_service


def _get_book_service(request: Request) -> BookService:
    return request.app.state.book_service


def _get_category_service(request: Request) -> CategoryService:
    return request.app.state.category_service


def _get_report_service(request: Request) -> ReportService:
    return request.app.state.report_service


def _get_cache_coordinator(request: Request) -> CacheCoordinator:
    return request.app.state.cache_coordinator


AuthorServiceDep = Annotated[AuthorService, Depends(_get_author_service)]
BookServiceDep = Annotated[BookService, Depends(_get_book_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(_get_category_service)]
ReportServiceDep = Annotated[ReportService, Depends(_get_report_service)]
CoordinatorDep = Annotated[CacheCoordinator, Depends(_get_cache_coordinator)]


# ---------------------------------------------------------------------------
# Authors
# ---------------------------------------------------------------------------


@router.get("/authors", response_model=list[Author], summary="List all authors")
async def list_authors(service: AuthorServiceDep) -> list[Author]:
    return await service.list_authors()


@router.get(
    "/authors/search",
    response_model=list[Author],
    responses=_NOT_FOUND,
    summary="Find authors whose name contains a fragment",
)
async def search_authors(
    service: AuthorServiceDep,
    name: str = Query(min_length=1),
) -> list[Author]:
    return await service.find_authors_by_name(name)


@router.get(
    "/authors/by-category",
    response_model=list[Author],
    responses=_NOT_FOUND,
    summary="List authors with books filed under categories matching a name",
)
async def authors_by_category(
    service: AuthorServiceDep,
    category: str = Query(min_length=1),
) -> list[Author]:
    return await service.find_authors_by_category(category)


@router.get(
    "/authors/{author_id}",
    response_model=Author,
    responses=_NOT_FOUND,
    summary="Get an author by id",
)
async def get_author(author_id: int, service: AuthorServiceDep) -> Author:
    return await service.get_author(author_id)


@router.post(
    "/authors",
    response_model=Author,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
    summary="Create an author",
)
async def create_author(body: AuthorRequest, service: AuthorServiceDep) -> Author:
    return await service.create_author(body.name)


@router.put(
    "/authors/{author_id}",
    response_model=Author,
    responses={**_NOT_FOUND, 409: {"model": ErrorResponse}},
    summary="Rename an author",
)
async def update_author(author_id: int, body: AuthorRequest, service: AuthorServiceDep) -> Author:
    return await service.update_author(author_id, body.name)


@router.delete(
    "/authors/{author_id}",
    status_code=204,
    response_class=Response,
    responses=_NOT_FOUND,
    summary="Delete an author and detach their books",
)
async def delete_author(author_id: int, service: AuthorServiceDep) -> Response:
    await service.delete_author(author_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------


@router.get("/books", response_model=list[Book], summary="List all books")
async def list_books(service: BookServiceDep) -> list[Book]:
    return await service.list_books()


@router.get(
    "/books/search",
    response_model=list[Book],
    responses=_NOT_FOUND,
    summary="Find books whose title contains a fragment",
)
async def search_books(
    service: BookServiceDep,
    title: str = Query(min_length=1),
) -> list[Book]:
    return await service.search_books(title)


@router.get(
    "/books/by-author",
    response_model=list[Book],
    responses=_NOT_FOUND,
    summary="Find books whose author name contains a fragment",
)
async def books_by_author_name(
    service: BookServiceDep,
    author: str = Query(min_length=1),
) -> list[Book]:
    return await service.find_books_by_author(author)


@router.get(
    "/books/by-author/{author_id}",
    response_model=list[Book],
    responses=_NOT_FOUND,
    summary="List the books of an author",
)
async def books_by_author(author_id: int, service: BookServiceDep) -> list[Book]:
    return await service.find_books_by_author_id(author_id)


@router.get(
    "/books/by-category",
    response_model=list[Book],
    responses=_NOT_FOUND,
    summary="List books filed under categories matching a name",
)
async def books_by_category_name(
    service: BookServiceDep,
    category: str = Query(min_length=1),
) -> list[Book]:
    return await service.find_books_by_category(category)


@router.get(
    "/books/by-category/{category_id}",
    response_model=list[Book],
    responses=_NOT_FOUND,
    summary="List books filed under a category",
)
async def books_by_category_id(category_id: int, service: BookServiceDep) -> list[Book]:
    return await service.find_books_by_category_id(category_id)


@router.get(
    "/books/{book_id}",
    response_model=Book,
    responses=_NOT_FOUND,
    summary="Get a book by id",
)
async def get_book(book_id: int, service: BookServiceDep) -> Book:
    return await service.get_book(book_id)


@router.post(
    "/books",
    response_model=Book,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
    summary="Create a book",
)
async def create_book(body: BookRequest, service: BookServiceDep) -> Book:
    return await service.create_book(body.title, body.author_id, body.category_ids)


@router.post(
    "/books/bulk",
    response_model=list[Book],
    status_code=201,
    responses={400: {"model": ErrorResponse}},
    summary="Create several books; nothing is stored if any entry is invalid",
)
async def create_books(body: BulkBookRequest, service: BookServiceDep) -> list[Book]:
    return await service.create_books([book.model_dump() for book in body.books])


@router.put(
    "/books/{book_id}",
    response_model=Book,
    responses={**_NOT_FOUND, 400: {"model": ErrorResponse}},
    summary="Update a book",
)
async def update_book(book_id: int, body: BookRequest, service: BookServiceDep) -> Book:
    return await service.update_book(book_id, body.title, body.author_id, body.category_ids)


@router.delete(
    "/books/{book_id}",
    status_code=204,
    response_class=Response,
    responses=_NOT_FOUND,
    summary="Delete a book",
)
async def delete_book(book_id: int, service: BookServiceDep) -> Response:
    await service.delete_book(book_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@router.get("/categories", response_model=list[Category], summary="List all categories")
async def list_categories(service: CategoryServiceDep) -> list[Category]:
    return await service.list_categories()


@router.get(
    "/categories/search",
    response_model=list[Category],
    responses=_NOT_FOUND,
    summary="Find categories whose name contains a fragment",
)
async def search_categories(
    service: CategoryServiceDep,
    name: str = Query(min_length=1),
) -> list[Category]:
    return await service.find_categories_by_name(name)


@router.get(
    "/categories/by-book",
    response_model=list[Category],
    responses=_NOT_FOUND,
    summary="List categories of books whose title contains a fragment",
)
async def categories_by_book(
    service: CategoryServiceDep,
    title: str = Query(min_length=1),
) -> list[Category]:
    return await service.find_categories_by_book(title)


@router.get(
    "/categories/by-book/{book_id}",
    response_model=list[Category],
    responses=_NOT_FOUND,
    summary="List the categories a book is filed under",
)
async def categories_by_book_id(book_id: int, service: CategoryServiceDep) -> list[Category]:
    return await service.find_categories_by_book_id(book_id)


@router.get(
    "/categories/{category_id}",
    response_model=Category,
    responses=_NOT_FOUND,
    summary="Get a category by id",
)
async def get_category(category_id: int, service: CategoryServiceDep) -> Category:
    return await service.get_category(category_id)


@router.post(
    "/categories",
    response_model=Category,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Create a category, optionally filing books under it",
)
async def create_category(body: CategoryRequest, service: CategoryServiceDep) -> Category:
    return await service.create_category(body.name, body.book_ids)


@router.put(
    "/categories/{category_id}",
    response_model=Category,
    responses={**_NOT_FOUND, 400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Rename a category and optionally replace its books",
)
async def update_category(
    category_id: int,
    body: CategoryRequest,
    service: CategoryServiceDep,
) -> Category:
    return await service.update_category(category_id, body.name, body.book_ids)


@router.delete(
    "/categories/{category_id}",
    status_code=204,
    response_class=Response,
    responses=_NOT_FOUND,
    summary="Delete a category",
)
async def delete_category(category_id: int, service: CategoryServiceDep) -> Response:
    await service.delete_category(category_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Logs and report generation
# ---------------------------------------------------------------------------


@router.get(
    "/logs",
    response_class=FileResponse,
    responses=_NOT_FOUND,
    summary="Download the application log for a date",
)
async def download_log(
    service: ReportServiceDep,
    report_date: date = Query(alias="date"),
) -> FileResponse:
    path = service.source_log_path(report_date)
    if not path.is_file():
        raise HTTPException(
            status_code=404,
            detail=f"Log file not found for date: {report_date.isoformat()}",
        )
    return FileResponse(path, media_type="text/plain", filename=path.name)


@router.post(
    "/logs/reports",
    response_model=ReportInitiatedResponse,
    status_code=202,
    summary="Start generating a log report for a date",
)
async def initiate_report(
    service: ReportServiceDep,
    report_date: date = Query(alias="date"),
) -> ReportInitiatedResponse:
    task_id = service.initiate(report_date)
    return ReportInitiatedResponse(task_id=task_id)


@router.get(
    "/logs/reports",
    response_model=ReportListResponse,
    summary="List report tasks",
)
async def list_reports(service: ReportServiceDep) -> ReportListResponse:
    tasks = [ReportStatusResponse.from_record(r) for r in service.list_tasks()]
    return ReportListResponse(tasks=tasks, total=len(tasks))


@router.get(
    "/logs/reports/{task_id}/status",
    response_model=ReportStatusResponse,
    responses=_NOT_FOUND,
    summary="Poll a report task",
)
async def report_status(task_id: str, service: ReportServiceDep) -> ReportStatusResponse:
    return ReportStatusResponse.from_record(service.get_status(task_id))


@router.get(
    "/logs/reports/{task_id}/download",
    responses={
        202: {"model": ReportStatusResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Download a finished report",
)
async def download_report(task_id: str, service: ReportServiceDep) -> Response:
    """Return the generated file, or the task status while it is not ready.

    202 while PENDING or IN_PROGRESS, 500 once FAILED, 404 if the task is
    unknown or its file has gone missing.
    """
    record = service.get_status(task_id)

    if record.status is ReportStatus.FAILED:
        body = ErrorResponse(error="ReportGenerationFailed", detail=record.error_message)
        return JSONResponse(status_code=500, content=body.model_dump())

    path = service.get_artifact_path(task_id)
    if path is None:
        body = ReportStatusResponse.from_record(record)
        return JSONResponse(status_code=202, content=body.model_dump(mode="json"))

    if not path.is_file():
        _logger.warning("report_file_missing", task_id=task_id, path=str(path))
        raise HTTPException(status_code=404, detail=f"Report file not found for task: {task_id}")

    return FileResponse(path, media_type="text/plain", filename=path.name)


# ---------------------------------------------------------------------------
# Operational
# ---------------------------------------------------------------------------


@router.get(
    "/cache/stats",
    response_model=list[CacheStatsResponse],
    summary="Result cache counters",
)
async def cache_stats(coordinator: CoordinatorDep) -> list[CacheStatsResponse]:
    return [CacheStatsResponse(**asdict(stats)) for stats in coordinator.stats()]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(
    request: Request,
    coordinator: CoordinatorDep,
    reports: ReportServiceDep,
) -> HealthResponse:
    return HealthResponse(
        version=request.app.version,
        caches={stats.name: stats.size for stats in coordinator.stats()},
        report_tasks=len(reports.list_tasks()),
    )
