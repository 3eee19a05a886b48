"""API middleware -- CORS, request logging, and error handling.

Starlette middleware is a stack (last added, first executed).  ``main``
adds ErrorHandlingMiddleware first and RequestLoggingMiddleware second, so
the request log sees the final status code even when an application error
was turned into a JSON body.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from library_catalog.api.schemas import ErrorResponse
from library_catalog.utils.errors import (
    AlreadyExistsError,
    InvalidReferenceError,
    InvalidTaskTransitionError,
    LibraryCatalogError,
    NotFoundError,
)
from library_catalog.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# First matching class wins, so subclasses come before their bases.
_STATUS_BY_ERROR: tuple[tuple[type[LibraryCatalogError], int], ...] = (
    (NotFoundError, 404),
    (AlreadyExistsError, 409),
    (InvalidTaskTransitionError, 409),
    (InvalidReferenceError, 400),
)


def status_for(exc: LibraryCatalogError) -> int:
    """Return the HTTP status code an application error maps to."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; defaults to allowing every origin."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``LibraryCatalogError`` subclasses into structured JSON errors.

    Lookups that found nothing become 404, unique-name conflicts and
    rejected task transitions 409, dangling associations 400, and every
    other application error 500.  Stack traces stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except LibraryCatalogError as exc:
            status_code = status_for(exc)
            log = _logger.warning if status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                entity=exc.entity_name,
                status=status_code,
                path=str(request.url.path),
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
