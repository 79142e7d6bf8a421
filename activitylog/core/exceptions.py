"""
Custom HTTP exceptions and global exception handlers for the activity log service.
Every error leaves the API in the same envelope: {"error": {"code", "message", "query"?}}.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from activitylog.core.config import settings

logger = logging.getLogger(__name__)


# ── Custom exception classes ──────────────────────────────────────────────────

class ActivityLogException(Exception):
    """Base exception for all activity log domain errors."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.error_code = error_code or "ACTIVITY_LOG_ERROR"
        super().__init__(detail)


class UnauthorizedException(ActivityLogException):
    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
        )


class BadRequestException(ActivityLogException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="BAD_REQUEST",
        )


class InvalidQueryException(ActivityLogException):
    """
    A query against the activity store failed.
    Keeps the SQL text so it can be shown next to the message.
    """

    def __init__(self, detail: str, query: str | None = None) -> None:
        self.query = query
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="INVALID_QUERY",
        )


class InvalidTokenException(ActivityLogException):
    def __init__(self, detail: str = "Invalid or expired token") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="INVALID_TOKEN",
        )


# ── Exception handlers ────────────────────────────────────────────────────────

def _error_response(
    status_code: int,
    message: str,
    code: str,
    **extra: object,
) -> JSONResponse:
    error: dict[str, object] = {"code": code, "message": message}
    error.update(extra)
    return JSONResponse(status_code=status_code, content={"error": error})


async def activity_log_exception_handler(
    request: Request, exc: ActivityLogException
) -> JSONResponse:
    extra: dict[str, object] = {}
    if isinstance(exc, InvalidQueryException):
        extra["query"] = exc.query
    if not settings.is_production:
        extra["class"] = type(exc).__name__
    return _error_response(exc.status_code, exc.detail, exc.error_code, **extra)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({"field": field, "message": error["msg"]})
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Request validation failed",
        "VALIDATION_ERROR",
        errors=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) or "Unknown Error"
    extra: dict[str, object] = {}
    if settings.is_production:
        message = "Internal Server Error"
    else:
        extra["class"] = type(exc).__name__
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        message,
        "INTERNAL_SERVER_ERROR",
        **extra,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI application."""
    app.add_exception_handler(ActivityLogException, activity_log_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
