"""
Application errors and the global exception handlers that turn them into the
standard JSON error envelope.
"""

import logging
import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None, **extra):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.extra = extra


class ValidationError(AppError):
    status_code = 400
    default_code = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    status_code = 401
    default_code = "AUTHENTICATION_FAILED"


class NotFoundError(AppError):
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    default_code = "CONFLICT"


# SQLSTATE -> (http status, error code, client message)
SQLSTATE_ERRORS = {
    "23505": (409, "DUPLICATE_ENTRY", "A record with this information already exists"),
    "23503": (400, "FOREIGN_KEY_VIOLATION", "Referenced record does not exist"),
    "23514": (400, "CHECK_VIOLATION", "Data violates a database constraint"),
    "23502": (400, "NOT_NULL_VIOLATION", "A required value is missing"),
    "42P01": (500, "DATABASE_CONFIGURATION_ERROR", "Database configuration error"),
}

# SQLite reports constraint failures by message only
SQLITE_MESSAGES = (
    ("UNIQUE constraint failed", "23505"),
    ("FOREIGN KEY constraint failed", "23503"),
    ("CHECK constraint failed", "23514"),
    ("NOT NULL constraint failed", "23502"),
    ("no such table", "42P01"),
)


def sqlstate_for(exc: Exception) -> Optional[str]:
    """Best SQLSTATE we can get out of a SQLAlchemy/driver error"""
    orig = getattr(exc, "orig", None)
    if orig is not None:
        # psycopg 3 exposes .sqlstate, psycopg2 exposes .pgcode
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if code:
            return code

    message = str(orig if orig is not None else exc)
    for fragment, code in SQLITE_MESSAGES:
        if fragment in message:
            return code
    return None


def error_envelope(
    message: str,
    error_code: str,
    error: Optional[str] = None,
    exc: Optional[BaseException] = None,
    **extra,
) -> dict:
    body = {
        "success": False,
        "message": message,
        "error": error or message,
        "errorCode": error_code,
    }
    body.update(extra)
    if exc is not None and not config.IS_PRODUCTION:
        body["detail"] = str(exc)
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"⚠️ {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, exc.error_code, **exc.extra),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    code = sqlstate_for(exc)
    status_code, error_code, message = SQLSTATE_ERRORS.get(
        code, (500, "DATABASE_ERROR", "An unexpected database error occurred")
    )
    logger.error(f"❌ Database error on {request.method} {request.url.path} (sqlstate={code}): {exc}")
    return JSONResponse(
        status_code=status_code,
        content=error_envelope(message, error_code, exc=exc, sqlState=code),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(f"Validation error for {request.url.path}: {errors}")

    parts = []
    for error in errors:
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        parts.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    message = "; ".join(parts) or "Invalid request"

    return JSONResponse(
        status_code=400,
        content=error_envelope(
            message,
            "VALIDATION_ERROR",
            errors=[
                {"field": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg")}
                for e in errors
            ],
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message, f"HTTP_{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_envelope("Internal server error", "INTERNAL_ERROR", exc=exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(DBAPIError, database_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
