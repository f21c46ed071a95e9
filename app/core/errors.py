import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error carrying an HTTP status and a machine-readable reason"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    reason = "Internal"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.reason, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    reason = "BadRequest"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    reason = "Unauthorized"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    reason = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "NotFound"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    reason = "Conflict"


class Internal(AppError):
    pass


def parse_exception_to_error_detail(e: Exception) -> AppError:
    """Translate a persistence exception into the matching AppError"""
    if isinstance(e, IntegrityError):
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)

        if "unique" in error_msg.lower() or "duplicate key" in error_msg.lower():
            return Conflict("A record with these values already exists", details=error_msg)
        elif "foreign key" in error_msg.lower():
            return NotFound("Referenced record does not exist", details=error_msg)
        elif "not null" in error_msg.lower() or "not-null" in error_msg.lower():
            return BadRequest("Required fields are missing", details=error_msg)
        return Internal("Database constraint violation occurred", details=error_msg)

    elif isinstance(e, OperationalError):
        return Internal("Unable to connect to the database")

    elif isinstance(e, SQLAlchemyError):
        return Internal("A database error occurred")

    return Internal("An unexpected error occurred", details=str(e) or None)


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected malformed request to {request.url.path}")
    error = BadRequest("Request validation failed", details=jsonable_errors(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {str(exc)}")
    error = parse_exception_to_error_detail(exc)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unmatched paths and methods both answer like a missing route
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return PlainTextResponse("Not found", status_code=status.HTTP_404_NOT_FOUND)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTPError", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
