"""Exception handlers: domain errors and framework errors to the response envelope.

Routes and services never build error responses themselves; they raise, and
this module decides the status code and what the client is allowed to see.
"""

import logging
import os
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, FieldError
from domain.model.errors import (
    DomainError,
    DuplicateError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"

# Checked in order; first match wins
_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DuplicateError, status.HTTP_409_CONFLICT),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
]


def _is_development() -> bool:
    return os.getenv("ENVIRONMENT", "development").lower() == "development"


def _envelope(status_code: int, body: ErrorResponse, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def status_for(exc: DomainError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    code = status_for(exc)

    if code >= 500:
        logger.error("Domain error surfaced as internal error", exc_info=exc, extra={
            "path": request.url.path,
            "errorType": type(exc).__name__,
        })
        return _envelope(code, ErrorResponse(message=GENERIC_ERROR_MESSAGE))

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    errors = None
    if isinstance(exc, ValidationError) and exc.errors:
        errors = [FieldError(**e) for e in exc.errors]

    return _envelope(code, ErrorResponse(message=str(exc), errors=errors), headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies or query strings become a 400 with field errors."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append(FieldError(field=".".join(loc) or "body", message=err.get("msg", "Invalid value")))
    return _envelope(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(message="Validation failed", errors=errors),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _envelope(exc.status_code, ErrorResponse(message=message), getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path, "method": request.method})
    stack = None
    if _is_development():
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(message=GENERIC_ERROR_MESSAGE, stack=stack),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
