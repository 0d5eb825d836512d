"""Maps exceptions onto the ``{success: false, message, errors}`` envelope."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from orderdesk.domain.exceptions import (
    AuthenticationError,
    ConcurrencyConflictError,
    DomainException,
    EntityNotFoundError,
    InsufficientStockError,
    OperationTimeoutError,
    PermissionDeniedError,
    ValidationError,
    WriteConflictError,
)

logger = structlog.get_logger(__name__)

# Most specific first; the first match wins.
_STATUS_CODES: list[tuple[type[DomainException], int]] = [
    (ValidationError, 400),
    (InsufficientStockError, 400),
    (AuthenticationError, 401),
    (PermissionDeniedError, 403),
    (EntityNotFoundError, 404),
    (ConcurrencyConflictError, 409),
    (WriteConflictError, 409),
    (OperationTimeoutError, 504),
]

_LOCATION_ROOTS = {"body", "query", "path", "header"}


def status_code_for(exc: DomainException) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def error_response(
    status_code: int, message: str, errors: list[str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "errors": errors},
    )


def _field_path(loc: tuple[Any, ...]) -> str:
    """('body', 'products', 0, 'quantity') -> 'products[0].quantity'"""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif part in _LOCATION_ROOTS and not path:
            continue
        else:
            path += f".{part}" if path else str(part)
    return path or "request"


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(DomainException)
    async def handle_domain_exception(request: Request, exc: DomainException):
        status_code = status_code_for(exc)
        if status_code == 500:
            logger.error(
                "unhandled_domain_error",
                path=request.url.path,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return error_response(500, "Internal server error")

        errors = exc.errors if isinstance(exc, ValidationError) else None
        return error_response(status_code, str(exc), errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [f"{_field_path(tuple(err['loc']))}: {err['msg']}" for err in exc.errors()]
        return error_response(400, "Validation failed", errors)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(
            "unhandled_error", path=request.url.path, error_type=type(exc).__name__
        )
        return error_response(500, "Internal server error")
