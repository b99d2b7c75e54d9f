"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses. Configuration and crypto errors are server-side
defects: they are logged with full detail and answered with a generic body.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from staticimp.core.config import get_settings
from staticimp.domain.enums import ErrorCategory
from staticimp.domain.exceptions import StaticimpException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "FIELD_NOT_ALLOWED": 400,
    "MISSING_REQUIRED_FIELD": 400,
    "INVALID_ENCODING": 400,
    "MALFORMED_ENTRY": 400,
    "BRANCH_NOT_ALLOWED": 400,
    "UNSUPPORTED_CONTENT_TYPE": 415,
    "UNKNOWN_BACKEND": 404,
    "UNKNOWN_ENTRY_TYPE": 404,
    "BACKEND_CONFLICT": 409,
    "BRANCH_ALREADY_EXISTS": 409,
    "BACKEND_NOT_FOUND": 404,
    "BACKEND_AUTH_FAILED": 502,
    "BACKEND_UNAVAILABLE": 503,
    "REVIEW_PARTIALLY_COMMITTED": 502,
    "BACKEND_ERROR": 502,
}

_CATEGORY_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.CALLER_INPUT: 400,
    ErrorCategory.BACKEND: 502,
    ErrorCategory.CONFIGURATION: 500,
    ErrorCategory.CRYPTO: 500,
}


def status_for(exc: StaticimpException) -> int:
    """HTTP status for a domain exception."""
    return _ERROR_CODE_STATUS.get(exc.error_code, _CATEGORY_STATUS[exc.category])


def _staticimp_exception_handler(
    request: Request, exc: StaticimpException
) -> JSONResponse:
    """Return JSON from StaticimpException.to_dict() with appropriate status code."""
    status = status_for(exc)
    if exc.category in (ErrorCategory.CONFIGURATION, ErrorCategory.CRYPTO):
        logger.error(
            "%s error on %s: %s %s",
            exc.category.value,
            request.url.path,
            exc.message,
            exc.details,
        )
        content: dict[str, Any] = {
            "error": "CONFIGURATION_ERROR"
            if exc.category is ErrorCategory.CONFIGURATION
            else "SERVER_ERROR",
            "message": "The server is misconfigured for this request",
            "details": {},
        }
        return JSONResponse(status_code=status, content=content)
    content = exc.to_dict()
    content["retryable"] = exc.retryable
    return JSONResponse(status_code=status, content=content)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: StaticimpException (and
    subclasses), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(StaticimpException, _staticimp_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
