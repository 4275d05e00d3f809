"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). The search use case
absorbs its own failures, so these only catch what escapes elsewhere:
domain exceptions map to status codes by error_code, validation errors
to 422, anything else to 500.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketsearch.core.config import get_settings
from marketsearch.domain.exceptions import MarketSearchException
from marketsearch.shared.utils.sanitization import sanitize_log_message

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "INVALID_SEARCH_INPUT": 400,
    "RATE_LIMITED": 429,
    "STORE_ERROR": 502,
    "SEARCH_TIMEOUT": 504,
    "PARTIAL_DATA_INCONSISTENCY": 502,
    "STORE_NOT_CONFIGURED": 503,
}


def _marketsearch_exception_handler(
    request: Request, exc: MarketSearchException
) -> JSONResponse:
    """Return JSON from MarketSearchException.to_dict() with the mapped status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error("%s: %s", exc.error_code, sanitize_log_message(exc.message))
    return JSONResponse(status_code=status, content=exc.to_dict())


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
    logger.exception("Unhandled exception: %s", sanitize_log_message(exc))
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: MarketSearchException (and
    subclasses), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(MarketSearchException, _marketsearch_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
