"""HTTP error responses for StorefrontException and framework errors.

Every error body shares the {"error", "message", "details"} shape. Status
codes come from the exception's error_code; unknown codes become 400.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import StorefrontException
from app.shared.telemetry.tracing import get_trace_id

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "TENANT_CONTEXT_REQUIRED": 400,
    "PLAN_LIMIT_EXCEEDED": 403,
    "TENANT_NOT_FOUND": 404,
    "RECORD_STORE_ERROR": 503,
    "CHANGE_CHANNEL_ERROR": 503,
    "QUERY_CANCELLED": 503,
}


def _storefront_exception_handler(
    request: Request, exc: StorefrontException
) -> JSONResponse:
    """to_dict() body; 5xx codes are also logged with their details."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error("%s on %s: %s", exc.error_code, request.url.path, exc.details)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 with pydantic's error list as details."""
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
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unhandled error: 500 carrying the request and trace ids. Detail only in debug."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": detail,
            "request_id": getattr(request.state, "request_id", None),
            "trace_id": get_trace_id(),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers; create_app calls this once."""
    app.add_exception_handler(StorefrontException, _storefront_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
