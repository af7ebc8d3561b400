"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain, storage and
framework exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import LaporanServiceException
from app.infrastructure.exceptions import StorageException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "WORKFLOW_RULE_VIOLATION": 409,
    "LAPORAN_VERSION_CONFLICT": 409,
    "PERSISTENCE_ERROR": 500,
    "SERVICE_UNAVAILABLE": 503,
}

# Storage failures are upstream faults regardless of the specific code.
_STORAGE_STATUS = 502


def _status_for(exc: LaporanServiceException) -> int:
    if isinstance(exc, StorageException):
        return 404 if exc.error_code == "STORAGE_NOT_FOUND" else _STORAGE_STATUS
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _laporan_exception_handler(
    request: Request, exc: LaporanServiceException
) -> JSONResponse:
    """Return JSON from LaporanServiceException.to_dict() with appropriate status code."""
    status = _status_for(exc)
    if status >= 500:
        logger.error(
            "%s %s failed: %s %s", request.method, request.url.path, exc.error_code, exc.details
        )
    content = exc.to_dict()
    if status >= 500 and not get_settings().debug:
        content["details"] = {}
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=content, headers=headers)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
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

    Call once after creating the app. Handlers: LaporanServiceException (and
    subclasses, storage errors included), RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(LaporanServiceException, _laporan_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
