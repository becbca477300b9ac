"""FastAPI exception handlers for GKV exceptions."""

from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from gkv.exceptions import (
    GKVError,
    MethodNotAllowedError,
    NotFoundError,
    ValidationError,
)

INVALID_BODY = "Invalid request body"
KEY_NOT_FOUND = "Key not found"
METHOD_NOT_ALLOWED = "Method not allowed"
INTERNAL_ERROR = "Internal server error"


async def gkv_exception_handler(request: Request, exc: GKVError) -> JSONResponse:
    """Handle GKV-specific exceptions."""
    content: dict[str, Any]
    if isinstance(exc, ValidationError):
        content = {"error": INVALID_BODY}
        if exc.issues:
            content["issues"] = exc.issues
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)
    if isinstance(exc, NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": KEY_NOT_FOUND})
    if isinstance(exc, MethodNotAllowedError):
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content={"error": METHOD_NOT_ALLOWED},
        )

    # Backend and configuration failures are logged, never echoed to the caller
    logger.error(
        "GKV exception: {type} - {message}",
        type=type(exc).__name__,
        message=exc.message,
        details=exc.details,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render router-level HTTP errors with the same body shape."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": METHOD_NOT_ALLOWED},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR},
    )
