"""
levelup.api.errors — JSON error responses
===========================================

Every error leaves the API as ``{"error": "<message>"}``.  Request-body
validation failures are client errors (400), not 422.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _describe(errors: list[dict]) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query"))
    if first.get("type") == "missing":
        return f"Missing required field: {field}" if field else "Missing request body"
    return f"Invalid value for {field}: {first.get('msg', 'invalid')}" if field else "Invalid request"


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        return JSONResponse(
            status_code=400,
            content={"error": _describe(errors), "details": jsonable_encoder(errors)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception on %s %s", request.method, request.url.path,
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
