"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that produce
application/problem+json responses.
"""

from __future__ import annotations

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tourism_admin.logic.errors import PositionStoreError
from tourism_admin.models.collections import UnknownCollectionError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        detail = exc.detail
    else:
        detail = {"title": "Error", "status": status_code, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (getattr(exc, "headers", None) or {}).items()}
    return JSONResponse(
        detail,
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers or None,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "code": "REQUEST_INVALID",
        "errors": [
            {"loc": list(e.get("loc", ())), "msg": str(e.get("msg", "")), "type": str(e.get("type", ""))}
            for e in exc.errors()
        ],
    }
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_position_store_error(request: Request, exc: PositionStoreError) -> JSONResponse:  # noqa: D401
    logger.error("position_store_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        {
            "title": "Service Unavailable",
            "status": 503,
            "detail": str(exc),
            "message": str(exc),
            "code": "STORE_ERROR",
        },
        status_code=503,
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def handle_unknown_collection(request: Request, exc: UnknownCollectionError) -> JSONResponse:  # noqa: D401
    # Path segments are resolved before reaching the engine; anything landing here is a caller bug
    logger.error("unknown_collection path=%s name=%r", request.url.path, exc.name, exc_info=exc)
    return JSONResponse(
        {"title": "Internal Server Error", "status": 500, "detail": str(exc), "code": "COLLECTION_MISCONFIGURED"},
        status_code=500,
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse({"title": "Internal Server Error", "status": 500}, status_code=500, media_type=PROBLEM_MEDIA_TYPE)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_position_store_error",
    "handle_unknown_collection",
    "handle_unexpected_error",
]
