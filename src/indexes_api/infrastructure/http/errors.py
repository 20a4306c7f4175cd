# Copyright (c)
# SPDX-License-Identifier: MIT
"""HTTP error envelope and exception handlers.

Every failure leaves the service as::

    {"error": {"code", "http_status", "message", "details"?, "trace_id"?}}
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from indexes_api.domain.exceptions.base import DomainError
from indexes_api.infrastructure.logging.logger import get_json_logger, get_trace_id

logger = get_json_logger(__name__)


def _trace_id(request: Request) -> str | None:
    state = getattr(request, "state", None)
    return (
        getattr(state, "trace_id", None) or getattr(state, "request_id", None) or get_trace_id()
    )


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    err: dict[str, Any] = {
        "code": code,
        "http_status": http_status,
        "message": message,
    }
    if details:
        err["details"] = details
    if trace_id is not None:
        err["trace_id"] = trace_id
    return {"error": err}


async def handle_domain_error(request: Request, exc: DomainError) -> Response:
    level = "warning" if exc.http_status >= 500 else "info"
    getattr(logger, level)(
        "request.domain_error",
        extra={
            "extra": {
                "code": exc.code,
                "http_status": exc.http_status,
                "path": request.url.path,
                "details": exc.details,
            }
        },
    )
    payload = error_envelope(
        code=exc.code,
        http_status=exc.http_status,
        message=exc.message or exc.code,
        details=exc.details,
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=exc.http_status, content=payload)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": exc.errors()},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=422, content=payload)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        details=None if isinstance(exc.detail, str) else {"detail": exc.detail},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    logger.error(
        "request.unhandled_exception",
        exc_info=exc,
        extra={"extra": {"path": request.url.path}},
    )
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=500, content=payload)
