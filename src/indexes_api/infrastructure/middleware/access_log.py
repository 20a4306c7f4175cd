# Copyright (c)
# SPDX-License-Identifier: MIT
"""Access Log Middleware.

Summary:
    Emits one structured access log entry for every request/response pair.

Fields:
    evt: Literal "access" marker.
    method: HTTP method.
    path: URL path (no scheme/host).
    status: HTTP status code (500 if unhandled exception).
    elapsed_ms: Latency in milliseconds, rounded to two decimals.
    cache: ``X-Cache`` response header (HIT/MISS) when present.
    ok: True if the downstream handler returned normally; False if raised.

Usage:
    app.add_middleware(AccessLogMiddleware)
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from indexes_api.infrastructure.logging.logger import get_json_logger

_logger: logging.Logger = get_json_logger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Structured access logging middleware."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Log a single access record around the downstream handler.

        Raises:
            Exception: Re-raised after logging if the downstream handler fails.
        """
        t0 = time.perf_counter()
        response: Response | None = None
        ok = False
        try:
            response = await call_next(request)
            ok = True
            return response
        finally:
            elapsed_ms = (time.perf_counter() - t0) * 1000.0
            log: dict[str, Any] = {
                "evt": "access",
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code if response is not None else 500,
                "elapsed_ms": round(elapsed_ms, 2),
                "client_ip": request.client.host if request.client else None,
                "cache": response.headers.get("X-Cache") if response is not None else None,
                "ok": ok,
            }
            _logger.info("access_log", extra={"extra": log})
