# Copyright (c)
# SPDX-License-Identifier: MIT
"""Health endpoints (Adapters Layer).

Purpose:
    Expose liveness and readiness signals for orchestrators and load
    balancers.

Design:
    * Probes are injected through ``probe_provider`` so tests can override
      them by identity.
    * Readiness pings Redis; in test mode (no Redis) the check is skipped.
    * Probe latency is recorded to Prometheus.
"""

from __future__ import annotations

import asyncio
import typing as t
from enum import Enum
from typing import Annotated, Protocol

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import Field

from indexes_api.adapters.schemas.http.base import BaseHTTPSchema
from indexes_api.infrastructure.logging.logger import get_json_logger
from indexes_api.infrastructure.observability.metrics_indexes import (
    get_readyz_redis_latency_seconds,
)

logger = get_json_logger(__name__)
router = APIRouter()


class HealthState(str, Enum):
    """Overall service health classification."""

    OK = "ok"
    DEGRADED = "degraded"


class CheckResult(BaseHTTPSchema):
    """Result of a single dependency check."""

    name: str = Field(..., examples=["redis"])
    status: t.Literal["ok", "down", "skipped"]
    detail: str | None = None
    duration_ms: float


class ReadinessResponse(BaseHTTPSchema):
    """Aggregated readiness response."""

    status: HealthState
    checks: list[CheckResult] = Field(default_factory=list)


class LivenessResponse(BaseHTTPSchema):
    """Liveness response indicating the process is running."""

    status: t.Literal["ok"] = "ok"


class HealthProbe(Protocol):
    """Minimal, non-destructive dependency checks.

    ``redis`` returns ``(is_ok, detail)``; ``None`` for ``is_ok`` means the
    check does not apply in this environment.
    """

    async def redis(self) -> tuple[bool | None, str | None]: ...


class RedisProbe:
    """Pings the shared Redis client."""

    def __init__(self, *, enabled: bool = True, timeout_s: float = 1.0) -> None:
        self._enabled = enabled
        self._timeout = timeout_s

    async def redis(self) -> tuple[bool | None, str | None]:
        if not self._enabled:
            return None, "test mode"
        from indexes_api.infrastructure.caching.redis_client import get_redis_client

        try:
            await asyncio.wait_for(get_redis_client().ping(), timeout=self._timeout)
        except Exception as exc:
            return False, f"{type(exc).__name__}: {exc}"
        return True, None


class ProbeProvider:
    """Dependency token object for readiness routes."""

    def __call__(self, request: Request) -> HealthProbe:
        state = getattr(request.app.state, "indexes", None)
        test_mode = bool(state is not None and state.settings.test_mode)
        return RedisProbe(enabled=not test_mode)


probe_provider = ProbeProvider()


@router.get(
    "/liveness",
    summary="Liveness",
    operation_id="health_liveness",
    response_model=LivenessResponse,
    status_code=status.HTTP_200_OK,
)
async def liveness() -> LivenessResponse:
    """Return a fast liveness signal (no external I/O)."""
    return LivenessResponse()


@router.get(
    "/readiness",
    summary="Readiness",
    operation_id="health_readiness",
    response_model=ReadinessResponse,
    responses={503: {"description": "Service degraded", "model": ReadinessResponse}},
)
async def readiness(
    response: Response,
    probe: Annotated[HealthProbe, Depends(probe_provider, use_cache=False)],
) -> ReadinessResponse:
    """Ping dependencies; HTTP 503 with ``degraded`` when any check fails."""
    loop = asyncio.get_running_loop()
    start = loop.time()
    ok, detail = await probe.redis()
    elapsed = loop.time() - start
    get_readyz_redis_latency_seconds().observe(elapsed)

    check = CheckResult(
        name="redis",
        status="skipped" if ok is None else ("ok" if ok else "down"),
        detail=detail,
        duration_ms=elapsed * 1000.0,
    )
    healthy = ok is not False
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    payload = ReadinessResponse(
        status=HealthState.OK if healthy else HealthState.DEGRADED,
        checks=[check],
    )
    logger.info(
        "readiness_probe",
        extra={"extra": {"overall": payload.status, "checks": [check.model_dump_http()]}},
    )
    return payload
