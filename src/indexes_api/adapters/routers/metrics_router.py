# Copyright (c)
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (`/metrics`).

Warms the readiness histogram so its `_bucket` series appear on the very first
scrape.

Layer:
    adapters/routers
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from indexes_api.infrastructure.logging.logger import get_json_logger
from indexes_api.infrastructure.observability.metrics_indexes import (
    get_readyz_redis_latency_seconds,
)

logger = get_json_logger(__name__)
router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics_probe() -> Response:
    """Expose Prometheus metrics in text format."""
    try:
        get_readyz_redis_latency_seconds().observe(0.0)
    except Exception as exc:  # pragma: no cover
        logger.debug(
            "metrics_router: failed warming histogram",
            extra={"extra": {"error": str(exc)}},
        )
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
