# Copyright (c)
# SPDX-License-Identifier: MIT
"""API Router Aggregator (Adapters Layer).

Purpose:
    Compose the top-level `router` that includes all feature routers.

Responsibilities:
    • Mount health endpoints under `/health`.
    • Mount exchange rates, stock indexes and quotes under `/v1/indexes/...`.

Layer:
    adapters/routers
"""

from __future__ import annotations

from fastapi import APIRouter

from indexes_api.adapters.routers.health_router import router as health_router
from indexes_api.adapters.routers.indexes_router import router as indexes_router

router = APIRouter()

router.include_router(health_router, prefix="/health", tags=["Health"])

# indexes_router already carries the /v1/indexes prefix.
router.include_router(indexes_router)
