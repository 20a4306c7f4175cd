# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Use Case: Get Stock Indexes

Purpose:
    Serve market index snapshots (name → capitalized fields) through the
    read-through cache.

Layer: application/use_cases
"""

from __future__ import annotations

from typing import Any

from indexes_api.application.services.read_through import CachedBody
from indexes_api.application.use_cases.indexes.base import CachedIndexesUseCase
from indexes_api.domain.interfaces.gateways.indexes_gateways import (
    StockIndexGatewayProtocol,
)

STOCK_INDEXES_CACHE_KEY = "StockIndexes"


class GetStockIndexes(CachedIndexesUseCase):
    """Use case returning every index keyed by its upstream name."""

    resource = "StockIndexes"

    def __init__(self, gateway: StockIndexGatewayProtocol, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._gateway = gateway

    async def execute(self) -> CachedBody:
        async def produce() -> dict[str, Any]:
            indexes = await self._gateway.get_stock_indexes()
            return {index.name: dict(index.fields) for index in indexes}

        return await self._serve(STOCK_INDEXES_CACHE_KEY, produce)
