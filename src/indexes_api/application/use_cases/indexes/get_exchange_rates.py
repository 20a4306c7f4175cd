# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Use Case: Get Exchange Rates

Purpose:
    Serve the bank's current exchange rates through the read-through cache.

Layer: application/use_cases
"""

from __future__ import annotations

from typing import Any

from indexes_api.application.services.read_through import CachedBody
from indexes_api.application.use_cases.indexes.base import CachedIndexesUseCase
from indexes_api.domain.entities.exchange_rate import ExchangeRateEntry
from indexes_api.domain.interfaces.gateways.indexes_gateways import (
    ExchangeRateGatewayProtocol,
)

EXCHANGE_RATES_CACHE_KEY = "ExchangeRates"


def _rate_to_payload(entry: ExchangeRateEntry) -> dict[str, Any]:
    return {
        "Code": entry.code,
        "Name": entry.name,
        "Buy": entry.buy,
        "Sell": entry.sell,
        "Transfer": entry.transfer,
    }


class GetExchangeRates(CachedIndexesUseCase):
    """Use case returning exchange rates keyed by currency code.

    Raises:
        UpstreamUnavailable: On a cache miss when the feed cannot be read.
    """

    resource = "ExchangeRates"

    def __init__(self, gateway: ExchangeRateGatewayProtocol, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._gateway = gateway

    async def execute(self) -> CachedBody:
        async def produce() -> dict[str, Any]:
            rates = await self._gateway.get_exchange_rates()
            return {code: _rate_to_payload(entry) for code, entry in rates.items()}

        return await self._serve(EXCHANGE_RATES_CACHE_KEY, produce)
