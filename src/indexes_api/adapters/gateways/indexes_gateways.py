# Copyright (c)
# SPDX-License-Identifier: MIT
"""Adapter Gateways: scraping transports → domain gateway protocols.

These gateways sit on top of the transport clients and expose the
provider-agnostic protocols the use cases depend on.

Design principles:
    * The stock-quote gateway owns the strict bootstrap → acquire sequence;
      every call gets its own session.
    * Transports already translate failures into domain exceptions; the
      gateways surface them verbatim.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from indexes_api.domain.entities.exchange_rate import ExchangeRateEntry
from indexes_api.domain.entities.quote_session import CompanyLookup
from indexes_api.domain.entities.stock_index import StockIndex
from indexes_api.domain.interfaces.gateways.indexes_gateways import (
    ExchangeRateGatewayProtocol,
    StockIndexGatewayProtocol,
    StockQuoteGatewayProtocol,
)
from indexes_api.infrastructure.external_apis.cafef.client import CafefClient
from indexes_api.infrastructure.external_apis.vietcombank.client import VietcombankClient
from indexes_api.infrastructure.external_apis.vietstock.client import VietstockClient
from indexes_api.infrastructure.external_apis.vietstock.session import SessionBootstrapper


class VietstockGateway(StockQuoteGatewayProtocol):
    """Stock quotes via a fresh Vietstock session per request."""

    def __init__(self, *, bootstrapper: SessionBootstrapper, client: VietstockClient) -> None:
        self._bootstrapper = bootstrapper
        self._client = client

    async def get_raw_quote(self, code: str) -> Mapping[str, Any]:
        session = await self._bootstrapper.bootstrap(self._client.settings.base_url)
        return await self._client.acquire(code, session)

    async def lookup_company(self, code: str) -> CompanyLookup:
        return await self._client.lookup_company(code)


class VietcombankGateway(ExchangeRateGatewayProtocol):
    """Exchange rates from the Vietcombank XML sheet."""

    def __init__(self, client: VietcombankClient) -> None:
        self._client = client

    async def get_exchange_rates(self) -> dict[str, ExchangeRateEntry]:
        return await self._client.fetch_rates()


class CafefGateway(StockIndexGatewayProtocol):
    """Market indexes from the CafeF feed."""

    def __init__(self, client: CafefClient) -> None:
        self._client = client

    async def get_stock_indexes(self) -> list[StockIndex]:
        return await self._client.fetch_indexes()
