# Copyright (c)
# SPDX-License-Identifier: MIT
"""Indexes Gateway Protocols.

Synopsis:
    Domain-level Protocols (PEP 544) abstracting the scraped upstreams.
    Concrete implementations live in the adapters/infrastructure layers and
    must satisfy these contracts.

Design:
    * Keeps the domain/application layers independent of HTTP.
    * Implementations translate every transport failure into domain
      exceptions (``StockQuoteNotFound``, ``UpstreamUnavailable``,
      ``SchemaMismatch``).

Layer:
    domain/interfaces/gateways
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from indexes_api.domain.entities.exchange_rate import ExchangeRateEntry
from indexes_api.domain.entities.quote_session import CompanyLookup
from indexes_api.domain.entities.stock_index import StockIndex


class StockQuoteGatewayProtocol(Protocol):
    """Source of raw stock trading data plus company metadata."""

    async def get_raw_quote(self, code: str) -> Mapping[str, Any]:
        """Return the raw trading-data payload for ``code``.

        Raises:
            StockQuoteNotFound: The upstream produced no usable quote.
        """
        ...

    async def lookup_company(self, code: str) -> CompanyLookup:
        """Return the best-effort company lookup for ``code`` (never raises)."""
        ...


class ExchangeRateGatewayProtocol(Protocol):
    """Source of current currency exchange rates."""

    async def get_exchange_rates(self) -> dict[str, ExchangeRateEntry]:
        """Return entries keyed by upper-case currency code.

        Raises:
            UpstreamUnavailable: The feed could not be fetched or parsed.
        """
        ...


class StockIndexGatewayProtocol(Protocol):
    """Source of market index snapshots."""

    async def get_stock_indexes(self) -> list[StockIndex]:
        """Return one :class:`StockIndex` per upstream index object.

        Raises:
            UpstreamUnavailable: The feed could not be fetched or parsed.
        """
        ...
