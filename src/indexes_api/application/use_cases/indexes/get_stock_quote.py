# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Use Case: Get Stock Quote

Purpose:
    Acquire, normalize and cache a single stock quote. On a miss the gateway
    performs the session bootstrap and the trading-data POST; the payload is
    then normalized and enriched with the company lookup.

Layer: application/use_cases
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from indexes_api.application.services.read_through import CachedBody
from indexes_api.application.services.ttl_policy import MarketHoursTtlPolicy
from indexes_api.application.use_cases.indexes.base import CachedIndexesUseCase
from indexes_api.domain.entities.stock_quote import NormalizedQuote
from indexes_api.domain.exceptions.indexes import InvalidRequest, StockQuoteNotFound
from indexes_api.domain.interfaces.gateways.indexes_gateways import (
    StockQuoteGatewayProtocol,
)
from indexes_api.domain.services.quote_normalization import (
    DEFAULT_CHART_BASE_URL,
    DEFAULT_SOURCE_BASE_URL,
    normalize,
)
from indexes_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def stock_quote_cache_key(code: str) -> str:
    """Build the cache key for a stock quote."""
    return f"StockQuote:{code.upper()}"


def quote_to_payload(quote: NormalizedQuote) -> dict[str, Any]:
    """Serialize a :class:`NormalizedQuote` into the public JSON shape."""
    prices = quote.prices
    change = quote.change
    return {
        "Info": {
            "Code": quote.code,
            "Name": quote.name,
            "Date": quote.as_of_date.isoformat(),
            "Volume": quote.volume,
            "Capital": quote.capital,
            "Shares": quote.shares,
            "Source": {"Label": quote.source_label, "Url": quote.source_url},
        },
        "Prices": {
            "Unit": prices.unit,
            "Current": prices.current,
            "Reference": prices.reference,
            "Close": prices.close,
            "Open": prices.open,
            "Ceiling": prices.ceiling,
            "Floor": prices.floor,
            "Highest": prices.highest,
            "Lowest": prices.lowest,
            "Average": prices.average,
            "HighestOf52Weeks": prices.high_52w,
            "LowestOf52Weeks": prices.low_52w,
        },
        "Changes": {
            "Volume": change.volume,
            "Percent": change.percent,
            "Type": change.direction.value,
            "Color": change.color.value,
        },
        "Charts": {period.value: url for period, url in quote.chart_urls.items()},
    }


class GetStockQuote(CachedIndexesUseCase):
    """Use case returning one normalized stock quote.

    Args:
        gateway: Stock-quote gateway (session bootstrap + acquisition + lookup).
        chart_base_url: Chart image host.
        source_base_url: Host for the fallback company page URL.
        cache_buster: Optional factory of chart URL cache-busters (tests).

    Raises:
        InvalidRequest: If the code is blank.
        StockQuoteNotFound: If no usable quote could be acquired.
        SchemaMismatch: If the payload matched a contract but is malformed.
    """

    resource = "StockQuote"

    def __init__(
        self,
        gateway: StockQuoteGatewayProtocol,
        *,
        ttl_policy: MarketHoursTtlPolicy,
        chart_base_url: str = DEFAULT_CHART_BASE_URL,
        source_base_url: str = DEFAULT_SOURCE_BASE_URL,
        cache_buster: Callable[[], str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(ttl_policy=ttl_policy, **kwargs)
        self._gateway = gateway
        self._market = ttl_policy
        self._chart_base_url = chart_base_url
        self._source_base_url = source_base_url
        self._cache_buster = cache_buster

    async def execute(self, code: str) -> CachedBody:
        normalized_code = (code or "").strip().upper()
        if not normalized_code:
            raise InvalidRequest("stock code is required")

        async def produce() -> dict[str, Any]:
            quote = await self._acquire(normalized_code)
            return quote_to_payload(quote)

        return await self._serve(stock_quote_cache_key(normalized_code), produce)

    async def _acquire(self, code: str) -> NormalizedQuote:
        raw = await self._gateway.get_raw_quote(code)
        company = await self._gateway.lookup_company(code)
        if not company.found:
            logger.info(
                "company_lookup.miss",
                extra={"extra": {"code": code, "diagnostic": company.diagnostic}},
            )
        try:
            return normalize(
                raw,
                code,
                today=self._market.today().date(),
                company=company,
                chart_base_url=self._chart_base_url,
                source_base_url=self._source_base_url,
                cache_buster=self._cache_buster,
            )
        except StockQuoteNotFound as exc:
            logger.warning(
                "stock_quote.unknown_contract",
                extra={"extra": {"code": code, **(exc.details or {})}},
            )
            raise
