# Copyright (c)
# SPDX-License-Identifier: MIT
"""Stock quote normalization.

Purpose:
    Map raw trading-data payloads into :class:`NormalizedQuote`. The upstream
    has renamed its fields across releases, so each known contract is modeled
    as a versioned adapter selected by a discriminating field.

Layer:
    domain/services

Notes:
    - Pure domain logic: no logging, no HTTP, no clock access (``today`` and
      the cache-buster are injected).
    - Unknown contracts fail closed with :class:`StockQuoteNotFound`.
    - Required numeric fields that cannot be coerced raise
      :class:`SchemaMismatch`.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any
from urllib.parse import quote

from indexes_api.domain.entities.quote_session import CompanyLookup
from indexes_api.domain.entities.stock_quote import (
    ChangeColor,
    ChangeDirection,
    ChartPeriod,
    NormalizedQuote,
    QuoteChange,
    QuotePrices,
)
from indexes_api.domain.exceptions.indexes import SchemaMismatch, StockQuoteNotFound
from indexes_api.domain.services.number_formatting import format_count, format_price

__all__ = [
    "CHART_SUFFIXES",
    "CONTRACTS",
    "DEFAULT_CHART_BASE_URL",
    "MANDATORY_FIELD",
    "QuoteContract",
    "as_of_date",
    "build_chart_urls",
    "change_direction",
    "normalize",
    "select_contract",
]

#: Reference (prior close) price; present in every known contract.
MANDATORY_FIELD = "PriorClosePrice"

DEFAULT_CHART_BASE_URL = "https://cafef4.vcmedia.vn"
DEFAULT_SOURCE_BASE_URL = "https://finance.vietstock.vn"

_PRICE_SCALE = 1000.0
_AMOUNT_UNIT = " tỷ đ"

CHART_SUFFIXES: Mapping[ChartPeriod, str] = {
    ChartPeriod.ONE_DAY: "1day",
    ChartPeriod.ONE_WEEK: "7days",
    ChartPeriod.ONE_MONTH: "1month",
    ChartPeriod.THREE_MONTHS: "3months",
    ChartPeriod.SIX_MONTHS: "6months",
    ChartPeriod.ONE_YEAR: "1year",
}


@dataclass(frozen=True)
class QuoteContract:
    """Field names of one upstream contract.

    Attributes:
        version: Stable adapter identifier (for diagnostics).
        discriminator: Field whose presence selects this contract.
        close: Last / close price.
        highest: Session high.
        lowest: Session low.
        high_52w: 52-week high.
        low_52w: 52-week low.
        change_volume: Absolute change versus reference.
        change_percent: Percent change versus reference.
        volume: Traded value.
        capital: Market capital.
        reference / open / average / ceiling / floor / shares / color_id / url:
            Names that did not change between releases.
    """

    version: str
    discriminator: str
    close: str
    highest: str
    lowest: str
    high_52w: str
    low_52w: str
    change_volume: str
    change_percent: str
    volume: str
    capital: str
    reference: str = MANDATORY_FIELD
    open: str = "OpenPrice"
    average: str = "AvrPrice"
    ceiling: str = "CeilingPrice"
    floor: str = "FloorPrice"
    shares: str = "KLCPNY"
    color_id: str = "ColorId"
    url: str = "URL"


TRADING_INFO_V2 = QuoteContract(
    version="trading_info_v2",
    discriminator="LastPrice",
    close="LastPrice",
    highest="HighestPrice",
    lowest="LowestPrice",
    high_52w="Max52W",
    low_52w="Min52W",
    change_volume="Change",
    change_percent="PerChange",
    volume="TotalVol",
    capital="MarketCapital",
)

TRADING_RESULT_V1 = QuoteContract(
    version="trading_result_v1",
    discriminator="ClosePrice",
    close="ClosePrice",
    highest="Highest",
    lowest="Lowest",
    high_52w="YearHigh",
    low_52w="YearLow",
    change_volume="Oscillate",
    change_percent="PercentOscillate",
    volume="TradingVolume",
    capital="CapitalLevel",
)

#: Newest first; the first contract whose discriminator is present wins.
CONTRACTS: tuple[QuoteContract, ...] = (TRADING_INFO_V2, TRADING_RESULT_V1)


# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #


def select_contract(raw: Mapping[str, Any]) -> QuoteContract | None:
    """Return the contract matching ``raw``, or ``None`` when none matches."""
    for contract in CONTRACTS:
        if contract.discriminator in raw:
            return contract
    return None


def _non_finite(key: str, value: Any) -> SchemaMismatch:
    return SchemaMismatch(
        f"field '{key}' is not a finite number", details={"field": key, "value": str(value)}
    )


def _to_float(raw: Mapping[str, Any], key: str, *, required: bool) -> float:
    value = raw.get(key)
    if value is None:
        if required:
            raise SchemaMismatch(
                f"required field '{key}' is missing", details={"field": key}
            )
        return 0.0
    if isinstance(value, bool):
        raise SchemaMismatch(f"field '{key}' is not numeric", details={"field": key})
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip().replace(",", ""))
        except ValueError as exc:
            if not required:
                return 0.0
            raise SchemaMismatch(
                f"field '{key}' is not numeric", details={"field": key, "value": str(value)}
            ) from exc
    # json.loads accepts NaN and Infinity; they must never reach a cached body.
    if not math.isfinite(number):
        raise _non_finite(key, value)
    return number


def _to_color_id(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise SchemaMismatch(
            f"field '{key}' is not an integer", details={"field": key, "value": str(value)}
        ) from exc
    if not math.isfinite(number):
        raise _non_finite(key, value)
    return int(number)


def _format_percent(key: str, value: Any) -> str:
    if value is None:
        return "0%"
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value}%"
    if isinstance(value, float):
        if not math.isfinite(value):
            raise _non_finite(key, value)
        # Plain decimal notation with every significant digit, never exponents.
        return f"{Decimal(repr(value)).normalize():f}%"
    text = str(value).strip().rstrip("%")
    return f"{text or '0'}%"


def change_direction(color_id: int) -> tuple[ChangeDirection, ChangeColor]:
    """Map the signed upstream color id to direction and color."""
    if color_id > 0:
        return ChangeDirection.UP, ChangeColor.GREEN
    if color_id < 0:
        return ChangeDirection.DOWN, ChangeColor.RED
    return ChangeDirection.NONE, ChangeColor.YELLOW


def as_of_date(today: date) -> date:
    """Return the most recent trading day: weekends roll back to Friday."""
    weekday = today.weekday()
    if weekday == 5:
        return today - timedelta(days=1)
    if weekday == 6:
        return today - timedelta(days=2)
    return today


def build_chart_urls(
    code: str,
    *,
    base_url: str = DEFAULT_CHART_BASE_URL,
    cache_buster: Callable[[], str] | None = None,
) -> dict[ChartPeriod, str]:
    """Build chart image URLs for every fixed period.

    Args:
        code: Upper-case stock code.
        base_url: Chart host.
        cache_buster: Factory of unique query values (uuid4 hex by default).

    Returns:
        Mapping of period to URL.
    """
    bust = cache_buster or (lambda: uuid.uuid4().hex)
    prefix = f"{base_url.rstrip('/')}/{quote(code, safe='')}"
    return {
        period: f"{prefix}/{suffix}.png?v={bust()}" for period, suffix in CHART_SUFFIXES.items()
    }


def _scaled_price(raw: Mapping[str, Any], key: str, *, required: bool = True) -> str:
    return format_price(_to_float(raw, key, required=required) / _PRICE_SCALE)


# --------------------------------------------------------------------------- #
# Entry point                                                                 #
# --------------------------------------------------------------------------- #


def normalize(
    raw: Mapping[str, Any],
    code: str,
    *,
    today: date,
    company: CompanyLookup | None = None,
    chart_base_url: str = DEFAULT_CHART_BASE_URL,
    source_base_url: str = DEFAULT_SOURCE_BASE_URL,
    cache_buster: Callable[[], str] | None = None,
) -> NormalizedQuote:
    """Normalize a raw trading-data payload.

    Args:
        raw: Upstream payload (already checked for the mandatory field).
        code: Stock code; upper-cased here.
        today: Current local date used for the as-of heuristic.
        company: Optional company lookup used for name and source URL.
        chart_base_url: Chart host.
        source_base_url: Host used to build the fallback source URL.
        cache_buster: Factory of unique chart query values.

    Returns:
        The normalized quote.

    Raises:
        StockQuoteNotFound: If no known contract matches the payload.
        SchemaMismatch: If a required numeric field cannot be coerced.
    """
    code = code.strip().upper()
    contract = select_contract(raw)
    if contract is None:
        raise StockQuoteNotFound(
            f"no known contract for stock '{code}'",
            details={"code": code, "reason": "unknown_contract", "fields": sorted(raw)[:20]},
        )

    direction, color = change_direction(_to_color_id(raw, contract.color_id))
    close = _scaled_price(raw, contract.close, required=False)

    prices = QuotePrices(
        current=close,
        reference=_scaled_price(raw, contract.reference),
        close=close,
        open=_scaled_price(raw, contract.open),
        ceiling=_scaled_price(raw, contract.ceiling),
        floor=_scaled_price(raw, contract.floor),
        highest=_scaled_price(raw, contract.highest),
        lowest=_scaled_price(raw, contract.lowest),
        average=_scaled_price(raw, contract.average),
        high_52w=_scaled_price(raw, contract.high_52w),
        low_52w=_scaled_price(raw, contract.low_52w),
    )
    change = QuoteChange(
        volume=_scaled_price(raw, contract.change_volume, required=False),
        percent=_format_percent(contract.change_percent, raw.get(contract.change_percent)),
        direction=direction,
        color=color,
    )

    profile = company.profile if company is not None else None
    payload_url = raw.get(contract.url)
    if profile is not None and profile.url:
        source_url = profile.url
    elif isinstance(payload_url, str) and payload_url.strip():
        source_url = payload_url.strip()
    else:
        source_url = f"{source_base_url.rstrip('/')}/{quote(code, safe='')}/profile.htm"

    return NormalizedQuote(
        code=code,
        name=profile.name if profile is not None and profile.name else code,
        as_of_date=as_of_date(today),
        volume=format_count(_to_float(raw, contract.volume, required=True)) + _AMOUNT_UNIT,
        capital=format_count(_to_float(raw, contract.capital, required=True)) + _AMOUNT_UNIT,
        shares=format_count(_to_float(raw, contract.shares, required=True)),
        source_url=source_url,
        prices=prices,
        change=change,
        chart_urls=build_chart_urls(code, base_url=chart_base_url, cache_buster=cache_buster),
    )
