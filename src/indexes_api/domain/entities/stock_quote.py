# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Normalized Stock Quote Entity

Purpose:
    Immutable, upstream-independent representation of a stock quote. This is
    the unit that gets cached and returned to callers.

Layer: domain/entities
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType

from .base import BaseEntity


class ChangeDirection(str, Enum):
    """Direction of the price change versus the reference price."""

    UP = "up"
    DOWN = "down"
    NONE = "none"


class ChangeColor(str, Enum):
    """Display color paired with a :class:`ChangeDirection`."""

    GREEN = "green"
    RED = "red"
    YELLOW = "yellow"


class ChartPeriod(str, Enum):
    """Fixed chart periods; values are the public JSON keys."""

    ONE_DAY = "OneDay"
    ONE_WEEK = "OneWeek"
    ONE_MONTH = "OneMonth"
    THREE_MONTHS = "ThreeMonths"
    SIX_MONTHS = "SixMonths"
    ONE_YEAR = "OneYear"


@dataclass(frozen=True, slots=True)
class QuotePrices(BaseEntity):
    """Formatted prices, already scaled to thousands of VND."""

    current: str
    reference: str
    close: str
    open: str
    ceiling: str
    floor: str
    highest: str
    lowest: str
    average: str
    high_52w: str
    low_52w: str
    unit: str = "1.000 đ"


@dataclass(frozen=True, slots=True)
class QuoteChange(BaseEntity):
    """Formatted change versus the reference price."""

    volume: str
    percent: str
    direction: ChangeDirection
    color: ChangeColor


@dataclass(frozen=True, slots=True)
class NormalizedQuote(BaseEntity):
    """Stable public quote shape.

    Args:
        code: Upper-case stock code.
        name: Company display name (falls back to ``code``).
        as_of_date: Most recent trading day.
        volume: vi-VN formatted traded value.
        capital: vi-VN formatted market capital.
        shares: vi-VN formatted outstanding shares.
        source_url: Canonical page for the company.
        prices: Formatted prices.
        change: Formatted change.
        chart_urls: Chart image URL per period.
        source_label: Human label of the upstream.
    """

    code: str
    name: str
    as_of_date: date
    volume: str
    capital: str
    shares: str
    source_url: str
    prices: QuotePrices
    change: QuoteChange
    chart_urls: Mapping[ChartPeriod, str] = field(default_factory=dict)
    source_label: str = "VietStock.vn"

    def __post_init__(self) -> None:
        if not self.code or self.code != self.code.upper():
            raise ValueError("code must be upper-case non-empty")
        object.__setattr__(self, "chart_urls", MappingProxyType(dict(self.chart_urls)))
