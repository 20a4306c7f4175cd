# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Exchange Rate Entity

Purpose:
    One quoted currency from the bank's exchange-rate feed.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass

from .base import BaseEntity


@dataclass(frozen=True, slots=True)
class ExchangeRateEntry(BaseEntity):
    """Buy/sell/transfer rates for a currency.

    A rate of ``0.0`` means the upstream did not quote that side.
    """

    code: str
    name: str
    buy: float
    sell: float
    transfer: float

    def __post_init__(self) -> None:
        if not self.code or self.code != self.code.upper():
            raise ValueError("code must be upper-case non-empty")
