# Copyright (c)
# SPDX-License-Identifier: MIT
"""Locale-aware number formatting.

Purpose:
    Format numbers with the digit grouping of a named locale. Two locales are
    in play for quotes: counts (volume, capital, shares) use ``vi-VN`` while
    prices use ``en-US``.

Layer:
    domain/services

Notes:
    Pure domain logic: no logging, no I/O, no process-locale dependency.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NumberLocale:
    """Grouping and decimal separators of a locale."""

    name: str
    group_separator: str
    decimal_separator: str

    def format(self, value: float, *, decimals: int = 0) -> str:
        """Format ``value`` with thousands grouping and fixed decimals.

        Args:
            value: Number to render.
            decimals: Digits after the decimal separator.

        Returns:
            The grouped representation, e.g. ``1.234.567`` for ``vi-VN``.
        """
        if round(value, decimals) == 0:
            # Avoid "-0.00" for tiny negative values.
            value = 0.0
        rendered = f"{value:,.{decimals}f}"
        return rendered.translate(
            {ord(","): self.group_separator, ord("."): self.decimal_separator}
        )


EN_US = NumberLocale(name="en-US", group_separator=",", decimal_separator=".")
VI_VN = NumberLocale(name="vi-VN", group_separator=".", decimal_separator=",")


def format_price(value: float) -> str:
    """Render a price as ``#,##0.00`` in ``en-US``."""
    return EN_US.format(value, decimals=2)


def format_count(value: float) -> str:
    """Render a whole amount as ``#,##0`` in ``vi-VN`` (half-to-even rounding)."""
    return VI_VN.format(round(value), decimals=0)
