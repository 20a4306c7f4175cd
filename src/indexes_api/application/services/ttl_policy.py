# Copyright (c)
# SPDX-License-Identifier: MIT
"""Market-aware cache TTL policy.

Purpose:
    Pick a short TTL while the market is trading (prices move) and a longer
    one otherwise.

Layer:
    application/services
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, time
from typing import Protocol
from zoneinfo import ZoneInfo

DEFAULT_SHORT_TTL_S = 5
DEFAULT_LONG_TTL_S = 30
DEFAULT_MARKET_OPEN = time(9, 0)
DEFAULT_MARKET_CLOSE = time(15, 0)
DEFAULT_MARKET_TZ = "Asia/Ho_Chi_Minh"


class TtlPolicy(Protocol):
    """Anything that can decide a TTL at write time."""

    def ttl_seconds(self) -> int:
        """Return the TTL in seconds for an entry written now."""
        ...


def _utc_now() -> datetime:
    return datetime.now(UTC)


class MarketHoursTtlPolicy:
    """Short TTL on weekdays within ``[open, close)`` market time, long otherwise.

    Args:
        short_ttl_s: TTL used during trading hours.
        long_ttl_s: TTL used outside trading hours and on weekends.
        open: Market open (inclusive), local market time.
        close: Market close (exclusive), local market time.
        tz: IANA timezone name of the market.
        clock: Returns the current timezone-aware instant; injectable for tests.
    """

    def __init__(
        self,
        *,
        short_ttl_s: int = DEFAULT_SHORT_TTL_S,
        long_ttl_s: int = DEFAULT_LONG_TTL_S,
        open: time = DEFAULT_MARKET_OPEN,  # noqa: A002
        close: time = DEFAULT_MARKET_CLOSE,
        tz: str = DEFAULT_MARKET_TZ,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if short_ttl_s <= 0 or long_ttl_s <= 0:
            raise ValueError("TTLs must be positive")
        if open >= close:
            raise ValueError("market open must be before market close")
        self._short = short_ttl_s
        self._long = long_ttl_s
        self._open = open
        self._close = close
        self._tz = ZoneInfo(tz)
        self._clock = clock

    @property
    def long_ttl_s(self) -> int:
        return self._long

    def is_market_open(self, at: datetime | None = None) -> bool:
        """Return True when ``at`` (default: now) falls in trading hours."""
        instant = at if at is not None else self._clock()
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        local = instant.astimezone(self._tz)
        if local.weekday() >= 5:
            return False
        return self._open <= local.time() < self._close

    def ttl_seconds(self) -> int:
        return self._short if self.is_market_open() else self._long

    def today(self) -> datetime:
        """Return the current instant in market time."""
        instant = self._clock()
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        return instant.astimezone(self._tz)
