from __future__ import annotations

from datetime import UTC, datetime, time

import pytest

from indexes_api.application.services.ttl_policy import MarketHoursTtlPolicy

# Asia/Ho_Chi_Minh is UTC+7 with no DST.


def _at(year: int, month: int, day: int, hour: int, minute: int = 0) -> datetime:
    """Build a UTC instant from a Ho Chi Minh local wall-clock time."""
    return datetime(year, month, day, hour - 7, minute, tzinfo=UTC)


@pytest.mark.parametrize(
    ("instant", "expected_ttl"),
    [
        (_at(2024, 3, 8, 9, 0), 5),  # Friday at open
        (_at(2024, 3, 8, 14, 59), 5),  # Friday just before close
        (_at(2024, 3, 8, 15, 0), 30),  # close is exclusive
        (_at(2024, 3, 8, 8, 59), 30),  # before open
        (_at(2024, 3, 9, 10, 0), 30),  # Saturday
        (_at(2024, 3, 10, 10, 0), 30),  # Sunday
    ],
)
def test_ttl_follows_market_window(fixed_clock, instant: datetime, expected_ttl: int) -> None:
    policy = MarketHoursTtlPolicy(clock=fixed_clock(instant))
    assert policy.ttl_seconds() == expected_ttl


def test_is_market_open_accepts_naive_as_utc() -> None:
    policy = MarketHoursTtlPolicy()
    assert policy.is_market_open(datetime(2024, 3, 8, 3, 0)) is True
    assert policy.is_market_open(datetime(2024, 3, 8, 9, 0)) is False


def test_custom_window_and_ttls(fixed_clock) -> None:
    policy = MarketHoursTtlPolicy(
        short_ttl_s=2,
        long_ttl_s=60,
        open=time(10, 0),
        close=time(11, 0),
        clock=fixed_clock(_at(2024, 3, 8, 10, 30)),
    )
    assert policy.ttl_seconds() == 2
    assert policy.long_ttl_s == 60


def test_today_is_in_market_time(fixed_clock) -> None:
    # 2024-03-08 20:00 UTC is already Saturday in Ho Chi Minh.
    policy = MarketHoursTtlPolicy(clock=fixed_clock(datetime(2024, 3, 8, 20, 0, tzinfo=UTC)))
    assert policy.today().date().isoformat() == "2024-03-09"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"short_ttl_s": 0},
        {"long_ttl_s": -1},
        {"open": time(15, 0), "close": time(9, 0)},
    ],
)
def test_invalid_configuration_is_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        MarketHoursTtlPolicy(**kwargs)
