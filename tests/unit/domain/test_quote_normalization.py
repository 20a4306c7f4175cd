from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from indexes_api.domain.entities.quote_session import CompanyLookup, CompanyProfile
from indexes_api.domain.entities.stock_quote import ChangeColor, ChangeDirection, ChartPeriod
from indexes_api.domain.exceptions.indexes import SchemaMismatch, StockQuoteNotFound
from indexes_api.domain.services.quote_normalization import (
    TRADING_INFO_V2,
    TRADING_RESULT_V1,
    as_of_date,
    build_chart_urls,
    change_direction,
    normalize,
    select_contract,
)

FRIDAY = date(2024, 3, 8)


def _v2_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "PriorClosePrice": 25000,
        "LastPrice": 25500,
        "OpenPrice": 25100,
        "CeilingPrice": 26750,
        "FloorPrice": 23250,
        "HighestPrice": 25600,
        "LowestPrice": 25000,
        "AvrPrice": 25350,
        "Max52W": 30000,
        "Min52W": 20000,
        "Change": 500,
        "PerChange": 2,
        "TotalVol": 1234567.4,
        "MarketCapital": 98765,
        "KLCPNY": 1000000,
        "ColorId": 1,
    }
    payload.update(overrides)
    return payload


def _v1_payload() -> dict[str, Any]:
    return {
        "PriorClosePrice": 25000,
        "ClosePrice": 24000,
        "OpenPrice": 25000,
        "CeilingPrice": 26750,
        "FloorPrice": 23250,
        "Highest": 25000,
        "Lowest": 23900,
        "AvrPrice": 24200,
        "YearHigh": 31000,
        "YearLow": 19000,
        "Oscillate": -1000,
        "PercentOscillate": "-4%",
        "TradingVolume": 500,
        "CapitalLevel": 12000,
        "KLCPNY": 250000,
        "ColorId": -1,
    }


def test_normalize_v2_scales_and_formats_prices(sequential_buster) -> None:
    quote = normalize(_v2_payload(), "vnm", today=FRIDAY, cache_buster=sequential_buster)

    assert quote.code == "VNM"
    assert quote.name == "VNM"
    assert quote.prices.reference == "25.00"
    assert quote.prices.current == "25.50"
    assert quote.prices.close == "25.50"
    assert quote.prices.ceiling == "26.75"
    assert quote.prices.high_52w == "30.00"
    assert quote.prices.unit == "1.000 đ"
    assert quote.change.volume == "0.50"
    assert quote.change.percent == "2%"
    assert quote.change.direction is ChangeDirection.UP
    assert quote.change.color is ChangeColor.GREEN
    assert quote.volume == "1.234.567 tỷ đ"
    assert quote.capital == "98.765 tỷ đ"
    assert quote.shares == "1.000.000"
    assert quote.as_of_date == FRIDAY
    assert quote.source_url == "https://finance.vietstock.vn/VNM/profile.htm"


def test_normalize_v1_contract_is_still_understood() -> None:
    quote = normalize(_v1_payload(), "FPT", today=FRIDAY)

    assert quote.prices.current == "24.00"
    assert quote.prices.highest == "25.00"
    assert quote.prices.low_52w == "19.00"
    assert quote.change.volume == "-1.00"
    assert quote.change.percent == "-4%"
    assert quote.change.direction is ChangeDirection.DOWN
    assert quote.change.color is ChangeColor.RED
    assert quote.volume == "500 tỷ đ"


def test_select_contract_prefers_newest() -> None:
    assert select_contract({"LastPrice": 1, "ClosePrice": 1}) is TRADING_INFO_V2
    assert select_contract({"ClosePrice": 1}) is TRADING_RESULT_V1
    assert select_contract({"PriorClosePrice": 1}) is None


def test_unknown_contract_is_not_found() -> None:
    with pytest.raises(StockQuoteNotFound) as ei:
        normalize({"PriorClosePrice": 1000, "Mystery": 1}, "abc", today=FRIDAY)
    assert ei.value.details["reason"] == "unknown_contract"
    assert ei.value.details["code"] == "ABC"


def test_non_numeric_required_field_is_schema_mismatch() -> None:
    with pytest.raises(SchemaMismatch) as ei:
        normalize(_v2_payload(OpenPrice="n/a"), "VNM", today=FRIDAY)
    assert ei.value.details["field"] == "OpenPrice"


def test_missing_required_field_is_schema_mismatch() -> None:
    payload = _v2_payload()
    del payload["MarketCapital"]
    with pytest.raises(SchemaMismatch):
        normalize(payload, "VNM", today=FRIDAY)


def test_optional_change_fields_default_to_zero() -> None:
    payload = _v2_payload(ColorId=0)
    del payload["Change"]
    del payload["PerChange"]
    quote = normalize(payload, "VNM", today=FRIDAY)

    assert quote.change.volume == "0.00"
    assert quote.change.percent == "0%"
    assert quote.change.direction is ChangeDirection.NONE
    assert quote.change.color is ChangeColor.YELLOW


def test_string_numbers_with_grouping_are_coerced() -> None:
    quote = normalize(_v2_payload(LastPrice="25,500"), "VNM", today=FRIDAY)
    assert quote.prices.current == "25.50"


def test_company_profile_supplies_name_and_url() -> None:
    company = CompanyLookup(
        profile=CompanyProfile(
            code="VNM", name="Vinamilk", url="https://finance.vietstock.vn/VNM/vinamilk.htm"
        )
    )
    quote = normalize(_v2_payload(), "VNM", today=FRIDAY, company=company)

    assert quote.name == "Vinamilk"
    assert quote.source_url == "https://finance.vietstock.vn/VNM/vinamilk.htm"


def test_payload_url_used_when_company_missing() -> None:
    quote = normalize(
        _v2_payload(URL="https://example.test/VNM"),
        "VNM",
        today=FRIDAY,
        company=CompanyLookup.missing("no match"),
    )
    assert quote.source_url == "https://example.test/VNM"


@pytest.mark.parametrize(
    ("today", "expected"),
    [
        (date(2024, 3, 8), date(2024, 3, 8)),  # Friday
        (date(2024, 3, 9), date(2024, 3, 8)),  # Saturday
        (date(2024, 3, 10), date(2024, 3, 8)),  # Sunday
        (date(2024, 3, 11), date(2024, 3, 11)),  # Monday
    ],
)
def test_as_of_date_rolls_weekends_back_to_friday(today: date, expected: date) -> None:
    assert as_of_date(today) == expected


@pytest.mark.parametrize(
    ("color_id", "expected"),
    [
        (2, (ChangeDirection.UP, ChangeColor.GREEN)),
        (-3, (ChangeDirection.DOWN, ChangeColor.RED)),
        (0, (ChangeDirection.NONE, ChangeColor.YELLOW)),
    ],
)
def test_change_direction_follows_color_sign(color_id: int, expected) -> None:
    assert change_direction(color_id) == expected


def test_chart_urls_cover_every_period_with_unique_busters(sequential_buster) -> None:
    urls = build_chart_urls("VNM", base_url="https://charts.test/", cache_buster=sequential_buster)

    assert set(urls) == set(ChartPeriod)
    assert urls[ChartPeriod.ONE_DAY] == "https://charts.test/VNM/1day.png?v=b0"
    assert urls[ChartPeriod.ONE_YEAR] == "https://charts.test/VNM/1year.png?v=b5"
    assert len(set(urls.values())) == len(urls)


def test_default_cache_buster_changes_between_calls() -> None:
    first = build_chart_urls("VNM")
    second = build_chart_urls("VNM")
    assert first[ChartPeriod.ONE_DAY] != second[ChartPeriod.ONE_DAY]


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"OpenPrice": float("nan")}, "OpenPrice"),
        ({"LastPrice": "Infinity"}, "LastPrice"),
        ({"TotalVol": float("inf")}, "TotalVol"),
        ({"Change": float("-inf")}, "Change"),
        ({"ColorId": float("inf")}, "ColorId"),
        ({"ColorId": "NaN"}, "ColorId"),
        ({"PerChange": float("nan")}, "PerChange"),
    ],
)
def test_non_finite_numbers_are_schema_mismatch(overrides: dict[str, Any], field: str) -> None:
    with pytest.raises(SchemaMismatch) as ei:
        normalize(_v2_payload(**overrides), "VNM", today=FRIDAY)
    assert ei.value.details["field"] == field


@pytest.mark.parametrize(
    ("per_change", "expected"),
    [
        (2, "2%"),
        (2.0, "2%"),
        (-1.5, "-1.5%"),
        (0.123456789, "0.123456789%"),
        (1234567.5, "1234567.5%"),
        (100.0, "100%"),
        ("-4%", "-4%"),
    ],
)
def test_change_percent_renders_every_digit(per_change: Any, expected: str) -> None:
    quote = normalize(_v2_payload(PerChange=per_change), "VNM", today=FRIDAY)
    assert quote.change.percent == expected


def test_tiny_negative_change_has_no_signed_zero() -> None:
    quote = normalize(_v2_payload(Change=-1, ColorId=-1), "VNM", today=FRIDAY)
    assert quote.change.volume == "0.00"
