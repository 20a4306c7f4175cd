from __future__ import annotations

import httpx
import pytest
import respx

from indexes_api.domain.exceptions.indexes import UpstreamUnavailable
from indexes_api.infrastructure.external_apis.http.fetch_client import (
    FetchClient,
    build_http_client,
)
from indexes_api.infrastructure.external_apis.vietcombank.client import (
    VietcombankClient,
    clean_currency_name,
    parse_exchange_rates,
    parse_rate,
)
from indexes_api.infrastructure.external_apis.vietcombank.settings import (
    VietcombankSettings,
)

XML = """<?xml version="1.0" encoding="utf-8"?>
<ExrateList>
  <DateTime>3/8/2024 10:00:00 AM</DateTime>
  <Exrate CurrencyCode="USD" CurrencyName="US DOLLAR" Buy="24,430.00" Transfer="24,460.00" Sell="24,800.00" />
  <Exrate CurrencyCode="KWD" CurrencyName="KUWAITI DINAR " Buy="-" Transfer="80,111.50" Sell="83,300.00" />
  <Exrate CurrencyCode="EUR" CurrencyName="EURO.DOLLAR" Buy="26,000" Transfer="26,100" Sell="27,000" />
  <Source>Joint Stock Commercial Bank for Foreign Trade of Vietnam - Vietcombank</Source>
</ExrateList>
"""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("24,430.00", 24430.0), ("-", 0.0), ("", 0.0), (None, 0.0), (" 1.5 ", 1.5)],
)
def test_parse_rate(raw, expected) -> None:
    assert parse_rate(raw) == expected


@pytest.mark.parametrize("raw", ["NaN", "nan", "Infinity", "-inf", "1e999"])
def test_parse_rate_rejects_non_finite(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_rate(raw)


def test_clean_currency_name() -> None:
    assert clean_currency_name("AUSTRALIAN DOLLAR") == "Australian Dollar"
    assert clean_currency_name("EURO.DOLLAR") == "Euro Dollar"
    assert clean_currency_name(None) == ""


def test_parse_exchange_rates_keys_by_code() -> None:
    rates = parse_exchange_rates(XML)

    assert list(rates) == ["USD", "KWD", "EUR"]
    assert rates["USD"].buy == 24430.0
    assert rates["USD"].transfer == 24460.0
    assert rates["USD"].sell == 24800.0
    assert rates["KWD"].buy == 0.0
    assert rates["KWD"].name == "Kuwaiti Dinar"


@pytest.mark.parametrize(
    "xml",
    [
        "<ExrateList><Exrate",
        '<r><Exrate CurrencyCode="X" Buy="abc"/></r>',
        '<r><Exrate CurrencyCode="X" Buy="NaN"/></r>',
        '<r><Exrate CurrencyCode="X" Sell="Infinity"/></r>',
    ],
)
def test_malformed_feed_is_unavailable(xml: str) -> None:
    with pytest.raises(UpstreamUnavailable):
        parse_exchange_rates(xml)


@pytest.mark.asyncio
async def test_fetch_rates_over_http() -> None:
    settings = VietcombankSettings()
    async with build_http_client() as http:
        client = VietcombankClient(FetchClient(http=http), settings)
        with respx.mock:
            respx.get(settings.rates_url).mock(return_value=httpx.Response(200, text=XML))
            rates = await client.fetch_rates()

    assert set(rates) == {"USD", "KWD", "EUR"}


@pytest.mark.asyncio
async def test_fetch_rates_http_error_propagates() -> None:
    settings = VietcombankSettings()
    async with build_http_client() as http:
        client = VietcombankClient(FetchClient(http=http), settings)
        with respx.mock:
            respx.get(settings.rates_url).mock(return_value=httpx.Response(503))
            with pytest.raises(UpstreamUnavailable):
                await client.fetch_rates()
