from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest
import respx

from indexes_api.domain.entities.quote_session import QuoteSession
from indexes_api.domain.exceptions.indexes import StockQuoteNotFound
from indexes_api.infrastructure.external_apis.http.fetch_client import (
    FetchClient,
    build_http_client,
)
from indexes_api.infrastructure.external_apis.vietstock.client import (
    VietstockClient,
    build_cookie_header,
)
from indexes_api.infrastructure.external_apis.vietstock.settings import VietstockSettings

SETTINGS = VietstockSettings()
SESSION = QuoteSession(session_id="sess-1", antiforgery_token="tok-123", locale="vi-VN")
PAYLOAD = {"PriorClosePrice": 25000, "LastPrice": 25500}


def test_cookie_header_skips_empty_values() -> None:
    header = build_cookie_header("VNM", QuoteSession())
    assert header == "finance_viewedstock=VNM,; language=vi-VN"


def test_cookie_header_full_session() -> None:
    assert build_cookie_header("VNM", SESSION) == (
        "finance_viewedstock=VNM,; language=vi-VN; "
        "ASP.NET_SessionId=sess-1; __RequestVerificationToken=tok-123"
    )


@pytest.mark.asyncio
async def test_acquire_posts_form_with_session_artifacts() -> None:
    async with build_http_client() as http:
        client = VietstockClient(FetchClient(http=http), SETTINGS)
        with respx.mock:
            route = respx.post(SETTINGS.trading_info_url).mock(
                return_value=httpx.Response(200, json=PAYLOAD)
            )
            payload = await client.acquire("vnm", SESSION)

    assert payload == PAYLOAD
    request = route.calls.last.request
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.headers["X-Requested-With"] == "XMLHttpRequest"
    assert "ASP.NET_SessionId=sess-1" in request.headers["Cookie"]
    assert request.headers["Referer"] == "https://finance.vietstock.vn/VNM/profile.htm"
    form = parse_qs(request.content.decode(), keep_blank_values=True)
    assert form == {
        "code": ["VNM"],
        "s": ["0"],
        "t": [""],
        "__RequestVerificationToken": ["tok-123"],
    }


@pytest.mark.asyncio
async def test_acquire_unwraps_single_element_array() -> None:
    async with build_http_client() as http:
        client = VietstockClient(FetchClient(http=http), SETTINGS)
        with respx.mock:
            respx.post(SETTINGS.trading_info_url).mock(
                return_value=httpx.Response(200, json=[PAYLOAD])
            )
            assert await client.acquire("VNM", SESSION) == PAYLOAD


@pytest.mark.parametrize(
    ("response", "reason"),
    [
        (httpx.Response(200, json={"LastPrice": 1}), "missing_reference_price"),
        (httpx.Response(200, json={"PriorClosePrice": None}), "missing_reference_price"),
        (httpx.Response(200, text="<html>login</html>"), "non_json_body"),
        (httpx.Response(200, json=[PAYLOAD, PAYLOAD]), "unexpected_shape"),
        (httpx.Response(500), "request_failed"),
    ],
)
@pytest.mark.asyncio
async def test_acquire_failures_fold_into_not_found(response, reason) -> None:
    async with build_http_client() as http:
        client = VietstockClient(FetchClient(http=http), SETTINGS)
        with respx.mock:
            respx.post(SETTINGS.trading_info_url).mock(return_value=response)
            with pytest.raises(StockQuoteNotFound) as ei:
                await client.acquire("VNM", SESSION)

    assert ei.value.details["reason"] == reason
    assert ei.value.details["code"] == "VNM"


@pytest.mark.asyncio
async def test_acquire_network_error_is_not_found() -> None:
    async with build_http_client() as http:
        client = VietstockClient(FetchClient(http=http), SETTINGS)
        with respx.mock:
            respx.post(SETTINGS.trading_info_url).mock(side_effect=httpx.ConnectError("down"))
            with pytest.raises(StockQuoteNotFound):
                await client.acquire("VNM", SESSION)


def _search_url(code: str) -> str:
    return SETTINGS.company_search_url.replace("{code}", code)


@pytest.mark.asyncio
async def test_lookup_company_matches_code() -> None:
    body = {
        "data": [
            {"Code": "VNMX", "Name": "Other"},
            {"Code": "VNM", "Name": "Vinamilk", "Url": "https://finance.vietstock.vn/VNM/x.htm"},
        ]
    }
    async with build_http_client() as http:
        client = VietstockClient(FetchClient(http=http), SETTINGS)
        with respx.mock:
            respx.get(_search_url("VNM")).mock(return_value=httpx.Response(200, json=body))
            lookup = await client.lookup_company("vnm")

    assert lookup.found
    assert lookup.profile.name == "Vinamilk"
    assert lookup.profile.url == "https://finance.vietstock.vn/VNM/x.htm"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"data": "nope"}),
        httpx.Response(200, json=[{"Code": "FPT", "Name": "FPT Corp"}]),
        httpx.Response(200, content=json.dumps([{"StockCode": "VNM"}]).encode()),
    ],
)
@pytest.mark.asyncio
async def test_lookup_company_degrades_to_missing(response) -> None:
    async with build_http_client() as http:
        client = VietstockClient(FetchClient(http=http), SETTINGS)
        with respx.mock:
            respx.get(_search_url("VNM")).mock(return_value=response)
            lookup = await client.lookup_company("VNM")

    assert not lookup.found
    assert lookup.diagnostic


@pytest.mark.asyncio
async def test_acquire_cancellation_propagates() -> None:
    started = asyncio.Event()

    async def slow(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200, json=PAYLOAD)

    http = httpx.AsyncClient(transport=httpx.MockTransport(slow))
    client = VietstockClient(FetchClient(http=http), SETTINGS)
    task = asyncio.create_task(client.acquire("VNM", SESSION))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    await http.aclose()
