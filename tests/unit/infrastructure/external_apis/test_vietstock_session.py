from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from indexes_api.domain.entities.quote_session import QuoteSession
from indexes_api.infrastructure.external_apis.http.fetch_client import (
    FetchClient,
    build_http_client,
)
from indexes_api.infrastructure.external_apis.vietstock.session import (
    SessionBootstrapper,
    extract_antiforgery_token,
)

HOST = "https://finance.vietstock.vn"

LANDING = """
<html><body>
<form id="search"><input type="hidden" name="other" value="x" /></form>
<form id="trading">
  <input name="__RequestVerificationToken" type="hidden" value="tok-123" />
</form>
<input name="__RequestVerificationToken" type="hidden" value="second" />
</body></html>
"""


def test_extract_token_returns_first_match() -> None:
    assert extract_antiforgery_token(LANDING) == "tok-123"


@pytest.mark.parametrize(
    ("markup", "expected"),
    [
        ("<input name='__RequestVerificationToken'>", ""),
        ("<INPUT NAME='__RequestVerificationToken' VALUE='up'>", "up"),
        ("<div>no form here</div>", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_token_edge_cases(markup, expected) -> None:
    assert extract_antiforgery_token(markup) == expected


@pytest.mark.asyncio
async def test_bootstrap_collects_cookies_and_token() -> None:
    async with build_http_client() as http:
        bootstrapper = SessionBootstrapper(FetchClient(http=http))
        with respx.mock:
            respx.get(HOST).mock(
                return_value=httpx.Response(
                    200,
                    text=LANDING,
                    headers=[
                        ("Set-Cookie", "ASP.NET_SessionId=sess-1; Path=/"),
                        ("Set-Cookie", "language=en-US; Path=/"),
                    ],
                )
            )
            session = await bootstrapper.bootstrap(HOST)

    assert session == QuoteSession(
        session_id="sess-1", antiforgery_token="tok-123", locale="en-US"
    )


@pytest.mark.asyncio
async def test_bootstrap_defaults_when_artifacts_missing() -> None:
    async with build_http_client() as http:
        bootstrapper = SessionBootstrapper(FetchClient(http=http))
        with respx.mock:
            respx.get(HOST).mock(return_value=httpx.Response(200, text="<html></html>"))
            session = await bootstrapper.bootstrap(HOST)

    assert session == QuoteSession(session_id="", antiforgery_token="", locale="vi-VN")


@pytest.mark.asyncio
async def test_bootstrap_failure_yields_default_session() -> None:
    async with build_http_client() as http:
        bootstrapper = SessionBootstrapper(FetchClient(http=http))
        with respx.mock:
            respx.get(HOST).mock(side_effect=httpx.ConnectTimeout("slow"))
            session = await bootstrapper.bootstrap(HOST)

    assert session == QuoteSession()


@pytest.mark.asyncio
async def test_bootstrap_cancellation_propagates() -> None:
    started = asyncio.Event()

    async def slow(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200, text=LANDING)

    http = httpx.AsyncClient(transport=httpx.MockTransport(slow))
    bootstrapper = SessionBootstrapper(FetchClient(http=http))
    task = asyncio.create_task(bootstrapper.bootstrap(HOST))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    await http.aclose()
