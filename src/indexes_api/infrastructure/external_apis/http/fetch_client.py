# Copyright (c)
# SPDX-License-Identifier: MIT
"""Shared HTTP fetch client for the scraped upstreams.

This transport is framework-agnostic and provides:

* Async HTTP (httpx) with an explicit per-request timeout.
* A fixed desktop User-Agent and an optional Referer.
* Per-response cookie capture (redirect hops included) with no cookie
  persistence across requests on the shared client.
* Deterministic mapping of transport failures and HTTP status >= 400 to
  :class:`UpstreamUnavailable`.

No retries are performed. ``asyncio.CancelledError`` is never caught.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Final

import httpx

from indexes_api.domain.exceptions.indexes import UpstreamUnavailable
from indexes_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DEFAULT_TIMEOUT_S: Final[float] = 90.0
DESKTOP_USER_AGENT: Final[str] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def build_http_client(
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    user_agent: str = DESKTOP_USER_AGENT,
) -> httpx.AsyncClient:
    """Build the shared ``httpx.AsyncClient``.

    The cookie jar rejects every cookie so that one request's session never
    leaks into the next; callers read cookies from :class:`FetchResponse`.
    """
    jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
    return httpx.AsyncClient(
        timeout=timeout_s,
        follow_redirects=True,
        cookies=jar,
        headers={"User-Agent": user_agent},
    )


@dataclass(frozen=True)
class FetchResponse:
    """Decoded upstream response.

    Attributes:
        status_code: Final HTTP status.
        url: Final URL after redirects.
        text: Decoded body.
        headers: Final response headers (lower-cased names).
        cookies: ``Set-Cookie`` values seen on every hop; later hops win.
    """

    status_code: int
    url: str
    text: str
    headers: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)


def _collect_cookies(response: httpx.Response) -> dict[str, str]:
    cookies: dict[str, str] = {}
    for hop in (*response.history, response):
        for name, value in hop.cookies.items():
            cookies[name] = value
    return cookies


class FetchClient:
    """Thin GET/POST helper over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        *,
        http: httpx.AsyncClient | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DESKTOP_USER_AGENT,
    ) -> None:
        """Initialize the client.

        Args:
            http: Optional shared client. If omitted, one is created and owned
                by this instance.
            timeout_s: Default per-request timeout in seconds.
            user_agent: User-Agent sent with every request.
        """
        self._owns_client = http is None
        self._client = http or build_http_client(timeout_s=timeout_s, user_agent=user_agent)
        self._timeout = float(timeout_s)
        self._user_agent = user_agent

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def fetch(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: str | bytes | None = None,
        referer: str | None = None,
        timeout_s: float | None = None,
    ) -> FetchResponse:
        """Perform one request.

        Args:
            method: HTTP verb.
            url: Absolute URL.
            headers: Extra request headers (e.g. ``Cookie``, ``Content-Type``).
            content: Raw request body.
            referer: Optional ``Referer`` header.
            timeout_s: Per-request timeout override.

        Returns:
            The decoded response.

        Raises:
            UpstreamUnavailable: On transport errors or HTTP status >= 400.
        """
        request_headers = {"User-Agent": self._user_agent}
        if referer:
            request_headers["Referer"] = referer
        if headers:
            request_headers.update(headers)

        timeout = self._timeout if timeout_s is None else float(timeout_s)
        try:
            response = await self._client.request(
                method.upper(),
                url,
                headers=request_headers,
                content=content,
                timeout=timeout,
            )
        except httpx.RequestError as exc:
            logger.warning(
                "upstream.request_failed",
                extra={"extra": {"url": url, "method": method, "error": type(exc).__name__}},
            )
            raise UpstreamUnavailable(
                "upstream request failed",
                details={"url": url, "error": f"{type(exc).__name__}: {exc}"},
            ) from exc

        if response.status_code >= 400:
            logger.warning(
                "upstream.bad_status",
                extra={"extra": {"url": url, "status": response.status_code}},
            )
            raise UpstreamUnavailable(
                "upstream returned an error status",
                details={"url": url, "status": response.status_code},
            )

        return FetchResponse(
            status_code=response.status_code,
            url=str(response.url),
            text=response.text,
            headers={k.lower(): v for k, v in response.headers.items()},
            cookies=_collect_cookies(response),
        )

    async def get_text(
        self,
        url: str,
        *,
        referer: str | None = None,
        timeout_s: float | None = None,
    ) -> str:
        """GET ``url`` and return the decoded body."""
        response = await self.fetch("GET", url, referer=referer, timeout_s=timeout_s)
        return response.text
