# Copyright (c)
# SPDX-License-Identifier: MIT
"""Vietstock session bootstrapper.

Synopsis:
    Performs the unauthenticated GET of the landing page and scrapes the
    artifacts the trading-data POST needs: the locale and session cookies and
    the anti-forgery token embedded in the page markup.

Design:
    * Each artifact is extracted independently; a missing one degrades to its
      default instead of failing the bootstrap.
    * A failed landing GET is logged and yields a default session; the
      dependent POST then surfaces the real failure.
"""

from __future__ import annotations

from html.parser import HTMLParser
from typing import Final

from indexes_api.domain.entities.quote_session import DEFAULT_LOCALE, QuoteSession
from indexes_api.domain.exceptions.indexes import UpstreamUnavailable
from indexes_api.infrastructure.external_apis.http.fetch_client import FetchClient
from indexes_api.infrastructure.logging.logger import get_json_logger
from indexes_api.infrastructure.observability.metrics_indexes import (
    observe_upstream_request,
)

logger = get_json_logger(__name__)

ANTIFORGERY_FIELD: Final[str] = "__RequestVerificationToken"
LOCALE_COOKIE: Final[str] = "language"
SESSION_COOKIE: Final[str] = "ASP.NET_SessionId"


class _TokenInputParser(HTMLParser):
    """Finds the first ``<input name="__RequestVerificationToken">`` value."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.token: str | None = None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self.token is not None or tag.lower() != "input":
            return
        values = {name.lower(): value for name, value in attrs}
        if values.get("name") == ANTIFORGERY_FIELD:
            self.token = values.get("value") or ""


def extract_antiforgery_token(markup: str | None) -> str | None:
    """Return the anti-forgery token embedded in ``markup``.

    Args:
        markup: Landing page HTML.

    Returns:
        The token (possibly empty when the input has no value), or ``None``
        when no such input exists.
    """
    if not markup:
        return None
    parser = _TokenInputParser()
    parser.feed(markup)
    parser.close()
    return parser.token


class SessionBootstrapper:
    """Builds a :class:`QuoteSession` from the upstream landing page."""

    def __init__(self, fetch: FetchClient, *, timeout_s: float | None = None) -> None:
        self._fetch = fetch
        self._timeout = timeout_s

    async def bootstrap(self, target_host: str) -> QuoteSession:
        """GET ``target_host`` and scrape the session artifacts.

        Args:
            target_host: Landing page URL (e.g. ``https://finance.vietstock.vn``).

        Returns:
            A session; missing artifacts fall back to defaults.
        """
        try:
            with observe_upstream_request(provider="vietstock", endpoint="landing"):
                response = await self._fetch.fetch("GET", target_host, timeout_s=self._timeout)
        except UpstreamUnavailable as exc:
            logger.warning(
                "vietstock.bootstrap_failed",
                extra={"extra": {"host": target_host, **exc.details}},
            )
            return QuoteSession()

        token = extract_antiforgery_token(response.text)
        if token is None:
            logger.info("vietstock.token_missing", extra={"extra": {"host": target_host}})

        return QuoteSession(
            session_id=response.cookies.get(SESSION_COOKIE, ""),
            antiforgery_token=token or "",
            locale=response.cookies.get(LOCALE_COOKIE) or DEFAULT_LOCALE,
        )
