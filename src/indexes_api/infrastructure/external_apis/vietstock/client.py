# Copyright (c)
# SPDX-License-Identifier: MIT
"""Vietstock trading-data client.

Synopsis:
    Issues the trading-data POST that depends on a bootstrapped
    :class:`QuoteSession`, and the best-effort company search.

Failure policy:
    * ``acquire``: every failure (transport, status, non-JSON body, missing
      reference price) is reported as :class:`StockQuoteNotFound`, with the
      underlying cause kept in ``details`` and in the logs.
    * ``lookup_company``: never raises; failures become a diagnostic on an
      empty :class:`CompanyLookup`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Final
from urllib.parse import quote, urlencode

from indexes_api.domain.entities.quote_session import (
    CompanyLookup,
    CompanyProfile,
    QuoteSession,
)
from indexes_api.domain.exceptions.indexes import StockQuoteNotFound
from indexes_api.domain.services.quote_normalization import MANDATORY_FIELD
from indexes_api.infrastructure.external_apis.http.fetch_client import FetchClient
from indexes_api.infrastructure.external_apis.vietstock.session import (
    ANTIFORGERY_FIELD,
    LOCALE_COOKIE,
    SESSION_COOKIE,
)
from indexes_api.infrastructure.external_apis.vietstock.settings import VietstockSettings
from indexes_api.infrastructure.logging.logger import get_json_logger
from indexes_api.infrastructure.observability.metrics_indexes import (
    observe_upstream_request,
)

logger = get_json_logger(__name__)

VIEWED_STOCK_COOKIE: Final[str] = "finance_viewedstock"
FORM_CONTENT_TYPE: Final[str] = "application/x-www-form-urlencoded"


def build_cookie_header(code: str, session: QuoteSession) -> str:
    """Return the ``Cookie`` header for the trading-data POST.

    Only non-empty values are sent, joined by ``"; "``.
    """
    pairs = [
        (VIEWED_STOCK_COOKIE, f"{code},"),
        (LOCALE_COOKIE, session.locale),
        (SESSION_COOKIE, session.session_id),
        (ANTIFORGERY_FIELD, session.antiforgery_token),
    ]
    return "; ".join(f"{name}={value}" for name, value in pairs if value)


def build_form_body(code: str, session: QuoteSession) -> str:
    """Return the url-encoded form body for the trading-data POST."""
    return urlencode(
        [("code", code), ("s", "0"), ("t", ""), (ANTIFORGERY_FIELD, session.antiforgery_token)]
    )


def _unwrap_payload(body: Any) -> Mapping[str, Any] | None:
    """Return the quote object, unwrapping a one-element array (older contract)."""
    if isinstance(body, list) and len(body) == 1:
        body = body[0]
    if isinstance(body, Mapping):
        return body
    return None


def _first_text(entry: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class VietstockClient:
    """Trading-data and company-search transport for Vietstock."""

    def __init__(self, fetch: FetchClient, settings: VietstockSettings | None = None) -> None:
        self._fetch = fetch
        self._settings = settings or VietstockSettings()

    @property
    def settings(self) -> VietstockSettings:
        return self._settings

    async def acquire(self, code: str, session: QuoteSession) -> Mapping[str, Any]:
        """POST the trading-data request for ``code``.

        Args:
            code: Stock code (upper-cased here).
            session: Bootstrapped session artifacts.

        Returns:
            The raw payload, guaranteed to carry a non-null ``PriorClosePrice``.

        Raises:
            StockQuoteNotFound: On any acquisition failure.
        """
        code = code.strip().upper()
        url = self._settings.trading_info_url
        headers = {
            "Cookie": build_cookie_header(code, session),
            "Content-Type": FORM_CONTENT_TYPE,
            "X-Requested-With": "XMLHttpRequest",
        }
        body = build_form_body(code, session)

        try:
            with observe_upstream_request(provider="vietstock", endpoint="tradinginfo"):
                response = await self._fetch.fetch(
                    "POST",
                    url,
                    headers=headers,
                    content=body,
                    referer=f"{self._settings.base_url.rstrip('/')}/{quote(code, safe='')}/profile.htm",
                    timeout_s=self._settings.timeout_s,
                )
        except Exception as exc:
            logger.warning(
                "vietstock.acquire_failed",
                extra={"extra": {"code": code, "error": f"{type(exc).__name__}: {exc}"}},
            )
            raise StockQuoteNotFound(
                f"stock quote '{code}' could not be acquired",
                details={"code": code, "reason": "request_failed", "error": type(exc).__name__},
            ) from exc

        trace_level = logging.INFO if self._settings.log_payloads else logging.DEBUG
        if logger.isEnabledFor(trace_level):
            logger.log(
                trace_level,
                "vietstock.exchange",
                extra={
                    "extra": {
                        "url": url,
                        "request_headers": headers,
                        "request_body": body,
                        "status": response.status_code,
                        "response_body": response.text[:4000],
                    }
                },
            )

        try:
            parsed = json.loads(response.text)
        except ValueError as exc:
            raise StockQuoteNotFound(
                f"stock quote '{code}' is not available",
                details={"code": code, "reason": "non_json_body"},
            ) from exc

        payload = _unwrap_payload(parsed)
        if payload is None:
            raise StockQuoteNotFound(
                f"stock quote '{code}' is not available",
                details={"code": code, "reason": "unexpected_shape"},
            )
        if payload.get(MANDATORY_FIELD) is None:
            raise StockQuoteNotFound(
                f"stock quote '{code}' is not available",
                details={"code": code, "reason": "missing_reference_price"},
            )
        return payload

    async def lookup_company(self, code: str) -> CompanyLookup:
        """Search the company matching ``code``; never raises."""
        code = code.strip().upper()
        url = self._settings.company_search_url.replace("{code}", quote(code, safe=""))
        try:
            with observe_upstream_request(provider="vietstock", endpoint="company_search"):
                text = await self._fetch.get_text(
                    url, referer=self._settings.base_url, timeout_s=self._settings.timeout_s
                )
            body = json.loads(text)
        except Exception as exc:
            return CompanyLookup.missing(f"search failed: {type(exc).__name__}")

        entries = body.get("data") if isinstance(body, Mapping) else body
        if not isinstance(entries, list):
            return CompanyLookup.missing("search returned an unexpected shape")

        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            entry_code = _first_text(entry, "Code", "StockCode", "code")
            if entry_code is None or entry_code.upper() != code:
                continue
            name = _first_text(entry, "Name", "CompanyName", "name")
            if name is None:
                return CompanyLookup.missing("matching entry has no name")
            return CompanyLookup(
                profile=CompanyProfile(
                    code=code, name=name, url=_first_text(entry, "Url", "URL", "url")
                )
            )
        return CompanyLookup.missing(f"no company matches '{code}'")
