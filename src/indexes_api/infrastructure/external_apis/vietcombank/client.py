# Copyright (c)
# SPDX-License-Identifier: MIT
"""Vietcombank exchange-rate client.

Fetches the bank's XML rate sheet and maps every ``Exrate`` element to an
:class:`ExchangeRateEntry`. XML is parsed with ``defusedxml``.
"""

from __future__ import annotations

import math
from xml.etree.ElementTree import Element  # nosec B405 - typing only

from defusedxml import ElementTree as ET  # noqa: N817

from indexes_api.domain.entities.exchange_rate import ExchangeRateEntry
from indexes_api.domain.exceptions.indexes import UpstreamUnavailable
from indexes_api.infrastructure.external_apis.http.fetch_client import FetchClient
from indexes_api.infrastructure.external_apis.vietcombank.settings import (
    VietcombankSettings,
)
from indexes_api.infrastructure.logging.logger import get_json_logger
from indexes_api.infrastructure.observability.metrics_indexes import (
    observe_upstream_request,
)

logger = get_json_logger(__name__)

_NOT_QUOTED = "-"


def parse_rate(raw: str | None) -> float:
    """Parse one rate attribute; ``"-"`` (not quoted) and blanks map to ``0.0``.

    Raises:
        ValueError: If the value is neither a dash nor a number
            or is not finite.
    """
    text = (raw or "").strip()
    if not text or text == _NOT_QUOTED:
        return 0.0
    rate = float(text.replace(",", ""))
    if not math.isfinite(rate):
        raise ValueError(f"rate is not finite: {text!r}")
    return rate


def clean_currency_name(raw: str | None) -> str:
    """Turn ``"AUSTRALIAN DOLLAR"`` / ``"EURO.DOLLAR"`` into title-cased words."""
    words = (raw or "").replace(".", " ").lower().split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def _to_entry(element: Element) -> ExchangeRateEntry | None:
    code = (element.get("CurrencyCode") or "").strip().upper()
    if not code:
        return None
    return ExchangeRateEntry(
        code=code,
        name=clean_currency_name(element.get("CurrencyName")),
        buy=parse_rate(element.get("Buy")),
        sell=parse_rate(element.get("Sell")),
        transfer=parse_rate(element.get("Transfer")),
    )


def parse_exchange_rates(xml_text: str) -> dict[str, ExchangeRateEntry]:
    """Parse the rate sheet into entries keyed by currency code.

    Raises:
        UpstreamUnavailable: If the document is not well-formed or a rate is
            not numeric.
    """
    try:
        root = ET.fromstring(xml_text)
        entries = [_to_entry(el) for el in root.iter("Exrate")]
    except (ET.ParseError, ValueError) as exc:
        raise UpstreamUnavailable(
            "exchange-rate feed is malformed",
            details={"error": f"{type(exc).__name__}: {exc}"},
        ) from exc
    return {entry.code: entry for entry in entries if entry is not None}


class VietcombankClient:
    """Exchange-rate transport."""

    def __init__(self, fetch: FetchClient, settings: VietcombankSettings | None = None) -> None:
        self._fetch = fetch
        self._settings = settings or VietcombankSettings()

    async def fetch_rates(self) -> dict[str, ExchangeRateEntry]:
        """Fetch and parse the current rate sheet.

        Raises:
            UpstreamUnavailable: On fetch or parse failure.
        """
        with observe_upstream_request(provider="vietcombank", endpoint="exrate") as obs:
            xml_text = await self._fetch.get_text(
                self._settings.rates_url, timeout_s=self._settings.timeout_s
            )
            try:
                rates = parse_exchange_rates(xml_text)
            except UpstreamUnavailable:
                obs.mark_error("malformed")
                raise
        logger.info("vietcombank.rates_fetched", extra={"extra": {"count": len(rates)}})
        return rates
