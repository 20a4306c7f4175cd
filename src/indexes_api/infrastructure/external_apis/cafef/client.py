# Copyright (c)
# SPDX-License-Identifier: MIT
"""CafeF market index client."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from indexes_api.domain.entities.stock_index import StockIndex
from indexes_api.domain.exceptions.indexes import UpstreamUnavailable
from indexes_api.infrastructure.external_apis.cafef.settings import CafefSettings
from indexes_api.infrastructure.external_apis.http.fetch_client import FetchClient
from indexes_api.infrastructure.observability.metrics_indexes import (
    observe_upstream_request,
)


def capitalize_first(key: str) -> str:
    """Upper-case only the first character (``"index"`` → ``"Index"``)."""
    return key[:1].upper() + key[1:]


def to_stock_index(item: Mapping[str, Any]) -> StockIndex | None:
    """Map one feed object to a :class:`StockIndex`; objects without a name are skipped."""
    name = item.get("name")
    if not isinstance(name, str) or not name:
        return None
    fields = {capitalize_first(k): v for k, v in item.items() if k.lower() != "name"}
    return StockIndex(name=name, fields=fields)


class CafefClient:
    """Index feed transport."""

    def __init__(self, fetch: FetchClient, settings: CafefSettings | None = None) -> None:
        self._fetch = fetch
        self._settings = settings or CafefSettings()

    async def fetch_indexes(self) -> list[StockIndex]:
        """Fetch the index feed.

        Raises:
            UpstreamUnavailable: On fetch failure or a non-array / non-JSON body.
        """
        with observe_upstream_request(provider="cafef", endpoint="indexes") as obs:
            text = await self._fetch.get_text(
                self._settings.index_url,
                referer=self._settings.referer,
                timeout_s=self._settings.timeout_s,
            )
            try:
                body = json.loads(text)
            except ValueError as exc:
                obs.mark_error("non_json")
                raise UpstreamUnavailable(
                    "index feed is not JSON", details={"url": self._settings.index_url}
                ) from exc
            if not isinstance(body, list):
                obs.mark_error("bad_shape")
                raise UpstreamUnavailable(
                    "index feed is not an array",
                    details={"url": self._settings.index_url, "expected": "array"},
                )

        indexes = [to_stock_index(item) for item in body if isinstance(item, Mapping)]
        return [index for index in indexes if index is not None]
