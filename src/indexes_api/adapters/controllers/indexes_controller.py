# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Indexes Controller.

Summary:
    Dispatches a (verb, object name, identity) request to the matching use
    case. Only reads are supported.

Routing table:
    * ``rates`` / ``exchangerates`` / ``exchange-rates`` → exchange rates.
    * ``stock`` / ``stockquote`` / ``stockquotes`` / ``stock-quote`` /
      ``stock-quotes`` → stock indexes when no identity is given, else the
      quote of that identity.

Layer:
    adapters/controllers
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from indexes_api.application.services.read_through import CachedBody
from indexes_api.application.services.ttl_policy import TtlPolicy
from indexes_api.application.use_cases.indexes.get_exchange_rates import GetExchangeRates
from indexes_api.application.use_cases.indexes.get_stock_indexes import GetStockIndexes
from indexes_api.application.use_cases.indexes.get_stock_quote import GetStockQuote
from indexes_api.domain.exceptions.indexes import InvalidRequest, MethodNotAllowed

from .base import BaseController

EXCHANGE_RATE_OBJECTS: Final[frozenset[str]] = frozenset(
    {"rates", "exchangerates", "exchange-rates"}
)
STOCK_OBJECTS: Final[frozenset[str]] = frozenset(
    {"stock", "stockquote", "stockquotes", "stock-quote", "stock-quotes"}
)


@dataclass(frozen=True, slots=True)
class IndexesResult:
    """Controller output.

    Attributes:
        body: Serialized JSON, served verbatim.
        cache_hit: Whether the body came from the cache.
        max_age: Seconds clients may reuse the body.
    """

    body: str
    cache_hit: bool
    max_age: int


class IndexesController(BaseController):
    """Controller orchestrating exchange rates, indexes and stock quotes."""

    __slots__ = ("_exchange_rates", "_stock_indexes", "_stock_quote", "_ttl_policy")

    def __init__(
        self,
        *,
        exchange_rates: GetExchangeRates,
        stock_indexes: GetStockIndexes,
        stock_quote: GetStockQuote,
        ttl_policy: TtlPolicy,
    ) -> None:
        self._exchange_rates = exchange_rates
        self._stock_indexes = stock_indexes
        self._stock_quote = stock_quote
        self._ttl_policy = ttl_policy

    async def process(
        self,
        verb: str,
        object_name: str,
        identity: str | None = None,
    ) -> IndexesResult:
        """Dispatch one request.

        Args:
            verb: HTTP method.
            object_name: Requested object (case-insensitive).
            identity: Optional object identity (stock code).

        Returns:
            The body to serve and its caching metadata.

        Raises:
            MethodNotAllowed: If ``verb`` is not GET.
            InvalidRequest: If ``object_name`` is unknown.
        """
        if verb.upper() != "GET":
            raise MethodNotAllowed(
                f"method '{verb.upper()}' is not allowed", details={"allowed": ["GET"]}
            )

        name = (object_name or "").strip().lower()
        code = (identity or "").strip()

        if name in EXCHANGE_RATE_OBJECTS:
            result = await self._exchange_rates.execute()
        elif name in STOCK_OBJECTS:
            if code:
                result = await self._stock_quote.execute(code)
            else:
                result = await self._stock_indexes.execute()
        else:
            raise InvalidRequest(
                f"unknown object '{object_name}'", details={"object": object_name}
            )
        return self._to_result(result)

    def _to_result(self, cached: CachedBody) -> IndexesResult:
        max_age = cached.ttl if cached.ttl is not None else self._ttl_policy.ttl_seconds()
        return IndexesResult(body=cached.body, cache_hit=cached.hit, max_age=max_age)
