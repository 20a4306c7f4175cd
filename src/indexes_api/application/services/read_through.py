# Copyright (c)
# SPDX-License-Identifier: MIT
"""Read-through cache wrapper.

Purpose:
    Serve a cached JSON body when present; otherwise run a producer, serialize
    its result compactly, store it under a market-aware TTL and return it.

Layer:
    application/services

Notes:
    - Hits return the stored string untouched (byte-identical responses).
    - No single-flight: concurrent misses may each call the producer and the
      last writer wins.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from indexes_api.application.interfaces.cache_port import CachePort
from indexes_api.application.services.ttl_policy import TtlPolicy
from indexes_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

Producer = Callable[[], Awaitable[Any]]


def serialize_compact(payload: Any) -> str:
    """Serialize ``payload`` as compact UTF-8 JSON (non-ASCII kept as is)."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class CachedBody:
    """Result of :meth:`ReadThroughCache.get_or_fetch`.

    Attributes:
        body: Serialized JSON.
        hit: True when served from the cache.
        ttl: TTL applied on write (``None`` on hits).
    """

    body: str
    hit: bool
    ttl: int | None = None


class ReadThroughCache:
    """Cache-and-respond wrapper over a :class:`CachePort`."""

    def __init__(self, cache: CachePort) -> None:
        self._cache = cache

    async def get_or_fetch(
        self,
        key: str,
        ttl_policy: TtlPolicy,
        producer: Producer,
    ) -> CachedBody:
        """Return the cached body for ``key`` or produce, store and return it.

        Args:
            key: Cache key (e.g. ``StockQuote:VNM``).
            ttl_policy: Decides the TTL at write time.
            producer: Coroutine factory producing a JSON-serializable value.

        Returns:
            The serialized body and whether it was a hit.

        Raises:
            Exception: Whatever ``producer`` raises; nothing is cached then.
        """
        cached = await self._cache.get_raw(key)
        if cached is not None:
            logger.debug("cache.hit", extra={"extra": {"key": key}})
            return CachedBody(body=cached, hit=True)

        value = await producer()
        body = serialize_compact(value)
        ttl = ttl_policy.ttl_seconds()
        await self._cache.set_raw(key, body, ttl=ttl)
        logger.debug("cache.miss", extra={"extra": {"key": key, "ttl": ttl}})
        return CachedBody(body=body, hit=False, ttl=ttl)
