# Copyright (c)
# SPDX-License-Identifier: MIT
"""String caches (Redis-backed and in-memory).

Synopsis:
    Implementations of the application ``CachePort`` that store serialized
    JSON bodies verbatim, so a hit is byte-identical to the response that
    populated it.

Design:
    * ``RedisStringCache`` uses the shared Redis client via
      ``get_redis_client()``; ``SET key value EX ttl`` is atomic per key.
    * ``InMemoryStringCache`` serves test mode and local runs without Redis;
      an ``asyncio.Lock`` guards the dict and expiry uses a monotonic clock.
    * Key policy: ``{namespace}:{key}``, e.g. ``indexes:v1:StockQuote:VNM``.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from indexes_api.application.interfaces.cache_port import CachePort
from indexes_api.infrastructure.caching.redis_client import RedisClient, get_redis_client

__all__ = ["InMemoryStringCache", "RedisStringCache"]

DEFAULT_NAMESPACE = "indexes:v1"


def _namespaced(namespace: str, key: str) -> str:
    return f"{namespace}:{key.lstrip(':')}" if namespace else key


class RedisStringCache(CachePort):
    """Redis-backed implementation of the CachePort Protocol."""

    def __init__(
        self,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        client: RedisClient | None = None,
    ) -> None:
        """Initialize the cache adapter.

        Args:
            namespace: Prefix applied to all keys to avoid collisions.
            client: Optional explicit client; defaults to the shared one.
        """
        self._ns = namespace
        self._client = client

    def _redis(self) -> RedisClient:
        return self._client if self._client is not None else get_redis_client()

    async def get_raw(self, key: str) -> str | None:
        raw = await self._redis().get(_namespaced(self._ns, key))
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)

    async def set_raw(self, key: str, value: str, *, ttl: int) -> None:
        if ttl <= 0:
            return
        await self._redis().set(_namespaced(self._ns, key), value, ex=ttl)


class InMemoryStringCache(CachePort):
    """Process-local cache with per-entry expiry."""

    def __init__(
        self,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ns = namespace
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = asyncio.Lock()

    async def get_raw(self, key: str) -> str | None:
        full_key = _namespaced(self._ns, key)
        async with self._lock:
            entry = self._entries.get(full_key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[full_key]
                return None
            return value

    async def set_raw(self, key: str, value: str, *, ttl: int) -> None:
        if ttl <= 0:
            return
        async with self._lock:
            self._entries[_namespaced(self._ns, key)] = (value, self._clock() + ttl)
