from __future__ import annotations

import fakeredis.aioredis
import pytest

from indexes_api.infrastructure.caching import redis_client as redis_client_module
from indexes_api.infrastructure.caching.string_cache import (
    InMemoryStringCache,
    RedisStringCache,
)


@pytest.mark.asyncio
async def test_redis_string_cache_key_shape_and_ttl(monkeypatch) -> None:
    """RedisStringCache namespaces keys and applies the TTL."""
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)

    cache = RedisStringCache(namespace="indexes:v1")
    body = '{"Info":{"Name":"Vinamilk"},"Unit":"1.000 đ"}'

    await cache.set_raw("StockQuote:VNM", body, ttl=5)

    assert await fake.get("indexes:v1:StockQuote:VNM") == body
    assert await cache.get_raw("StockQuote:VNM") == body
    ttl = await fake.ttl("indexes:v1:StockQuote:VNM")
    assert 0 < ttl <= 5


@pytest.mark.asyncio
async def test_redis_string_cache_miss_and_non_positive_ttl() -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    cache = RedisStringCache(namespace="indexes:v1", client=fake)

    assert await cache.get_raw("ExchangeRates") is None
    await cache.set_raw("ExchangeRates", "{}", ttl=0)
    assert await fake.get("indexes:v1:ExchangeRates") is None


@pytest.mark.asyncio
async def test_redis_string_cache_decodes_bytes() -> None:
    fake = fakeredis.aioredis.FakeRedis()
    cache = RedisStringCache(namespace="ns", client=fake)

    await cache.set_raw("k", "tỷ", ttl=30)
    assert await cache.get_raw("k") == "tỷ"


@pytest.mark.asyncio
async def test_in_memory_cache_expires_entries() -> None:
    now = [0.0]
    cache = InMemoryStringCache(namespace="ns", clock=lambda: now[0])

    await cache.set_raw("k", "v", ttl=30)
    now[0] = 29.9
    assert await cache.get_raw("k") == "v"
    now[0] = 30.0
    assert await cache.get_raw("k") is None


@pytest.mark.asyncio
async def test_init_redis_is_idempotent_and_close_resets(monkeypatch) -> None:
    created: list[fakeredis.aioredis.FakeRedis] = []

    def _factory(settings):
        client = fakeredis.aioredis.FakeRedis(decode_responses=True)
        created.append(client)
        return client

    monkeypatch.setattr(redis_client_module, "_client", None)
    monkeypatch.setattr(redis_client_module, "_create_aioredis_client", _factory)
    settings = object()

    redis_client_module.init_redis(settings)  # type: ignore[arg-type]
    redis_client_module.init_redis(settings)  # type: ignore[arg-type]
    assert len(created) == 1
    assert redis_client_module.get_redis_client() is created[0]

    await redis_client_module.close_redis()
    assert redis_client_module._client is None
