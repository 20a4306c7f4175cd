from __future__ import annotations

import asyncio
import json

import fakeredis.aioredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from indexes_api.application.interfaces.update_publisher import UpdateMessage
from indexes_api.infrastructure.messaging.update_publisher import (
    LoggingUpdatePublisher,
    RedisUpdatePublisher,
    encode_message,
)
from indexes_api.infrastructure.observability.metrics_indexes import (
    indexes_update_publish_failures_total,
)

MESSAGE = UpdateMessage(type="Indexes#ExchangeRates", data={"USD": {"Buy": 24000.0}})


def test_encode_message_wire_shape() -> None:
    assert json.loads(encode_message(MESSAGE)) == {
        "DeviceID": "*",
        "Type": "Indexes#ExchangeRates",
        "Data": {"USD": {"Buy": 24000.0}},
    }


@pytest.mark.asyncio
async def test_redis_publisher_reaches_subscribers() -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    pubsub = fake.pubsub()
    await pubsub.subscribe("indexes:updates")

    publisher = RedisUpdatePublisher(channel="indexes:updates", client=fake)
    await publisher.publish(MESSAGE)

    received = None
    for _ in range(20):
        received = await pubsub.get_message(ignore_subscribe_messages=True, timeout=0.1)
        if received is not None:
            break
        await asyncio.sleep(0)

    assert received is not None
    assert json.loads(received["data"])["Type"] == "Indexes#ExchangeRates"
    await pubsub.aclose()


class _BrokenRedis:
    async def publish(self, channel: str, message: str) -> int:
        raise RedisConnectionError("redis is down")


@pytest.mark.asyncio
async def test_redis_publisher_swallows_delivery_failures() -> None:
    counter = indexes_update_publish_failures_total.labels(type=MESSAGE.type)
    before = counter._value.get()

    publisher = RedisUpdatePublisher(client=_BrokenRedis())  # type: ignore[arg-type]
    await publisher.publish(MESSAGE)

    assert counter._value.get() == before + 1


@pytest.mark.asyncio
async def test_logging_publisher_keeps_recent_messages() -> None:
    publisher = LoggingUpdatePublisher()
    await publisher.publish(MESSAGE)
    assert list(publisher.sent) == [MESSAGE]
