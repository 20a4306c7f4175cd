# Copyright (c)
# SPDX-License-Identifier: MIT
"""Update publishers.

Synopsis:
    Implementations of ``UpdatePublisherPort``. Publishing is best-effort:
    failures are logged and counted, never raised to the caller.

Wire format:
    ``{"DeviceID": "*", "Type": "Indexes#StockQuote", "Data": {...}}``
"""

from __future__ import annotations

import json
from collections import deque
from typing import Any

from redis.exceptions import RedisError

from indexes_api.application.interfaces.update_publisher import (
    UpdateMessage,
    UpdatePublisherPort,
)
from indexes_api.infrastructure.caching.redis_client import RedisClient, get_redis_client
from indexes_api.infrastructure.logging.logger import get_json_logger
from indexes_api.infrastructure.observability.metrics_indexes import (
    indexes_update_publish_failures_total,
)

logger = get_json_logger(__name__)

DEFAULT_CHANNEL = "indexes:updates"


def encode_message(message: UpdateMessage) -> str:
    """Serialize ``message`` to its compact wire representation."""
    payload: dict[str, Any] = {
        "DeviceID": message.device_id,
        "Type": message.type,
        "Data": message.data,
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


class RedisUpdatePublisher(UpdatePublisherPort):
    """Publishes update messages on a Redis pub/sub channel."""

    def __init__(
        self,
        *,
        channel: str = DEFAULT_CHANNEL,
        client: RedisClient | None = None,
    ) -> None:
        self._channel = channel
        self._client = client

    async def publish(self, message: UpdateMessage) -> None:
        redis = self._client if self._client is not None else get_redis_client()
        try:
            receivers = await redis.publish(self._channel, encode_message(message))
        except (RedisError, OSError, TypeError, ValueError) as exc:
            indexes_update_publish_failures_total.labels(type=message.type).inc()
            logger.warning(
                "update.publish_failed",
                extra={
                    "extra": {
                        "type": message.type,
                        "channel": self._channel,
                        "error": f"{type(exc).__name__}: {exc}",
                    }
                },
            )
            return
        logger.debug(
            "update.published",
            extra={"extra": {"type": message.type, "receivers": receivers}},
        )


class LoggingUpdatePublisher(UpdatePublisherPort):
    """Logs update messages instead of sending them (test mode, no Redis)."""

    def __init__(self) -> None:
        self.sent: deque[UpdateMessage] = deque(maxlen=100)

    async def publish(self, message: UpdateMessage) -> None:
        self.sent.append(message)
        logger.info(
            "update.logged",
            extra={"extra": {"type": message.type, "device_id": message.device_id}},
        )
