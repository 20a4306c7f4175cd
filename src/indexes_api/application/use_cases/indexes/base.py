# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Cached Indexes Use Case Base

Purpose:
    Shared read-through flow for the indexes use cases: look up the cache,
    produce on miss, record hit/miss metrics and broadcast fresh data.

Layer: application/use_cases
"""

from __future__ import annotations

import json

from indexes_api.application.interfaces.update_publisher import (
    UpdateMessage,
    UpdatePublisherPort,
)
from indexes_api.application.services.read_through import (
    CachedBody,
    Producer,
    ReadThroughCache,
)
from indexes_api.application.services.ttl_policy import TtlPolicy
from indexes_api.infrastructure.observability.metrics_indexes import (
    indexes_cache_hits_total,
    indexes_cache_misses_total,
)


class CachedIndexesUseCase:
    """Base for use cases serving a cached JSON body.

    Args:
        cache: Read-through cache wrapper.
        ttl_policy: TTL policy applied on write.
        publisher: Optional update publisher notified on fresh results.
    """

    #: Metric label and update-message suffix, e.g. ``StockQuote``.
    resource: str = ""

    def __init__(
        self,
        *,
        cache: ReadThroughCache,
        ttl_policy: TtlPolicy,
        publisher: UpdatePublisherPort | None = None,
    ) -> None:
        self._cache = cache
        self._ttl_policy = ttl_policy
        self._publisher = publisher

    @property
    def update_type(self) -> str:
        return f"Indexes#{self.resource}"

    async def _serve(self, key: str, producer: Producer) -> CachedBody:
        result = await self._cache.get_or_fetch(key, self._ttl_policy, producer)
        if result.hit:
            indexes_cache_hits_total.labels(source=self.resource).inc()
            return result

        indexes_cache_misses_total.labels(source=self.resource).inc()
        if self._publisher is not None:
            await self._publisher.publish(
                UpdateMessage(type=self.update_type, data=json.loads(result.body))
            )
        return result
