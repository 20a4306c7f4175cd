# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application Interface: Cache Port.

Synopsis:
    Minimal raw-string cache used by the read-through wrapper. Enables
    swapping Redis, in-memory, or other cache implementations.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Protocol


class CachePort(Protocol):
    """String cache with TTL semantics.

    Values are stored and returned verbatim so that a cache hit is
    byte-identical to the response that populated it. Implementations must
    make a single ``get_raw``/``set_raw`` atomic per key.
    """

    async def get_raw(self, key: str) -> str | None:
        """Get a cached value by key.

        Args:
            key: Cache key (namespacing is the implementation's concern).

        Returns:
            The stored string if present and unexpired, else ``None``.
        """

    async def set_raw(self, key: str, value: str, *, ttl: int) -> None:
        """Store a value with TTL.

        Args:
            key: Cache key.
            value: Serialized payload.
            ttl: Time-to-live in seconds; ``<= 0`` means "do not cache".
        """
