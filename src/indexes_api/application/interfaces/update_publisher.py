# Copyright (c)
# SPDX-License-Identifier: MIT
"""Application Interface: Update Publisher Port.

Synopsis:
    Broadcast of freshly fetched data to connected devices. Publishing is
    best-effort: implementations log and swallow their own failures.

Layer:
    application/interfaces
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

#: Device id addressing every subscriber.
BROADCAST_DEVICE_ID = "*"


@dataclass(frozen=True, slots=True)
class UpdateMessage:
    """Update notification.

    Attributes:
        type: Message type, e.g. ``Indexes#StockQuote``.
        data: JSON-serializable payload that was just cached.
        device_id: Target device (``*`` for broadcast).
    """

    type: str
    data: Any
    device_id: str = BROADCAST_DEVICE_ID


class UpdatePublisherPort(Protocol):
    """Sink for update messages."""

    async def publish(self, message: UpdateMessage) -> None:
        """Publish ``message``; must not raise for delivery failures."""
