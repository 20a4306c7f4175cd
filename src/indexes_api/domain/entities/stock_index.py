# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Stock Index Entity

Purpose:
    A market index (e.g. VNINDEX) with its upstream fields re-keyed to
    capitalized names.

Layer: domain/entities
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .base import BaseEntity


@dataclass(frozen=True, slots=True)
class StockIndex(BaseEntity):
    """Named index with arbitrary scalar fields."""

    name: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("index name must be non-empty")
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
