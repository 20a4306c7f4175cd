# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Base HTTP Schema (Adapters Layer)

Purpose:
    Canonical Pydantic base for adapter-layer HTTP schemas.

Layer: adapters/schemas/http
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseHTTPSchema(BaseModel):
    """Base class for HTTP-facing schemas (strict, enum values serialized)."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    def model_dump_http(self, **kwargs: Any) -> dict[str, Any]:
        """Return a JSON-serializable dict suitable for HTTP responses."""
        return self.model_dump(mode="json", **kwargs)
