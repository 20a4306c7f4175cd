# Copyright (c)
# SPDX-License-Identifier: MIT
"""Indexes presenter.

Purpose:
    Turn an :class:`IndexesResult` into an HTTP response. The body is the
    cached JSON string, written verbatim; headers carry a strong ETag over
    those exact bytes, ``Cache-Control`` and the cache outcome.

Layer:
    adapters/presenters
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass

from fastapi import Response, status

from indexes_api.adapters.controllers.indexes_controller import IndexesResult

JSON_MEDIA_TYPE = "application/json; charset=utf-8"


def compute_quoted_etag(body: bytes) -> str:
    """Return a quoted strong ETag (SHA-256 of ``body``)."""
    return f'"{hashlib.sha256(body).hexdigest()}"'


def _etag_matches(if_none_match: str | None, etag: str) -> bool:
    if not if_none_match:
        return False
    candidates = {value.strip() for value in if_none_match.split(",")}
    return "*" in candidates or etag in candidates


@dataclass(frozen=True, slots=True)
class PresentResult:
    """Presentation result: raw body (``None`` for 304), headers and status."""

    body: bytes | None
    headers: Mapping[str, str]
    status_code: int = status.HTTP_200_OK


class IndexesPresenter:
    """Shapes cached bodies into HTTP responses."""

    def present(
        self,
        result: IndexesResult,
        *,
        if_none_match: str | None = None,
        trace_id: str | None = None,
    ) -> PresentResult:
        body = result.body.encode("utf-8")
        etag = compute_quoted_etag(body)
        headers: dict[str, str] = {
            "ETag": etag,
            "Cache-Control": f"public, max-age={max(result.max_age, 0)}",
            "X-Cache": "HIT" if result.cache_hit else "MISS",
        }
        if trace_id:
            headers["X-Request-ID"] = trace_id
        if _etag_matches(if_none_match, etag):
            return PresentResult(
                body=None, headers=headers, status_code=status.HTTP_304_NOT_MODIFIED
            )
        return PresentResult(body=body, headers=headers)

    @staticmethod
    def to_response(result: PresentResult) -> Response:
        if result.body is None:
            return Response(status_code=result.status_code, headers=dict(result.headers))
        return Response(
            content=result.body,
            status_code=result.status_code,
            headers=dict(result.headers),
            media_type=JSON_MEDIA_TYPE,
        )
