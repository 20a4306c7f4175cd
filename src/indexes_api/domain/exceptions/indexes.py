# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Indexes Domain Exceptions

Purpose:
    Error conditions for exchange-rate, stock-index and stock-quote lookups.
    Each kind carries a stable ``code`` and the HTTP status adapters map it to.

Layer: domain/exceptions
"""
from __future__ import annotations

from .base import DomainError


class InvalidRequest(DomainError):
    """Unknown resource name or malformed identity."""

    code = "INVALID_REQUEST"
    http_status = 400


class MethodNotAllowed(DomainError):
    """Only read access is supported."""

    code = "METHOD_NOT_ALLOWED"
    http_status = 405


class StockQuoteNotFound(DomainError):
    """Acquisition for a stock code produced no usable payload.

    Network failures, unparseable bodies and missing mandatory fields are all
    folded into this kind; the cause is kept in ``details``.
    """

    code = "STOCK_QUOTE_NOT_FOUND"
    http_status = 404


class SchemaMismatch(DomainError):
    """A required upstream field could not be coerced to the expected type."""

    code = "UPSTREAM_SCHEMA_ERROR"
    http_status = 502


class UpstreamUnavailable(DomainError):
    """An upstream feed could not be fetched or parsed."""

    code = "UPSTREAM_UNAVAILABLE"
    http_status = 503
