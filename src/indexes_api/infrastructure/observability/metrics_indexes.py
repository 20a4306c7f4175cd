# Copyright (c)
# SPDX-License-Identifier: MIT
"""Indexes observability helpers and Prometheus metrics.

Exports
-------
Collectors (names are part of the public contract and must remain stable):

* ``indexes_upstream_latency_seconds`` (Histogram)
* ``indexes_upstream_errors_total`` (Counter)
* ``indexes_cache_hits_total`` (Counter)
* ``indexes_cache_misses_total`` (Counter)
* ``indexes_update_publish_failures_total`` (Counter)

Helpers:

* :func:`observe_upstream_request` – context manager for one upstream call.

Design
------
All collectors are created against the *current* default registry
(:data:`prometheus_client.REGISTRY`). If a collector with the same name is
already registered, the existing instance is reused instead of registering a
duplicate, which keeps module re-imports and registry swaps in tests safe.
"""

from __future__ import annotations

from collections.abc import Generator, Sequence
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field
from time import perf_counter

import prometheus_client as prom
from prometheus_client import Counter, Histogram
from prometheus_client.registry import CollectorRegistry


def _lookup(registry: CollectorRegistry, name: str) -> object | None:
    mapping = getattr(registry, "_names_to_collectors", {})  # internal but stable
    return mapping.get(name)


def _get_or_create_histogram(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Histogram:
    """Return a histogram bound to the current default registry.

    Args:
        name: Metric name.
        doc: Human-readable metric description.
        labelnames: Optional iterable of label names.

    Returns:
        A :class:`Histogram` bound to the current :data:`prom.REGISTRY`.
    """
    registry: CollectorRegistry = prom.REGISTRY
    existing = _lookup(registry, name)
    if isinstance(existing, Histogram):
        return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return Histogram(name, doc, labels, registry=registry)
    except ValueError as exc:
        if "Duplicated timeseries" in str(exc):
            again = _lookup(registry, name)
            if isinstance(again, Histogram):
                return again
        raise


def _get_or_create_counter(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Counter:
    """Return a counter bound to the current default registry.

    Mirrors :func:`_get_or_create_histogram` for :class:`Counter` collectors.
    Note that ``prometheus_client`` registers counters under the name without
    the ``_total`` suffix, so both spellings are checked.
    """
    registry: CollectorRegistry = prom.REGISTRY
    for candidate in (name, name.removesuffix("_total")):
        existing = _lookup(registry, candidate)
        if isinstance(existing, Counter):
            return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return Counter(name, doc, labels, registry=registry)
    except ValueError as exc:
        if "Duplicated timeseries" in str(exc):
            for candidate in (name, name.removesuffix("_total")):
                again = _lookup(registry, candidate)
                if isinstance(again, Counter):
                    return again
        raise


# ---------------------------------------------------------------------------
# Core metrics
# ---------------------------------------------------------------------------

indexes_upstream_latency_seconds: Histogram = _get_or_create_histogram(
    "indexes_upstream_latency_seconds",
    "Latency of upstream scraping calls (seconds).",
    labelnames=("provider", "endpoint", "outcome"),
)

indexes_upstream_errors_total: Counter = _get_or_create_counter(
    "indexes_upstream_errors_total",
    "Total errors encountered when calling upstream providers.",
    labelnames=("provider", "endpoint", "reason"),
)

# Cache hits/misses: one label naming the cached resource.
indexes_cache_hits_total: Counter = _get_or_create_counter(
    "indexes_cache_hits_total",
    "Read-through cache hits.",
    labelnames=("source",),
)

indexes_cache_misses_total: Counter = _get_or_create_counter(
    "indexes_cache_misses_total",
    "Read-through cache misses.",
    labelnames=("source",),
)

indexes_update_publish_failures_total: Counter = _get_or_create_counter(
    "indexes_update_publish_failures_total",
    "Update broadcasts that could not be published.",
    labelnames=("type",),
)


# ---------------------------------------------------------------------------
# Observation context manager used by upstream clients
# ---------------------------------------------------------------------------


@dataclass
class UpstreamObservation:
    """State captured while observing an upstream call.

    Attributes:
        provider: Upstream provider identifier (for labelling).
        endpoint: Logical endpoint name (for labelling).
        start: Monotonic start time in seconds.
        outcome: Outcome of the call (``"success"`` or ``"error"``).
        error_reason: Short, machine-readable error reason if any.
    """

    provider: str
    endpoint: str
    start: float = field(default_factory=perf_counter)
    outcome: str = "success"
    error_reason: str | None = None

    def mark_error(self, reason: str) -> None:
        """Mark the upstream call as failed with a given reason."""
        self.outcome = "error"
        self.error_reason = reason


@contextmanager
def observe_upstream_request(
    *,
    provider: str,
    endpoint: str,
) -> Generator[UpstreamObservation, None, None]:
    """Observe one upstream request.

    Records a latency sample and, when :meth:`UpstreamObservation.mark_error`
    was invoked (or an exception escaped), an error increment. Cancellation
    is recorded as ``cancelled`` and re-raised untouched.

    Args:
        provider: Upstream provider identifier (e.g. ``"vietstock"``).
        endpoint: Logical endpoint name (e.g. ``"tradinginfo"``).

    Yields:
        A mutable :class:`UpstreamObservation`.
    """
    obs = UpstreamObservation(provider=provider, endpoint=endpoint)
    try:
        yield obs
    except Exception:
        if obs.error_reason is None:
            obs.mark_error("exception")
        raise
    except BaseException:
        if obs.error_reason is None:
            obs.mark_error("cancelled")
        raise
    finally:
        elapsed = perf_counter() - obs.start

        with suppress(Exception):
            indexes_upstream_latency_seconds.labels(
                provider=obs.provider,
                endpoint=obs.endpoint,
                outcome=obs.outcome,
            ).observe(elapsed)

            if obs.error_reason is not None:
                indexes_upstream_errors_total.labels(
                    provider=obs.provider,
                    endpoint=obs.endpoint,
                    reason=obs.error_reason,
                ).inc()


readyz_redis_latency_seconds: Histogram = _get_or_create_histogram(
    "indexes_readyz_redis_latency_seconds",
    "Latency of the Redis readiness probe (seconds).",
)


def get_readyz_redis_latency_seconds() -> Histogram:
    """Return the Redis readiness latency histogram."""
    return readyz_redis_latency_seconds
