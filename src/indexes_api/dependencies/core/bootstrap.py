# Copyright (c)
# SPDX-License-Identifier: MIT
"""Core bootstrap for infrastructure (Redis, HTTP, cache, publisher).

This module owns the lifecycle of shared infrastructure used by the FastAPI
app. Configuration is read from Settings and the heavy lifting is delegated
to the infrastructure modules.

The single public surface is :func:`bootstrap`, an async context manager that
yields a state object holding every shared resource.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from fastapi import FastAPI

from indexes_api.application.interfaces.cache_port import CachePort
from indexes_api.application.interfaces.update_publisher import UpdatePublisherPort
from indexes_api.application.services.ttl_policy import MarketHoursTtlPolicy
from indexes_api.config.settings import Settings, get_settings
from indexes_api.infrastructure.caching.string_cache import (
    InMemoryStringCache,
    RedisStringCache,
)
from indexes_api.infrastructure.external_apis.cafef.settings import CafefSettings
from indexes_api.infrastructure.external_apis.http.fetch_client import (
    DESKTOP_USER_AGENT,
    FetchClient,
    build_http_client,
)
from indexes_api.infrastructure.external_apis.vietcombank.settings import (
    VietcombankSettings,
)
from indexes_api.infrastructure.external_apis.vietstock.settings import VietstockSettings
from indexes_api.infrastructure.logging.logger import get_json_logger
from indexes_api.infrastructure.messaging.update_publisher import (
    LoggingUpdatePublisher,
    RedisUpdatePublisher,
)

logger = get_json_logger(__name__)


@dataclass
class BootstrapState:
    """State yielded by the bootstrap context manager."""

    settings: Settings
    http_client: httpx.AsyncClient
    fetch_client: FetchClient
    cache: CachePort
    publisher: UpdatePublisherPort | None
    ttl_policy: MarketHoursTtlPolicy
    vietstock: VietstockSettings
    vietcombank: VietcombankSettings
    cafef: CafefSettings


def build_ttl_policy(settings: Settings) -> MarketHoursTtlPolicy:
    """Build the market-hours TTL policy from settings."""
    return MarketHoursTtlPolicy(
        short_ttl_s=settings.cache_ttl_short_s,
        long_ttl_s=settings.cache_ttl_long_s,
        open=settings.market_open,
        close=settings.market_close,
        tz=settings.market_timezone,
    )


def _vietstock_settings(settings: Settings) -> VietstockSettings:
    if settings.log_upstream_payloads:
        return VietstockSettings(log_payloads=True)
    return VietstockSettings()


@asynccontextmanager
async def bootstrap(app: FastAPI) -> AsyncGenerator[BootstrapState, None]:
    """Initialize and teardown shared infrastructure.

    Responsibilities:
        * Load application settings.
        * Initialize Redis (skipped in test mode).
        * Create the shared HTTPX AsyncClient and fetch client.
        * Select the cache and update publisher for the environment.
        * Shut everything down on exit, even on error.

    Args:
        app: FastAPI application instance; the state is also exposed on
            ``app.state.indexes``.

    Yields:
        BootstrapState: Resolved settings and shared resources.
    """
    settings: Settings = get_settings()
    logger.info("bootstrap.start", extra={"extra": {"test_mode": settings.test_mode}})

    # Imported here so tests can monkeypatch the module functions.
    import indexes_api.infrastructure.caching.redis_client as redis_client

    cache: CachePort
    publisher: UpdatePublisherPort | None
    if settings.test_mode:
        cache = InMemoryStringCache(namespace=settings.cache_namespace)
        publisher = LoggingUpdatePublisher() if settings.updates_enabled else None
    else:
        redis_client.init_redis(settings)
        cache = RedisStringCache(namespace=settings.cache_namespace)
        publisher = (
            RedisUpdatePublisher(channel=settings.updates_channel)
            if settings.updates_enabled
            else None
        )

    http_client = build_http_client(
        timeout_s=settings.http_timeout_s,
        user_agent=settings.http_user_agent or DESKTOP_USER_AGENT,
    )
    fetch_client = FetchClient(
        http=http_client,
        timeout_s=settings.http_timeout_s,
        user_agent=settings.http_user_agent or DESKTOP_USER_AGENT,
    )

    state = BootstrapState(
        settings=settings,
        http_client=http_client,
        fetch_client=fetch_client,
        cache=cache,
        publisher=publisher,
        ttl_policy=build_ttl_policy(settings),
        vietstock=_vietstock_settings(settings),
        vietcombank=VietcombankSettings(),
        cafef=CafefSettings(),
    )
    app.state.indexes = state

    try:
        yield state
    finally:
        try:
            await http_client.aclose()
        except Exception:
            logger.exception("bootstrap.http_client_close_failed")

        if not settings.test_mode:
            try:
                await redis_client.close_redis()
            except Exception:
                logger.exception("bootstrap.redis_close_failed")

        logger.info("bootstrap.stop")
