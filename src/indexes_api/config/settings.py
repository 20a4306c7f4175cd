# Copyright (c)
# SPDX-License-Identifier: MIT
"""Indexes API Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated application configuration. Only adapters and
    infrastructure read the process environment; other layers receive
    `Settings` via DI.

Design:
    - Pydantic v2 BaseSettings reading env and `.env`.
    - Environment enumeration for behavior toggles (includes TEST).
    - Upstream URLs live in per-provider settings classes with their own env
      prefixes (VIETSTOCK_, VIETCOMBANK_, CAFEF_); unknown keys are ignored so
      those can share the `.env` file.
    - Singleton accessor `get_settings()` with LRU cache.
"""

from __future__ import annotations

import logging
import os
from datetime import time
from enum import Enum
from functools import lru_cache

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

TEST_MODE_ENV = "INDEXES_TEST_MODE"


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration for the indexes service."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )
    service_version: str | None = Field(
        default=None,
        description="Service version used for logging and the OpenAPI document.",
        validation_alias="SERVICE_VERSION",
    )

    # ---------------------------
    # Logging
    # ---------------------------
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO').",
        validation_alias="LOG_LEVEL",
    )
    log_upstream_payloads: bool = Field(
        default=False,
        description="Emit DEBUG traces of raw upstream request/response pairs.",
        validation_alias="LOG_UPSTREAM_PAYLOADS",
    )

    # ---------------------------
    # Redis
    # ---------------------------
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL used for the response cache and update pub/sub.",
        validation_alias="REDIS_URL",
    )
    redis_health_check_interval_s: int = Field(
        default=15,
        ge=1,
        le=3600,
        description="Health check interval for Redis clients in seconds.",
        validation_alias="REDIS_HEALTH_CHECK_INTERVAL_S",
    )
    redis_socket_timeout_s: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Socket timeout in seconds for Redis commands.",
        validation_alias="REDIS_SOCKET_TIMEOUT_S",
    )
    redis_socket_connect_timeout_s: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Socket connect timeout in seconds for Redis.",
        validation_alias="REDIS_SOCKET_CONNECT_TIMEOUT_S",
    )

    # ---------------------------
    # Cache policy
    # ---------------------------
    cache_namespace: str = Field(
        default="indexes:v1",
        description="Prefix applied to every cache key.",
        validation_alias="CACHE_NAMESPACE",
    )
    cache_ttl_short_s: int = Field(
        default=5,
        ge=1,
        le=3600,
        description="TTL while the market is trading.",
        validation_alias="CACHE_TTL_SHORT_S",
    )
    cache_ttl_long_s: int = Field(
        default=30,
        ge=1,
        le=24 * 60 * 60,
        description="TTL outside trading hours.",
        validation_alias="CACHE_TTL_LONG_S",
    )
    market_timezone: str = Field(
        default="Asia/Ho_Chi_Minh",
        description="IANA timezone of the exchange.",
        validation_alias="MARKET_TIMEZONE",
    )
    market_open: time = Field(
        default=time(9, 0),
        description="Market open, local time (inclusive).",
        validation_alias="MARKET_OPEN",
    )
    market_close: time = Field(
        default=time(15, 0),
        description="Market close, local time (exclusive).",
        validation_alias="MARKET_CLOSE",
    )

    # ---------------------------
    # Outbound HTTP
    # ---------------------------
    http_timeout_s: float = Field(
        default=90.0,
        gt=0,
        le=600.0,
        description="Default per-request timeout for upstream calls.",
        validation_alias="HTTP_TIMEOUT_S",
    )
    http_user_agent: str | None = Field(
        default=None,
        description="Override of the desktop User-Agent sent upstream.",
        validation_alias="HTTP_USER_AGENT",
    )

    # ---------------------------
    # Update broadcast
    # ---------------------------
    updates_enabled: bool = Field(
        default=True,
        description="Publish update messages when fresh data is fetched.",
        validation_alias="UPDATES_ENABLED",
    )
    updates_channel: str = Field(
        default="indexes:updates",
        description="Redis pub/sub channel for update messages.",
        validation_alias="UPDATES_CHANNEL",
    )

    # ---------------------------
    # CORS
    # ---------------------------
    cors_allow_origins_raw: str | None = Field(
        default=None,
        description="Raw env for allowed CORS origins (comma-separated).",
        validation_alias="ALLOWED_ORIGINS",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins, derived from ALLOWED_ORIGINS.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _compute_cors_and_market_window(self) -> Settings:
        """Parse CORS origins and validate the market window.

        Raises:
            ValueError: If '*' is used outside development/test or the
                market window is empty.
        """
        raw = (self.cors_allow_origins_raw or "").strip()
        entries = [e.strip() for e in raw.split(",") if e.strip()]
        if any(e == "*" for e in entries) and self.environment not in (
            Environment.DEVELOPMENT,
            Environment.TEST,
        ):
            raise ValueError("'*' CORS origin is only allowed in development/test environments.")
        self.cors_allow_origins = entries

        if self.market_open >= self.market_close:
            raise ValueError("MARKET_OPEN must be before MARKET_CLOSE.")
        return self

    @model_validator(mode="after")
    def _validate_environment_side_effects(self) -> Settings:
        """Force INDEXES_TEST_MODE=1 when ENVIRONMENT=test."""
        if self.environment is Environment.TEST and os.getenv(TEST_MODE_ENV) != "1":
            os.environ[TEST_MODE_ENV] = "1"
            logger.info("INDEXES_TEST_MODE enabled due to ENVIRONMENT=test")
        return self

    @property
    def test_mode(self) -> bool:
        """Return True when running with in-memory cache and no Redis."""
        return self.environment is Environment.TEST or os.getenv(TEST_MODE_ENV) == "1"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.exception("Invalid application configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    logger.info(
        "Settings initialized",
        extra={
            "extra": {
                "environment": settings.environment.value,
                "test_mode": settings.test_mode,
                "cache_namespace": settings.cache_namespace,
                "cache_ttl": [settings.cache_ttl_short_s, settings.cache_ttl_long_s],
                "market_timezone": settings.market_timezone,
                "updates_enabled": settings.updates_enabled,
                "cors_count": len(settings.cors_allow_origins),
            }
        },
    )
    return settings
