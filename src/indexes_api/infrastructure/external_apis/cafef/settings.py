# Copyright (c)
# SPDX-License-Identifier: MIT
"""Pydantic settings for the CafeF market index feed and chart images."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CafefSettings(BaseSettings):
    """Configuration for CafeF.

    Environment variables: ``CAFEF_INDEX_URL``, ``CAFEF_REFERER``,
    ``CAFEF_CHART_BASE_URL``, ``CAFEF_TIMEOUT_S``.
    """

    index_url: str = Field(
        "http://banggia.cafef.vn/stockhandler.ashx?index=true",
        description="JSON array of market indexes.",
    )
    referer: str = Field("http://cafef.vn/", description="Referer required by the feed.")
    chart_base_url: str = Field(
        "https://cafef4.vcmedia.vn",
        description="Host serving per-stock chart images.",
    )
    timeout_s: float = Field(90.0, description="Per-request timeout in seconds.")

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="CAFEF_",
        extra="ignore",
    )
