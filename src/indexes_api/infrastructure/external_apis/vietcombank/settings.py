# Copyright (c)
# SPDX-License-Identifier: MIT
"""Pydantic settings for the Vietcombank exchange-rate feed."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VietcombankSettings(BaseSettings):
    """Configuration for the exchange-rate XML feed.

    Environment variables: ``VIETCOMBANK_RATES_URL``, ``VIETCOMBANK_TIMEOUT_S``.
    """

    rates_url: str = Field(
        "https://www.vietcombank.com.vn/ExchangeRates/ExrateXML.aspx",
        description="Exchange-rate XML document.",
    )
    timeout_s: float = Field(90.0, description="Per-request timeout in seconds.")

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="VIETCOMBANK_",
        extra="ignore",
    )
