# Copyright (c)
# SPDX-License-Identifier: MIT
"""Pydantic settings for the Vietstock scraping client."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VietstockSettings(BaseSettings):
    """Configuration for the Vietstock session bootstrap and trading-data POST.

    Environment variables (with ``model_config.env_prefix``):

    * ``VIETSTOCK_BASE_URL``
    * ``VIETSTOCK_TRADING_INFO_PATH``
    * ``VIETSTOCK_COMPANY_SEARCH_URL`` (``{code}`` is substituted)
    * ``VIETSTOCK_TIMEOUT_S``
    * ``VIETSTOCK_LOG_PAYLOADS``
    """

    base_url: str = Field(
        "https://finance.vietstock.vn",
        description="Landing host; also the origin of the trading-data endpoint.",
    )
    trading_info_path: str = Field(
        "/company/tradinginfo",
        description="Path of the trading-data POST endpoint.",
    )
    company_search_url: str = Field(
        "https://finance.vietstock.vn/AjaxData/Search/SearchCompany.ashx?query={code}",
        description="Company search endpoint; ``{code}`` is replaced by the stock code.",
    )
    timeout_s: float = Field(
        90.0,
        description="Per-request timeout in seconds.",
    )
    log_payloads: bool = Field(
        False,
        description="Emit debug traces of the raw trading-data exchange.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="VIETSTOCK_",
        extra="ignore",
    )

    @property
    def trading_info_url(self) -> str:
        """Return the absolute trading-data URL."""
        return f"{self.base_url.rstrip('/')}/{self.trading_info_path.lstrip('/')}"
