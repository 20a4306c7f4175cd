# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Quote Session & Company Lookup Entities

Purpose:
    Session-scoped artifacts scraped from the upstream landing page, and the
    optional result of the best-effort company search.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass

from .base import BaseEntity

DEFAULT_LOCALE = "vi-VN"


@dataclass(frozen=True, slots=True)
class QuoteSession(BaseEntity):
    """Artifacts required by the trading-data POST.

    Missing values degrade to empty strings (locale to ``vi-VN``); a session
    is always structurally valid and the request is attempted regardless.

    Args:
        session_id: Platform session cookie value.
        antiforgery_token: Token scraped from the landing page markup.
        locale: Value of the locale cookie.
    """

    session_id: str = ""
    antiforgery_token: str = ""
    locale: str = DEFAULT_LOCALE

    def __post_init__(self) -> None:
        if self.session_id is None:
            object.__setattr__(self, "session_id", "")
        if self.antiforgery_token is None:
            object.__setattr__(self, "antiforgery_token", "")
        if not self.locale:
            object.__setattr__(self, "locale", DEFAULT_LOCALE)


@dataclass(frozen=True, slots=True)
class CompanyProfile(BaseEntity):
    """Display name and canonical page of a listed company."""

    code: str
    name: str
    url: str | None = None


@dataclass(frozen=True, slots=True)
class CompanyLookup(BaseEntity):
    """Outcome of a company search: an optional profile plus a diagnostic.

    Exactly one of ``profile`` / ``diagnostic`` is expected to be set.
    """

    profile: CompanyProfile | None = None
    diagnostic: str | None = None

    @property
    def found(self) -> bool:
        """Return True when a profile was resolved."""
        return self.profile is not None

    @classmethod
    def missing(cls, diagnostic: str) -> CompanyLookup:
        """Build a lookup result with no profile."""
        return cls(profile=None, diagnostic=diagnostic)
