# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime

import pytest

# Must be set before indexes_api.main is imported anywhere.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("INDEXES_TEST_MODE", "1")

from indexes_api.config.settings import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Clear the cached Settings singleton around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fixed_clock() -> Callable[[datetime], Callable[[], datetime]]:
    """Return a factory producing clocks frozen at a given UTC instant."""

    def _make(at: datetime) -> Callable[[], datetime]:
        frozen = at if at.tzinfo is not None else at.replace(tzinfo=UTC)
        return lambda: frozen

    return _make


@pytest.fixture
def sequential_buster() -> Callable[[], str]:
    """Deterministic chart cache-buster: ``b0``, ``b1``, ..."""
    counter = iter(range(1_000_000))
    return lambda: f"b{next(counter)}"
