# Copyright (c)
# SPDX-License-Identifier: MIT
"""Dependency wiring for the indexes endpoints (gateways, use cases, controller).

Overview:
    FastAPI dependency providers that build the controller from the shared
    resources created by :func:`indexes_api.dependencies.core.bootstrap.bootstrap`
    and stored on ``app.state.indexes``.

Layer:
    dependencies

Design:
    * Use cases are cheap to build; they are created per request around the
      shared cache, HTTP client and publisher.
    * Tests override :func:`get_indexes_controller` via
      ``app.dependency_overrides`` or swap ``app.state.indexes``.
"""

from __future__ import annotations

from fastapi import Request

from indexes_api.adapters.controllers.indexes_controller import IndexesController
from indexes_api.adapters.gateways.indexes_gateways import (
    CafefGateway,
    VietcombankGateway,
    VietstockGateway,
)
from indexes_api.application.services.read_through import ReadThroughCache
from indexes_api.application.use_cases.indexes.get_exchange_rates import GetExchangeRates
from indexes_api.application.use_cases.indexes.get_stock_indexes import GetStockIndexes
from indexes_api.application.use_cases.indexes.get_stock_quote import GetStockQuote
from indexes_api.dependencies.core.bootstrap import BootstrapState
from indexes_api.infrastructure.external_apis.cafef.client import CafefClient
from indexes_api.infrastructure.external_apis.vietcombank.client import VietcombankClient
from indexes_api.infrastructure.external_apis.vietstock.client import VietstockClient
from indexes_api.infrastructure.external_apis.vietstock.session import SessionBootstrapper


def get_bootstrap_state(request: Request) -> BootstrapState:
    """Return the shared infrastructure created at startup.

    Raises:
        RuntimeError: If the application lifespan has not run.
    """
    state = getattr(request.app.state, "indexes", None)
    if state is None:
        raise RuntimeError("application infrastructure is not initialized")
    return state


def build_indexes_controller(state: BootstrapState) -> IndexesController:
    """Wire the three use cases around ``state`` and return the controller."""
    fetch = state.fetch_client
    cache = ReadThroughCache(state.cache)
    vietstock_settings = state.vietstock
    cafef_settings = state.cafef

    vietstock = VietstockClient(fetch, vietstock_settings)
    stock_quote = GetStockQuote(
        VietstockGateway(
            bootstrapper=SessionBootstrapper(fetch, timeout_s=vietstock_settings.timeout_s),
            client=vietstock,
        ),
        cache=cache,
        ttl_policy=state.ttl_policy,
        publisher=state.publisher,
        chart_base_url=cafef_settings.chart_base_url,
        source_base_url=vietstock_settings.base_url,
    )
    stock_indexes = GetStockIndexes(
        CafefGateway(CafefClient(fetch, cafef_settings)),
        cache=cache,
        ttl_policy=state.ttl_policy,
        publisher=state.publisher,
    )
    exchange_rates = GetExchangeRates(
        VietcombankGateway(VietcombankClient(fetch, state.vietcombank)),
        cache=cache,
        ttl_policy=state.ttl_policy,
        publisher=state.publisher,
    )
    return IndexesController(
        exchange_rates=exchange_rates,
        stock_indexes=stock_indexes,
        stock_quote=stock_quote,
        ttl_policy=state.ttl_policy,
    )


def get_indexes_controller(request: Request) -> IndexesController:
    """FastAPI provider for :class:`IndexesController`."""
    return build_indexes_controller(get_bootstrap_state(request))
