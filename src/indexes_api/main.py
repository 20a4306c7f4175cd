# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Application Entry (Adapters Bootstrap)

Synopsis:
    FastAPI bootstrap that wires middleware, exception handlers and all
    routers. Provides an application factory (`create_app`) and a module-level
    eager app (`app`) for tooling and tests.

Design:
    • Bootstrap only (no business logic): routers + middleware + handlers.
    • Lifespan initializes Redis/HTTP/cache and tears them down safely.
    • Every failure leaves the service in the standard error envelope.
    • Root JSON logging configured at import time.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.requests import Request
from starlette.responses import Response as StarletteResponse

from indexes_api.adapters.routers.api_router import router as api_router
from indexes_api.adapters.routers.metrics_router import router as metrics_router
from indexes_api.config.settings import Settings, get_settings
from indexes_api.dependencies.core.bootstrap import bootstrap
from indexes_api.domain.exceptions.base import DomainError
from indexes_api.infrastructure.http.errors import (
    handle_domain_error,
    handle_http_exception,
    handle_unhandled_exception,
    handle_validation_error,
)
from indexes_api.infrastructure.logging.logger import (
    configure_root_logging,
    get_json_logger,
)
from indexes_api.infrastructure.middleware.access_log import AccessLogMiddleware
from indexes_api.infrastructure.middleware.request_id import RequestIdMiddleware

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
configure_root_logging()
logger = get_json_logger(__name__)


def _stable_operation_id(route: APIRoute) -> str:
    """Deterministic operationId: ``<methods>_<path>`` without braces."""
    methods = ",".join(sorted(route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "")
    return f"{methods.lower()}_{path.lower()}"


# -----------------------------------------------------------------------------
# Lifespan
# -----------------------------------------------------------------------------
@asynccontextmanager
async def runtime_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize and teardown shared infrastructure via the core bootstrap.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control back to FastAPI to serve requests.
    """
    async with bootstrap(app) as state:
        app.state.settings = state.settings
        app.state.http_client = state.http_client
        yield


# -----------------------------------------------------------------------------
# Middleware & CORS
# -----------------------------------------------------------------------------
def _attach_middlewares(app: FastAPI) -> None:
    """Attach core middleware.

    Starlette runs the last-added middleware outermost, so the request id is
    assigned before the access log records the request.
    """
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1024)


def _attach_cors(app: FastAPI, settings: Settings) -> None:
    """Attach CORS middleware based on settings.

    Args:
        app: FastAPI application.
        settings: Runtime settings containing CORS config.
    """
    allow_origins = settings.cors_allow_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials="*" not in allow_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Cache", "X-Request-ID"],
    )


def _patch_exception_handlers(app: FastAPI) -> None:
    """Install the structured error-envelope handlers.

    Args:
        app: FastAPI application.
    """

    async def _domain_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, DomainError):
            raise exc
        return await handle_domain_error(request, exc)

    async def _http_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, StarletteHTTPException):
            raise exc
        return await handle_http_exception(request, exc)

    async def _validation_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, RequestValidationError):
            raise exc
        return await handle_validation_error(request, exc)

    async def _unhandled_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        return await handle_unhandled_exception(request, exc)

    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Fully configured application instance.
    """
    settings: Settings = get_settings()
    configure_root_logging(settings.log_level)

    service_name = "indexes-api"
    service_version = os.getenv("SERVICE_VERSION") or settings.service_version or "0.0.0"

    app = FastAPI(
        title="Indexes API",
        version=service_version,
        description="Vietnamese stock quotes, stock indexes and exchange rates.",
        lifespan=runtime_lifespan,
        generate_unique_id_function=_stable_operation_id,
    )

    _patch_exception_handlers(app)
    _attach_middlewares(app)
    _attach_cors(app, settings)

    # Health and /v1/indexes/* via the aggregator.
    app.include_router(api_router)
    app.include_router(metrics_router)

    logger.info(
        "service_startup",
        extra={
            "extra": {
                "service": service_name,
                "env": settings.environment.value,
                "version": service_version,
                "status": "starting",
            }
        },
    )
    return app


# Eager app for tools and tests.
app: FastAPI = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "indexes_api.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=int(os.getenv("PORT", "8080")),
        reload=True,
    )
