# Copyright (c)
# SPDX-License-Identifier: MIT
"""
Indexes Router.

Summary:
    Public endpoints serving exchange rates, stock indexes and stock quotes:

    * ``/v1/indexes/{object_name}``
    * ``/v1/indexes/{object_name}/{identity}``

    Every verb is routed so that non-GET requests are answered by the
    controller with ``METHOD_NOT_ALLOWED`` in the standard error envelope.

Layer:
    adapters/routers
"""
from __future__ import annotations

from typing import Annotated, Final

from fastapi import APIRouter, Depends, Request, Response

from indexes_api.adapters.controllers.indexes_controller import IndexesController
from indexes_api.adapters.presenters.indexes_presenter import IndexesPresenter
from indexes_api.dependencies.indexes import get_indexes_controller

ROUTED_METHODS: Final[list[str]] = ["GET", "POST", "PUT", "PATCH", "DELETE"]

router = APIRouter(prefix="/v1/indexes", tags=["Indexes"])
presenter = IndexesPresenter()


async def _serve(
    request: Request,
    controller: IndexesController,
    object_name: str,
    identity: str | None,
) -> Response:
    result = await controller.process(request.method, object_name, identity)
    presented = presenter.present(
        result,
        if_none_match=request.headers.get("If-None-Match"),
        trace_id=getattr(request.state, "request_id", None),
    )
    return presenter.to_response(presented)


@router.api_route(
    "/{object_name}",
    methods=ROUTED_METHODS,
    summary="Get exchange rates or stock indexes",
    operation_id="indexes_get_object",
)
async def get_object(
    request: Request,
    object_name: str,
    controller: Annotated[IndexesController, Depends(get_indexes_controller)],
) -> Response:
    """Return the cached JSON body for ``object_name``."""
    return await _serve(request, controller, object_name, None)


@router.api_route(
    "/{object_name}/{identity}",
    methods=ROUTED_METHODS,
    summary="Get a stock quote",
    operation_id="indexes_get_object_identity",
)
async def get_object_identity(
    request: Request,
    object_name: str,
    identity: str,
    controller: Annotated[IndexesController, Depends(get_indexes_controller)],
) -> Response:
    """Return the cached JSON body for ``object_name``/``identity``."""
    return await _serve(request, controller, object_name, identity)
