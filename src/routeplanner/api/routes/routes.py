"""Delivery route read and status endpoints used by admin and driver clients."""

from __future__ import annotations

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from ...config import Settings
from ...models.domain import TimeSlot
from ...persistence.database import RouteStore, RouteStoreError
from ...schemas.routing import RouteModel, RouteStatusUpdate
from ...services.outputs.routing_formatter import route_to_manifest_csv
from ..dependencies import get_app_settings, get_route_store

router = APIRouter(prefix="/routes", tags=["routes"])


def _store_failure(exc: RouteStoreError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.get("/recent", response_model=List[RouteModel], status_code=status.HTTP_200_OK)
def recent_routes(
    limit: int | None = Query(default=None, ge=1, le=100, description="Number of routes to return"),
    store: RouteStore = Depends(get_route_store),
    settings: Settings = Depends(get_app_settings),
) -> List[RouteModel]:
    """Most recently generated routes, newest first."""
    try:
        routes = store.list_recent_routes(limit or settings.recent_routes_limit)
    except RouteStoreError as exc:
        raise _store_failure(exc) from exc
    return [RouteModel.from_route(route) for route in routes]


@router.get("/{route_date}/{time_slot}", response_model=RouteModel, status_code=status.HTTP_200_OK)
def get_route(
    route_date: date,
    time_slot: TimeSlot,
    store: RouteStore = Depends(get_route_store),
) -> RouteModel:
    try:
        route = store.get_route(route_date, time_slot)
    except RouteStoreError as exc:
        raise _store_failure(exc) from exc
    if route is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {time_slot.value} route for {route_date.isoformat()}",
        )
    return RouteModel.from_route(route)


@router.get("/{route_date}/{time_slot}/manifest.csv", response_class=PlainTextResponse)
def get_route_manifest(
    route_date: date,
    time_slot: TimeSlot,
    store: RouteStore = Depends(get_route_store),
    settings: Settings = Depends(get_app_settings),
) -> PlainTextResponse:
    """Driver manifest for one route as CSV."""
    try:
        route = store.get_route(route_date, time_slot)
    except RouteStoreError as exc:
        raise _store_failure(exc) from exc
    if route is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {time_slot.value} route for {route_date.isoformat()}",
        )
    content = route_to_manifest_csv(route, settings.depot_latitude, settings.depot_longitude)
    filename = f"route_{route_date.isoformat()}_{time_slot.value}.csv"
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/{route_id}/status", response_model=RouteModel, status_code=status.HTTP_200_OK)
def update_route_status(
    route_id: str,
    payload: RouteStatusUpdate,
    store: RouteStore = Depends(get_route_store),
) -> RouteModel:
    try:
        route = store.update_route_status(route_id, payload.status)
    except RouteStoreError as exc:
        logging.exception(f"Error updating route status: {exc}")
        raise _store_failure(exc) from exc
    if route is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")
    return RouteModel.from_route(route)
