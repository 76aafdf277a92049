"""Route generation endpoints (manual trigger, cron trigger and scheduler)."""

from __future__ import annotations

import logging
import traceback
from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from ...config import Settings
from ...persistence.database import RouteStore
from ...schemas.routing import GenerateRoutesRequest, GenerateRoutesResponse, ScheduledRunResponse
from ...services.routing.service import generate_routes, run_scheduled
from ..dependencies import get_app_settings, get_route_store

router = APIRouter(prefix="/route-optimization", tags=["route-optimization"])
scheduler_router = APIRouter(prefix="/route-scheduler", tags=["route-optimization"])


def internal_error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "details": str(exc),
            "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        },
    )


def _generate(
    store: RouteStore,
    settings: Settings,
    payload: Optional[GenerateRoutesRequest],
):
    try:
        result = generate_routes(
            store,
            settings,
            time_slot=payload.time_slot if payload else None,
            target_date=payload.date if payload else None,
        )
    except Exception as exc:
        logging.exception(f"Error in route optimization: {exc}")
        return internal_error_response(exc)
    return GenerateRoutesResponse.from_result(result)


@router.post("/generate-routes", response_model=GenerateRoutesResponse, status_code=status.HTTP_200_OK)
def generate(
    payload: Optional[GenerateRoutesRequest] = Body(default=None),
    store: RouteStore = Depends(get_route_store),
    settings: Settings = Depends(get_app_settings),
):
    """Generate routes for the requested slot and date (both optional)."""
    return _generate(store, settings, payload)


@router.get("", response_model=GenerateRoutesResponse, status_code=status.HTTP_200_OK)
@router.get("/generate-routes", response_model=GenerateRoutesResponse, status_code=status.HTTP_200_OK)
def generate_for_current_slot(
    store: RouteStore = Depends(get_route_store),
    settings: Settings = Depends(get_app_settings),
):
    """Cron entry point: the slot and date come from the current time."""
    return _generate(store, settings, None)


@scheduler_router.post("", response_model=ScheduledRunResponse, status_code=status.HTTP_200_OK)
@scheduler_router.get("", response_model=ScheduledRunResponse, status_code=status.HTTP_200_OK)
def scheduled_run(
    store: RouteStore = Depends(get_route_store),
    settings: Settings = Depends(get_app_settings),
):
    """Run the wave that is due at this hour (13:00 morning, 19:00 afternoon)."""
    try:
        run = run_scheduled(store, settings)
    except Exception as exc:
        logging.exception(f"Error in route scheduler: {exc}")
        return internal_error_response(exc)
    return ScheduledRunResponse.from_run(run)
