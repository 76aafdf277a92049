"""Routing request/response schemas."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import Route, RouteStatus, Stop, StopType, TimeSlot
from ..services.routing.models import GenerationResult, ScheduledRun


class GenerateRoutesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    time_slot: Optional[TimeSlot] = Field(
        default=None,
        alias="requestedTimeSlot",
        description="Slot to generate. Morning when only a date is given, otherwise inferred from the current hour.",
    )
    date: Optional[dt.date] = Field(
        default=None,
        alias="requestedDate",
        description="Target date (YYYY-MM-DD). Defaults to today.",
    )


class GenerateRoutesResponse(BaseModel):
    success: bool = True
    message: str
    route_id: Optional[str]
    pickup_stops: int
    delivery_stops: int
    date: dt.date
    time_slot: TimeSlot
    pickup_distance_km: float
    delivery_distance_km: float

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GenerateRoutesResponse":
        route = result.route
        return cls(
            message=result.message,
            route_id=result.route_id,
            pickup_stops=len(route.pickup_route),
            delivery_stops=len(route.delivery_route),
            date=route.date,
            time_slot=route.time_slot,
            pickup_distance_km=round(result.pickup_distance_km, 3),
            delivery_distance_km=round(result.delivery_distance_km, 3),
        )


class ScheduledRunResponse(BaseModel):
    success: bool = True
    message: str
    result: Optional[GenerateRoutesResponse] = None

    @classmethod
    def from_run(cls, run: ScheduledRun) -> "ScheduledRunResponse":
        return cls(
            message=run.message,
            result=GenerateRoutesResponse.from_result(run.result) if run.result else None,
        )


class LocationModel(BaseModel):
    address: str
    latitude: float
    longitude: float


class StopModel(BaseModel):
    id: str
    type: StopType
    order_id: str
    location: LocationModel
    person_name: str
    product_title: str
    preferred_time: Optional[str] = None

    @classmethod
    def from_stop(cls, stop: Stop) -> "StopModel":
        return cls(
            id=stop.id,
            type=stop.type,
            order_id=stop.order_id,
            location=LocationModel(
                address=stop.location.address,
                latitude=stop.location.latitude,
                longitude=stop.location.longitude,
            ),
            person_name=stop.person_name,
            product_title=stop.product_title,
            preferred_time=stop.preferred_time,
        )


class RouteModel(BaseModel):
    id: Optional[str]
    date: dt.date
    time_slot: TimeSlot
    status: RouteStatus
    created_at: Optional[dt.datetime] = None
    pickup_route: List[StopModel]
    delivery_route: List[StopModel]

    @classmethod
    def from_route(cls, route: Route) -> "RouteModel":
        return cls(
            id=route.id,
            date=route.date,
            time_slot=route.time_slot,
            status=route.status,
            created_at=route.created_at,
            pickup_route=[StopModel.from_stop(stop) for stop in route.pickup_route],
            delivery_route=[StopModel.from_stop(stop) for stop in route.delivery_route],
        )


class RouteStatusUpdate(BaseModel):
    status: RouteStatus
