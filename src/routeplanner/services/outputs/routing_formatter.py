"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io
from typing import Sequence

from ...models.domain import Route, Stop
from ..geospatial import haversine_km

MANIFEST_FIELDS = [
    "route_id",
    "date",
    "time_slot",
    "leg",
    "sequence",
    "stop_id",
    "order_id",
    "person_name",
    "product_title",
    "address",
    "latitude",
    "longitude",
    "preferred_time",
    "distance_from_prev_km",
]


def _leg_rows(route: Route, leg: str, stops: Sequence[Stop], start_lat: float, start_lng: float):
    prev_lat, prev_lng = start_lat, start_lng
    for sequence, stop in enumerate(stops, start=1):
        step = haversine_km(prev_lat, prev_lng, stop.location.latitude, stop.location.longitude)
        yield {
            "route_id": route.id or "",
            "date": route.date.isoformat(),
            "time_slot": route.time_slot.value,
            "leg": leg,
            "sequence": sequence,
            "stop_id": stop.id,
            "order_id": stop.order_id,
            "person_name": stop.person_name,
            "product_title": stop.product_title,
            "address": stop.location.address,
            "latitude": stop.location.latitude,
            "longitude": stop.location.longitude,
            "preferred_time": stop.preferred_time or "",
            "distance_from_prev_km": round(step, 3),
        }
        prev_lat, prev_lng = stop.location.latitude, stop.location.longitude


def route_to_manifest_csv(route: Route, depot_lat: float, depot_lng: float) -> str:
    """Driver manifest: every pickup, then every delivery, each leg starting at the depot."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=MANIFEST_FIELDS)
    writer.writeheader()
    for row in _leg_rows(route, "pickup", route.pickup_route, depot_lat, depot_lng):
        writer.writerow(row)
    for row in _leg_rows(route, "delivery", route.delivery_route, depot_lat, depot_lng):
        writer.writerow(row)
    return buffer.getvalue()
