"""Coercion between stored rows and domain models.

The orders and delivery_routes tables keep semi-structured JSON columns
(``delivery_details``, ``pickup_route``, ``delivery_route``). Everything read
from them passes through this module once, so the rest of the code only ever
sees the dataclasses in ``models.domain``.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import asdict
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from ..models.domain import (
    DeliveryDetails,
    Location,
    Order,
    Product,
    Route,
    RouteStatus,
    Stop,
    StopType,
    TimeSlot,
)

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def _coerce_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_preferred_time(value: Any) -> Optional[str]:
    """Return a zero-padded 24h ``HH:MM`` string, or None.

    ``"9:00"`` and ``"09:00:00"`` both become ``"09:00"``. Values that are not
    a time of day are logged and dropped so the stop is routed as unscheduled.
    """
    text = _coerce_str(value)
    if text is None:
        return None
    match = _TIME_PATTERN.match(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour < 24 and minute < 60:
            return f"{hour:02d}:{minute:02d}"
    logging.warning(f"Ignoring unrecognised preferred_time {text!r}; expected HH:MM")
    return None


def parse_delivery_details(raw: Any, order_id: str = "") -> Optional[DeliveryDetails]:
    """Normalize a delivery_details column into ``DeliveryDetails``.

    The column may hold a JSON string or an already decoded object. Malformed
    JSON is logged and yields None.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw, parse_constant=_reject_constant)
        except ValueError as exc:
            logging.error(f"Error parsing delivery details for order {order_id}: {exc}")
            return None
    if not isinstance(raw, Mapping):
        logging.error(
            f"Error parsing delivery details for order {order_id}: "
            f"expected an object, got {type(raw).__name__}"
        )
        return None
    return DeliveryDetails(
        address=_coerce_str(raw.get("address")),
        latitude=_coerce_float(raw.get("latitude")),
        longitude=_coerce_float(raw.get("longitude")),
        preferred_time=normalize_preferred_time(raw.get("preferred_time")),
    )


def product_from_row(row: Any) -> Optional[Product]:
    if not isinstance(row, Mapping):
        return None
    return Product(
        id=str(row.get("id") or ""),
        title=_coerce_str(row.get("title")),
        location=_coerce_str(row.get("location")),
        latitude=_coerce_float(row.get("latitude")),
        longitude=_coerce_float(row.get("longitude")),
    )


def order_from_row(row: Mapping[str, Any]) -> Order:
    """Build an ``Order`` from an orders row with the product embedded as ``products``."""
    order_id = str(row.get("id") or "")
    return Order(
        id=order_id,
        created_at=str(row.get("created_at") or ""),
        status=str(row.get("status") or ""),
        buyer_id=_coerce_str(row.get("buyer_id")),
        seller_id=_coerce_str(row.get("seller_id")),
        product=product_from_row(row.get("products")),
        delivery_details=parse_delivery_details(row.get("delivery_details"), order_id=order_id),
    )


def stop_to_record(stop: Stop) -> dict[str, Any]:
    """Serialize a stop the way driver clients read it from the route columns."""
    return {
        "id": stop.id,
        "type": stop.type.value,
        "orderId": stop.order_id,
        "location": asdict(stop.location),
        "personName": stop.person_name,
        "productTitle": stop.product_title,
        "preferredTime": stop.preferred_time,
    }


def stop_from_record(record: Any) -> Optional[Stop]:
    """Parse a stored stop, returning None when the record is unusable."""
    if not isinstance(record, Mapping):
        return None
    location = record.get("location")
    if not isinstance(location, Mapping):
        return None
    latitude = _coerce_float(location.get("latitude"))
    longitude = _coerce_float(location.get("longitude"))
    if latitude is None or longitude is None:
        return None
    try:
        stop_type = StopType(record.get("type"))
    except ValueError:
        return None
    return Stop(
        id=str(record.get("id") or ""),
        type=stop_type,
        order_id=str(record.get("orderId") or record.get("order_id") or ""),
        location=Location(
            address=_coerce_str(location.get("address")) or "Unknown Location",
            latitude=latitude,
            longitude=longitude,
        ),
        person_name=_coerce_str(record.get("personName") or record.get("person_name")) or "",
        product_title=_coerce_str(record.get("productTitle") or record.get("product_title")) or "",
        preferred_time=_coerce_str(record.get("preferredTime") or record.get("preferred_time")),
    )


def _stops_from_column(value: Any, route_id: Any, column: str) -> list[Stop]:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logging.warning(f"Route {route_id}: {column} is not valid JSON, treating as empty")
            return []
    if not isinstance(value, list):
        return []
    stops: list[Stop] = []
    for index, record in enumerate(value):
        stop = stop_from_record(record)
        if stop is None:
            logging.warning(f"Route {route_id}: skipping malformed stop #{index} in {column}")
            continue
        stops.append(stop)
    return stops


def route_to_record(route: Route) -> dict[str, Any]:
    created_at = route.created_at or datetime.now(timezone.utc)
    return {
        "date": route.date.isoformat(),
        "time_slot": route.time_slot.value,
        "created_at": created_at.isoformat(),
        "pickup_route": [stop_to_record(stop) for stop in route.pickup_route],
        "delivery_route": [stop_to_record(stop) for stop in route.delivery_route],
        "status": route.status.value,
    }


def route_from_row(row: Mapping[str, Any]) -> Route:
    """Coerce a delivery_routes row into a ``Route``.

    Raises:
        ValueError: if the key columns (date, time_slot) are unusable.
    """
    route_id = row.get("id")
    route_date = date.fromisoformat(str(row.get("date"))[:10])
    time_slot = TimeSlot(row.get("time_slot"))
    try:
        status = RouteStatus(row.get("status") or RouteStatus.ACTIVE.value)
    except ValueError:
        logging.warning(f"Route {route_id}: unknown status {row.get('status')!r}, reading as active")
        status = RouteStatus.ACTIVE
    created_at = None
    if row.get("created_at"):
        try:
            created_at = datetime.fromisoformat(str(row["created_at"]).replace("Z", "+00:00"))
        except ValueError:
            created_at = None
    return Route(
        id=str(route_id) if route_id is not None else None,
        date=route_date,
        time_slot=time_slot,
        pickup_route=_stops_from_column(row.get("pickup_route"), route_id, "pickup_route"),
        delivery_route=_stops_from_column(row.get("delivery_route"), route_id, "delivery_route"),
        status=status,
        created_at=created_at,
    )
