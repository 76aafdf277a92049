"""Routing orchestration service."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ...config import Settings
from ...models.domain import Route, RouteStatus, TimeSlot
from ...persistence.database import RouteStore
from ..geospatial import route_distance_km
from .models import GenerationResult, ScheduledRun
from .sequence_solver import optimize_route
from .stops import extract_stops
from .window import infer_time_slot, order_window, scheduled_time_slot


def generate_routes(
    store: RouteStore,
    settings: Settings,
    *,
    time_slot: Optional[TimeSlot] = None,
    target_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> GenerationResult:
    """Build and persist the pickup and delivery routes for one slot.

    Without a slot or a date the slot is inferred from the clock. A date given
    without a slot means the morning wave. Without an explicit date the
    current date in the configured timezone is used. Store errors propagate to
    the caller unchanged.
    """
    now = now or datetime.now(settings.tzinfo)
    if time_slot is None:
        time_slot = TimeSlot.MORNING if target_date is not None else infer_time_slot(now)
    target_date = target_date or now.date()

    window = order_window(target_date, time_slot, settings.tzinfo)
    orders = store.fetch_orders(window)

    buyer_names = store.fetch_profile_names(order.buyer_id for order in orders)
    seller_names = store.fetch_profile_names(order.seller_id for order in orders)

    pickups, deliveries = extract_stops(orders, buyer_names, seller_names)
    dropped_pickups = len(orders) - len(pickups)
    dropped_deliveries = len(orders) - len(deliveries)
    if dropped_pickups or dropped_deliveries:
        logging.info(
            f"Skipped {dropped_pickups} pickup(s) and {dropped_deliveries} delivery stop(s) "
            f"without usable coordinates"
        )

    depot_lat, depot_lng = settings.depot_latitude, settings.depot_longitude
    pickup_route = optimize_route(pickups, depot_lat, depot_lng)
    delivery_route = optimize_route(deliveries, depot_lat, depot_lng)

    route = Route(
        date=target_date,
        time_slot=time_slot,
        pickup_route=pickup_route,
        delivery_route=delivery_route,
        status=RouteStatus.ACTIVE,
        created_at=datetime.now(settings.tzinfo),
    )
    stored = store.upsert_route(route)

    result = GenerationResult(
        route=stored,
        pickup_distance_km=route_distance_km(pickup_route, depot_lat, depot_lng),
        delivery_distance_km=route_distance_km(delivery_route, depot_lat, depot_lng),
    )
    logging.info(
        f"Generated {time_slot.value} route {stored.id} for {target_date.isoformat()}: "
        f"{len(pickup_route)} pickups ({result.pickup_distance_km:.1f} km), "
        f"{len(delivery_route)} deliveries ({result.delivery_distance_km:.1f} km)"
    )
    return result


def run_scheduled(store: RouteStore, settings: Settings, *, now: Optional[datetime] = None) -> ScheduledRun:
    """Generate the route due at the current hour, if any.

    At 13:00 the morning wave for today is generated, at 19:00 the afternoon
    wave. Any other hour is a no-op.
    """
    now = now or datetime.now(settings.tzinfo)
    time_slot = scheduled_time_slot(now)
    if time_slot is None:
        logging.info(f"Current hour is {now.hour}, no route optimization needed")
        return ScheduledRun(time_slot=None)

    logging.info(f"Triggering route optimization for {time_slot.value} slot")
    result = generate_routes(store, settings, time_slot=time_slot, target_date=now.date(), now=now)
    return ScheduledRun(time_slot=time_slot, result=result)
