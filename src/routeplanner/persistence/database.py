"""Database persistence for orders, profiles and delivery routes."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from supabase import Client

from ..data.records import order_from_row, route_from_row, route_to_record
from ..models.domain import TERMINAL_ORDER_STATUSES, Order, Route, RouteStatus, TimeSlot
from ..services.routing.window import OrderWindow

ORDER_COLUMNS = (
    "id, created_at, status, "
    "products:product_id(id, title, location, latitude, longitude), "
    "delivery_details, buyer_id, seller_id"
)


class RouteStoreError(RuntimeError):
    """Raised when a query against the hosted store fails."""


class RouteStore:
    """Reads orders and profiles and persists delivery routes through Supabase."""

    orders_table = "orders"
    profiles_table = "profiles"
    routes_table = "delivery_routes"

    def __init__(self, client: Client) -> None:
        self.client = client

    def _execute(self, query: Any, action: str) -> list[dict[str, Any]]:
        try:
            response = query.execute()
        except Exception as exc:
            logging.error(f"Failed to {action}: {exc}")
            raise RouteStoreError(f"Failed to {action}: {exc}") from exc
        return list(response.data or [])

    def fetch_orders(self, window: OrderWindow) -> list[Order]:
        """Orders created inside ``window`` that still need to move, oldest first."""
        query = (
            self.client.table(self.orders_table)
            .select(ORDER_COLUMNS)
            .gte("created_at", window.start.isoformat())
            .lte("created_at", window.end.isoformat())
        )
        for status in TERMINAL_ORDER_STATUSES:
            query = query.neq("status", status.value)
        rows = self._execute(query.order("created_at", desc=False), "fetch orders")
        logging.info(f"Fetched {len(rows)} orders between {window.start.isoformat()} and {window.end.isoformat()}")
        return [order_from_row(row) for row in rows]

    def fetch_profile_names(self, profile_ids: Iterable[Optional[str]]) -> dict[str, str]:
        """Map profile id to display name with one batched query.

        Profiles without a name are left out so callers apply their own fallback.
        """
        unique_ids = list(dict.fromkeys(pid for pid in profile_ids if pid))
        if not unique_ids:
            return {}
        query = self.client.table(self.profiles_table).select("id, full_name").in_("id", unique_ids)
        rows = self._execute(query, "fetch profiles")
        return {str(row["id"]): row["full_name"] for row in rows if row.get("id") and row.get("full_name")}

    def upsert_route(self, route: Route) -> Route:
        """Replace the route stored for (route.date, route.time_slot)."""
        record = route_to_record(route)
        query = self.client.table(self.routes_table).upsert(
            record,
            on_conflict="date,time_slot",
            ignore_duplicates=False,
        )
        rows = self._execute(query, "save delivery route")
        if not rows:
            raise RouteStoreError(
                f"Saving the {route.time_slot.value} route for {route.date.isoformat()} returned no record"
            )
        stored = route_from_row(rows[0])
        logging.info(f"Saved delivery route {stored.id} for {stored.date.isoformat()} ({stored.time_slot.value})")
        return stored

    def get_route(self, route_date: date, time_slot: TimeSlot) -> Optional[Route]:
        query = (
            self.client.table(self.routes_table)
            .select("*")
            .eq("date", route_date.isoformat())
            .eq("time_slot", time_slot.value)
            .limit(1)
        )
        rows = self._execute(query, "fetch delivery route")
        return route_from_row(rows[0]) if rows else None

    def list_recent_routes(self, limit: int = 5) -> list[Route]:
        query = self.client.table(self.routes_table).select("*").order("created_at", desc=True).limit(limit)
        rows = self._execute(query, "list delivery routes")
        routes: list[Route] = []
        for row in rows:
            try:
                routes.append(route_from_row(row))
            except ValueError as e:
                logging.warning(f"Skipping unreadable delivery route {row.get('id', 'unknown')}: {e}")
        return routes

    def update_route_status(self, route_id: str, status: RouteStatus) -> Optional[Route]:
        query = (
            self.client.table(self.routes_table)
            .update({"status": status.value, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", route_id)
        )
        rows = self._execute(query, "update delivery route status")
        if not rows:
            return None
        logging.info(f"Delivery route {route_id} marked {status.value}")
        return route_from_row(rows[0])
