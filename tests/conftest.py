from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Any, Iterable, Optional

import pytest

from routeplanner.config import Settings
from routeplanner.data.records import order_from_row, route_from_row, route_to_record
from routeplanner.models.domain import TERMINAL_ORDER_STATUSES, Route, RouteStatus, TimeSlot
from routeplanner.persistence.database import RouteStoreError
from routeplanner.services.routing.window import OrderWindow


def make_order_row(
    order_id: str,
    *,
    created_at: str = "2024-06-02T09:00:00+00:00",
    status: str = "pending",
    pickup: Optional[tuple[float, float]] = (40.71, -74.0),
    delivery: Optional[tuple[float, float]] = (40.72, -74.01),
    preferred_time: Optional[str] = None,
    details_as_json: bool = False,
    buyer_id: str = "buyer-1",
    seller_id: str = "seller-1",
    title: str = "Desk lamp",
) -> dict[str, Any]:
    product = None
    if pickup is not None:
        product = {
            "id": f"product-{order_id}",
            "title": title,
            "location": f"Seller street {order_id}",
            "latitude": pickup[0],
            "longitude": pickup[1],
        }
    details: Any = None
    if delivery is not None:
        details = {
            "address": f"Buyer street {order_id}",
            "latitude": delivery[0],
            "longitude": delivery[1],
            "preferred_time": preferred_time,
        }
        if details_as_json:
            details = json.dumps(details)
    return {
        "id": order_id,
        "created_at": created_at,
        "status": status,
        "products": product,
        "delivery_details": details,
        "buyer_id": buyer_id,
        "seller_id": seller_id,
    }


class InMemoryRouteStore:
    """Stand-in for RouteStore that keeps rows in memory."""

    def __init__(self, orders: Iterable[dict] = (), profiles: Optional[dict[str, str]] = None) -> None:
        self.order_rows = list(orders)
        self.profiles = dict(profiles or {})
        self.route_rows: dict[tuple[str, str], dict[str, Any]] = {}
        self.profile_queries: list[list[str]] = []
        self.fail_on: set[str] = set()

    def _check(self, action: str) -> None:
        if action in self.fail_on:
            raise RouteStoreError(f"Failed to {action}: simulated outage")

    def fetch_orders(self, window: OrderWindow):
        self._check("fetch orders")
        terminal = {status.value for status in TERMINAL_ORDER_STATUSES}
        rows = [
            row
            for row in self.order_rows
            if row["status"] not in terminal and window.contains(datetime.fromisoformat(row["created_at"]))
        ]
        rows.sort(key=lambda row: datetime.fromisoformat(row["created_at"]))
        return [order_from_row(row) for row in rows]

    def fetch_profile_names(self, profile_ids):
        self._check("fetch profiles")
        ids = list(dict.fromkeys(pid for pid in profile_ids if pid))
        self.profile_queries.append(ids)
        return {pid: self.profiles[pid] for pid in ids if pid in self.profiles}

    def upsert_route(self, route: Route) -> Route:
        self._check("save delivery route")
        record = route_to_record(route)
        key = (record["date"], record["time_slot"])
        existing = self.route_rows.get(key)
        record["id"] = existing["id"] if existing else str(uuid.uuid4())
        self.route_rows[key] = record
        return route_from_row(record)

    def get_route(self, route_date, time_slot: TimeSlot):
        row = self.route_rows.get((route_date.isoformat(), time_slot.value))
        return route_from_row(row) if row else None

    def list_recent_routes(self, limit: int = 5):
        rows = sorted(self.route_rows.values(), key=lambda row: row["created_at"], reverse=True)
        return [route_from_row(row) for row in rows[:limit]]

    def update_route_status(self, route_id: str, status: RouteStatus):
        for row in self.route_rows.values():
            if row["id"] == route_id:
                row["status"] = status.value
                return route_from_row(row)
        return None


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Records a PostgREST-style builder chain and returns canned data."""

    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self.client = client
        self.table = table
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return record

    def execute(self) -> FakeResponse:
        self.client.executed.append(self)
        error = self.client.errors.get(self.table)
        if error is not None:
            raise error
        return FakeResponse(self.client.data.get(self.table, []))

    def called(self, name: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for call_name, args, kwargs in self.calls if call_name == name]


class FakeSupabase:
    def __init__(self, data: Optional[dict[str, list]] = None) -> None:
        self.data = dict(data or {})
        self.errors: dict[str, Exception] = {}
        self.executed: list[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        supabase_url="https://example.supabase.co",
        supabase_key="service-role-key",
        depot_latitude=0.0,
        depot_longitude=0.0,
        timezone="UTC",
    )
