from datetime import date, timezone

import pytest

from routeplanner.models.domain import Route, RouteStatus, TimeSlot
from routeplanner.persistence.database import RouteStore, RouteStoreError
from routeplanner.services.routing.window import order_window

from conftest import FakeSupabase, make_order_row


def test_fetch_orders_filters_window_and_terminal_statuses():
    client = FakeSupabase({"orders": [make_order_row("o1", details_as_json=True)]})
    store = RouteStore(client)
    window = order_window(date(2024, 6, 2), TimeSlot.MORNING, timezone.utc)

    orders = store.fetch_orders(window)

    assert [order.id for order in orders] == ["o1"]
    assert orders[0].delivery_details is not None
    query = client.executed[0]
    assert query.table == "orders"
    assert query.called("gte") == [(("created_at", "2024-06-01T19:00:00+00:00"), {})]
    assert query.called("lte") == [(("created_at", "2024-06-02T13:00:00+00:00"), {})]
    assert query.called("neq") == [(("status", "delivered"), {}), (("status", "cancelled"), {})]
    assert query.called("order") == [(("created_at",), {"desc": False})]


def test_fetch_profile_names_is_one_batched_query():
    client = FakeSupabase(
        {"profiles": [{"id": "b1", "full_name": "Bea"}, {"id": "b2", "full_name": None}]}
    )
    store = RouteStore(client)

    names = store.fetch_profile_names(["b1", "b2", None, "b1"])

    assert names == {"b1": "Bea"}
    assert len(client.executed) == 1
    assert client.executed[0].called("in_") == [(("id", ["b1", "b2"]), {})]


def test_fetch_profile_names_skips_query_without_ids():
    client = FakeSupabase()

    assert RouteStore(client).fetch_profile_names([None, ""]) == {}
    assert client.executed == []


def test_upsert_route_replaces_by_date_and_slot():
    stored_row = {
        "id": "route-1",
        "date": "2024-06-02",
        "time_slot": "morning",
        "status": "active",
        "created_at": "2024-06-02T13:00:05+00:00",
        "pickup_route": [],
        "delivery_route": [],
    }
    client = FakeSupabase({"delivery_routes": [stored_row]})
    route = Route(date=date(2024, 6, 2), time_slot=TimeSlot.MORNING)

    stored = RouteStore(client).upsert_route(route)

    assert stored.id == "route-1"
    (args, kwargs), = client.executed[0].called("upsert")
    assert args[0]["date"] == "2024-06-02"
    assert args[0]["time_slot"] == "morning"
    assert args[0]["status"] == "active"
    assert kwargs == {"on_conflict": "date,time_slot", "ignore_duplicates": False}


def test_upsert_without_returned_row_is_an_error():
    client = FakeSupabase({"delivery_routes": []})

    with pytest.raises(RouteStoreError):
        RouteStore(client).upsert_route(Route(date=date(2024, 6, 2), time_slot=TimeSlot.AFTERNOON))


def test_query_failures_surface_as_route_store_errors():
    client = FakeSupabase()
    client.errors["orders"] = ConnectionError("connection reset")
    window = order_window(date(2024, 6, 2), TimeSlot.AFTERNOON, timezone.utc)

    with pytest.raises(RouteStoreError, match="connection reset"):
        RouteStore(client).fetch_orders(window)


def test_get_route_returns_none_when_missing():
    client = FakeSupabase({"delivery_routes": []})

    assert RouteStore(client).get_route(date(2024, 6, 2), TimeSlot.MORNING) is None
    assert client.executed[0].called("eq") == [(("date", "2024-06-02"), {}), (("time_slot", "morning"), {})]


def test_list_recent_routes_skips_unreadable_rows():
    client = FakeSupabase(
        {
            "delivery_routes": [
                {"id": "r2", "date": "2024-06-02", "time_slot": "afternoon", "status": "active"},
                {"id": "r1", "date": "not-a-date", "time_slot": "morning"},
            ]
        }
    )

    routes = RouteStore(client).list_recent_routes(5)

    assert [route.id for route in routes] == ["r2"]
    assert client.executed[0].called("order") == [(("created_at",), {"desc": True})]
    assert client.executed[0].called("limit") == [((5,), {})]


def test_update_route_status():
    client = FakeSupabase(
        {"delivery_routes": [{"id": "r1", "date": "2024-06-02", "time_slot": "morning", "status": "completed"}]}
    )

    route = RouteStore(client).update_route_status("r1", RouteStatus.COMPLETED)

    assert route is not None and route.status is RouteStatus.COMPLETED
    (args, _), = client.executed[0].called("update")
    assert args[0]["status"] == "completed"
    assert "updated_at" in args[0]
