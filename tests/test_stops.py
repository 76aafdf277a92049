import logging

from routeplanner.data.records import order_from_row
from routeplanner.models.domain import StopType
from routeplanner.services.routing.stops import extract_stops

from conftest import make_order_row

BUYERS = {"buyer-1": "Bea Buyer"}
SELLERS = {"seller-1": "Sam Seller"}


def _orders(*rows):
    return [order_from_row(row) for row in rows]


def test_extracts_pickup_and_delivery_per_order():
    orders = _orders(make_order_row("o1", preferred_time="10:00"), make_order_row("o2"))

    pickups, deliveries = extract_stops(orders, BUYERS, SELLERS)

    assert [stop.id for stop in pickups] == ["pickup-o1", "pickup-o2"]
    assert [stop.id for stop in deliveries] == ["delivery-o1", "delivery-o2"]
    assert pickups[0].type is StopType.PICKUP
    assert pickups[0].person_name == "Sam Seller"
    assert pickups[0].preferred_time is None
    assert deliveries[0].person_name == "Bea Buyer"
    assert deliveries[0].product_title == "Desk lamp"
    assert deliveries[0].preferred_time == "10:00"


def test_json_and_object_details_yield_identical_delivery_stops():
    as_object = _orders(make_order_row("o1", preferred_time="09:00"))
    as_string = _orders(make_order_row("o1", preferred_time="09:00", details_as_json=True))

    _, from_object = extract_stops(as_object, BUYERS, SELLERS)
    _, from_string = extract_stops(as_string, BUYERS, SELLERS)

    assert from_object == from_string
    assert len(from_object) == 1


def test_unroutable_coordinates_are_dropped():
    orders = _orders(
        make_order_row("null-island", pickup=(0.0, 0.0), delivery=(0.0, 0.0)),
        make_order_row("absent", pickup=None, delivery=None),
        make_order_row("equator", pickup=(0.0, 5.0), delivery=(0.0, 10.0)),
    )

    pickups, deliveries = extract_stops(orders, BUYERS, SELLERS)

    assert [stop.order_id for stop in pickups] == ["equator"]
    assert [stop.order_id for stop in deliveries] == ["equator"]


def test_product_without_coordinates_produces_no_pickup():
    row = make_order_row("o1")
    row["products"]["latitude"] = None

    pickups, deliveries = extract_stops(_orders(row), BUYERS, SELLERS)

    assert pickups == []
    assert len(deliveries) == 1


def test_malformed_details_skip_only_that_delivery(caplog):
    broken = make_order_row("broken")
    broken["delivery_details"] = '{"address": "1 Main St", "latitude": 40.7'

    with caplog.at_level(logging.ERROR):
        pickups, deliveries = extract_stops(_orders(broken, make_order_row("ok")), BUYERS, SELLERS)

    assert [stop.order_id for stop in pickups] == ["broken", "ok"]
    assert [stop.order_id for stop in deliveries] == ["ok"]
    assert "broken" in caplog.text


def test_missing_names_fall_back_to_placeholders():
    row = make_order_row("o1", buyer_id="ghost-buyer", seller_id="ghost-seller", title="")
    row["products"]["location"] = None

    pickups, deliveries = extract_stops(_orders(row), {}, {})

    assert pickups[0].person_name == "Unknown Seller"
    assert pickups[0].product_title == "Unknown Product"
    assert pickups[0].location.address == "Unknown Location"
    assert deliveries[0].person_name == "Unknown Buyer"
