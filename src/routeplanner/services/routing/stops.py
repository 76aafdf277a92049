"""Projection of orders into pickup and delivery stops."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ...models.domain import Location, Order, Stop, StopType

UNKNOWN_LOCATION = "Unknown Location"
UNKNOWN_PRODUCT = "Unknown Product"
UNKNOWN_BUYER = "Unknown Buyer"
UNKNOWN_SELLER = "Unknown Seller"


def _is_routable(latitude: Optional[float], longitude: Optional[float]) -> bool:
    # Missing coordinates or (0, 0) mean the address was never geocoded.
    if latitude is None or longitude is None:
        return False
    return not (latitude == 0 and longitude == 0)


def pickup_stop(order: Order, seller_names: Mapping[str, str]) -> Optional[Stop]:
    product = order.product
    if product is None or not _is_routable(product.latitude, product.longitude):
        return None
    return Stop(
        id=f"{StopType.PICKUP.value}-{order.id}",
        type=StopType.PICKUP,
        order_id=order.id,
        location=Location(
            address=product.location or UNKNOWN_LOCATION,
            latitude=product.latitude,
            longitude=product.longitude,
        ),
        person_name=seller_names.get(order.seller_id or "") or UNKNOWN_SELLER,
        product_title=product.title or UNKNOWN_PRODUCT,
        preferred_time=None,
    )


def delivery_stop(order: Order, buyer_names: Mapping[str, str]) -> Optional[Stop]:
    details = order.delivery_details
    if details is None or not _is_routable(details.latitude, details.longitude):
        return None
    return Stop(
        id=f"{StopType.DELIVERY.value}-{order.id}",
        type=StopType.DELIVERY,
        order_id=order.id,
        location=Location(
            address=details.address or UNKNOWN_LOCATION,
            latitude=details.latitude,
            longitude=details.longitude,
        ),
        person_name=buyer_names.get(order.buyer_id or "") or UNKNOWN_BUYER,
        product_title=(order.product.title if order.product else None) or UNKNOWN_PRODUCT,
        preferred_time=details.preferred_time,
    )


def extract_stops(
    orders: Iterable[Order],
    buyer_names: Mapping[str, str],
    seller_names: Mapping[str, str],
) -> tuple[list[Stop], list[Stop]]:
    """Split orders into pickup and delivery stops, keeping the order sequence.

    Orders without usable coordinates for a stop kind contribute no stop of
    that kind. Delivery details were already normalized when the order was
    read, so a malformed column simply arrives here as None.
    """
    pickups: list[Stop] = []
    deliveries: list[Stop] = []
    for order in orders:
        pickup = pickup_stop(order, seller_names)
        if pickup is not None:
            pickups.append(pickup)
        delivery = delivery_stop(order, buyer_names)
        if delivery is not None:
            deliveries.append(delivery)
    return pickups, deliveries
