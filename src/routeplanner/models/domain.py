"""Domain models for orders, stops and delivery routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"


# Orders in these states are never routed.
TERMINAL_ORDER_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"


class StopType(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class RouteStatus(str, Enum):
    ACTIVE = "active"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class Product:
    """Listing an order was placed for; its location is the pickup point."""

    id: str
    title: Optional[str] = None
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(slots=True)
class DeliveryDetails:
    """Canonical shape of an order's delivery_details column."""

    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    preferred_time: Optional[str] = None


@dataclass(slots=True)
class Order:
    """An order as read from the orders table, with its product embedded.

    ``delivery_details`` is None when the column was empty or could not be
    parsed.
    """

    id: str
    created_at: str
    status: str
    buyer_id: Optional[str]
    seller_id: Optional[str]
    product: Optional[Product] = None
    delivery_details: Optional[DeliveryDetails] = None


@dataclass(slots=True)
class Location:
    address: str
    latitude: float
    longitude: float


@dataclass(slots=True)
class Stop:
    """A single pickup or delivery waypoint derived from an order."""

    id: str
    type: StopType
    order_id: str
    location: Location
    person_name: str
    product_title: str
    preferred_time: Optional[str] = None


@dataclass(slots=True)
class Route:
    """Ordered pickup and delivery stops for one (date, time_slot)."""

    date: date
    time_slot: TimeSlot
    pickup_route: List[Stop] = field(default_factory=list)
    delivery_route: List[Stop] = field(default_factory=list)
    status: RouteStatus = RouteStatus.ACTIVE
    created_at: Optional[datetime] = None
    id: Optional[str] = None
