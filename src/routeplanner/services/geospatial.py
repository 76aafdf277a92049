"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from ..models.domain import Stop

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def route_distance_km(stops: Sequence[Stop], start_lat: float, start_lng: float) -> float:
    """Total travel distance from the start point through every stop in order."""

    total = 0.0
    current_lat, current_lng = start_lat, start_lng
    for stop in stops:
        total += haversine_km(current_lat, current_lng, stop.location.latitude, stop.location.longitude)
        current_lat, current_lng = stop.location.latitude, stop.location.longitude
    return total
