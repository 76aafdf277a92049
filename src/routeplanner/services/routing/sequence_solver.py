"""Greedy stop sequencing with preferred-time pinning.

Stops that carry a preferred time are visited first, in ascending time order,
regardless of where they are. The remaining stops are chained with a
nearest-neighbour walk that starts at the depot. This is a heuristic: it gives
a reasonable local ordering, not a minimal-distance tour.
"""

from __future__ import annotations

from typing import Sequence

from ...models.domain import Stop
from ..geospatial import haversine_km


def optimize_route(stops: Sequence[Stop], start_lat: float, start_lng: float) -> list[Stop]:
    """Return ``stops`` in visiting order starting from (start_lat, start_lng).

    Preferred times are compared as strings, so they must be zero-padded
    ``HH:MM`` values. Distance ties go to the stop that appears first in the
    input. The result always has the same length as the input.
    """
    if len(stops) <= 1:
        return list(stops)

    scheduled = sorted((stop for stop in stops if stop.preferred_time), key=lambda stop: stop.preferred_time)
    unvisited = [stop for stop in stops if not stop.preferred_time]

    route: list[Stop] = list(scheduled)

    current_lat, current_lng = start_lat, start_lng
    while unvisited:
        nearest_index = 0
        shortest = float("inf")
        for index, stop in enumerate(unvisited):
            distance = haversine_km(current_lat, current_lng, stop.location.latitude, stop.location.longitude)
            if distance < shortest:
                shortest = distance
                nearest_index = index

        next_stop = unvisited.pop(nearest_index)
        route.append(next_stop)
        current_lat, current_lng = next_stop.location.latitude, next_stop.location.longitude

    return route
