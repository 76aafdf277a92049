"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...models.domain import Route, TimeSlot


@dataclass(slots=True)
class GenerationResult:
    route: Route
    pickup_distance_km: float
    delivery_distance_km: float

    @property
    def route_id(self) -> Optional[str]:
        return self.route.id

    @property
    def message(self) -> str:
        return f"Successfully generated routes for {self.route.date.isoformat()}, {self.route.time_slot.value}"


@dataclass(slots=True)
class ScheduledRun:
    """Outcome of one scheduled trigger; ``result`` is None when nothing ran."""

    time_slot: Optional[TimeSlot]
    result: Optional[GenerationResult] = None

    @property
    def message(self) -> str:
        if self.time_slot is None:
            return "No route optimization needed at this time"
        return f"Scheduled {self.time_slot.value} route optimization"
