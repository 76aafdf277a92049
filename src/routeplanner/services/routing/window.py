"""Order batching windows for the two daily delivery waves."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from ...models.domain import TimeSlot

# Orders placed after this hour roll into the next morning's wave.
EVENING_CUTOFF = time(19, 0)
# Boundary between the morning and afternoon waves.
MIDDAY_CUTOFF = time(13, 0)

# Hours at which the scheduled trigger generates a route, and for which slot.
SCHEDULED_RUNS = {
    MIDDAY_CUTOFF.hour: TimeSlot.MORNING,
    EVENING_CUTOFF.hour: TimeSlot.AFTERNOON,
}


@dataclass(frozen=True, slots=True)
class OrderWindow:
    """Inclusive creation-time range of the orders routed in one slot."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.start.tzinfo)
        return self.start <= moment <= self.end


def order_window(target: date, time_slot: TimeSlot, tz: tzinfo) -> OrderWindow:
    """Return the order window for ``time_slot`` on ``target``.

    morning:   19:00 the previous day through 13:00 on ``target``
    afternoon: 13:00 through 19:00 on ``target``
    """
    if time_slot is TimeSlot.MORNING:
        start = datetime.combine(target - timedelta(days=1), EVENING_CUTOFF, tzinfo=tz)
        end = datetime.combine(target, MIDDAY_CUTOFF, tzinfo=tz)
    else:
        start = datetime.combine(target, MIDDAY_CUTOFF, tzinfo=tz)
        end = datetime.combine(target, EVENING_CUTOFF, tzinfo=tz)
    return OrderWindow(start=start, end=end)


def infer_time_slot(now: datetime) -> TimeSlot:
    """Slot for an unparameterized run: afternoon from 13:00 on, else morning."""
    return TimeSlot.AFTERNOON if now.hour >= MIDDAY_CUTOFF.hour else TimeSlot.MORNING


def scheduled_time_slot(now: datetime) -> Optional[TimeSlot]:
    """Slot the scheduled trigger should generate at ``now``, if any."""
    return SCHEDULED_RUNS.get(now.hour)
