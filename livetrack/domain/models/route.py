from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .geo import GeoPoint
from .stop import Stop


class VehicleKind(str, Enum):
    BUS = "bus"
    AIRWAY = "airway"


@dataclass(frozen=True, slots=True)
class RouteSchedule:
    """Free-text timetable metadata, as published by the operator."""

    frequency: str | None = None
    operating_hours: str | None = None
    duration: str | None = None  # e.g. "2.5 hours"; set for flights

    @property
    def duration_minutes(self) -> float | None:
        """Leading number of hours as minutes; fractions count ("2.5 hours" is 150)."""

        if not self.duration:
            return None
        head = self.duration.strip().split(" ", 1)[0]
        try:
            return float(head) * 60.0
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class Route:
    id: str
    name: str
    kind: VehicleKind
    color: str | None = None
    stops: tuple[Stop, ...] = ()
    path: tuple[GeoPoint, ...] = ()
    schedule: RouteSchedule | None = None
    is_live: bool = False
    owner_vehicle_id: str | None = None

    def stop_index(self, stop_id: str) -> int | None:
        for i, stop in enumerate(self.stops):
            if stop.id == stop_id:
                return i
        return None
