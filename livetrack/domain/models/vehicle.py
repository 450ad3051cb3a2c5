from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .geo import GeoPoint
from .route import VehicleKind


@dataclass(frozen=True, slots=True)
class Vehicle:
    """Last known state of a tracked vehicle.

    `timestamp` is the sample time reported by the publisher; `last_update_at`
    is when the server received it and drives staleness.
    """

    vehicle_id: str
    route_id: str | None
    kind: VehicleKind
    position: GeoPoint
    heading: float = 0.0
    speed: float = 0.0  # km/h
    is_live_published: bool = True
    status: str | None = None
    timestamp: datetime | None = None
    last_update_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class VehiclePatch:
    """Upsert payload for the vehicle registry.

    Movement fields replace the stored ones. `heading=None` means the heading
    is undefined for this sample and the stored heading is kept. Metadata
    fields left as None keep their stored value.
    """

    position: GeoPoint
    speed: float = 0.0
    heading: float | None = None
    route_id: str | None = None
    kind: VehicleKind | None = None
    status: str | None = None
    is_live_published: bool | None = None
    timestamp: datetime | None = None


@dataclass(frozen=True, slots=True)
class VehicleStatusRecord:
    """Long-lived vehicle status kept by the optional persistence layer."""

    vehicle_id: str
    status: str  # "active" | "idle"
    route_id: str | None = None
    position: GeoPoint | None = None
    last_active: datetime | None = None
