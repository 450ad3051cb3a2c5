from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable

from livetrack.domain.models import Vehicle, VehicleKind, VehiclePatch


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class VehicleRegistry:
    """Authoritative in-memory map of vehicle id -> last known state.

    Not thread-safe: all calls are expected on the event loop thread.
    Arrival order is trusted as temporal order (no sequence numbers).
    """

    clock: Callable[[], datetime] = _utcnow
    _vehicles: dict[str, Vehicle] = field(default_factory=dict, init=False)

    def upsert(self, vehicle_id: str, patch: VehiclePatch) -> Vehicle:
        now = self.clock()
        prev = self._vehicles.get(vehicle_id)

        if prev is None:
            vehicle = Vehicle(
                vehicle_id=vehicle_id,
                route_id=patch.route_id,
                kind=patch.kind or VehicleKind.BUS,
                position=patch.position,
                heading=patch.heading if patch.heading is not None else 0.0,
                speed=float(patch.speed),
                is_live_published=(
                    patch.is_live_published
                    if patch.is_live_published is not None
                    else True
                ),
                status=patch.status,
                timestamp=patch.timestamp,
                last_update_at=now,
            )
        else:
            vehicle = replace(
                prev,
                position=patch.position,
                speed=float(patch.speed),
                heading=patch.heading if patch.heading is not None else prev.heading,
                route_id=patch.route_id if patch.route_id is not None else prev.route_id,
                kind=patch.kind or prev.kind,
                status=patch.status if patch.status is not None else prev.status,
                is_live_published=(
                    patch.is_live_published
                    if patch.is_live_published is not None
                    else prev.is_live_published
                ),
                timestamp=patch.timestamp or prev.timestamp,
                last_update_at=now,
            )

        self._vehicles[vehicle_id] = vehicle
        return vehicle

    def remove(self, vehicle_id: str) -> Vehicle | None:
        return self._vehicles.pop(vehicle_id, None)

    def get(self, vehicle_id: str) -> Vehicle | None:
        return self._vehicles.get(vehicle_id)

    def list_all(self) -> tuple[Vehicle, ...]:
        return tuple(self._vehicles.values())

    def list_by_route(self, route_id: str) -> tuple[Vehicle, ...]:
        return tuple(v for v in self._vehicles.values() if v.route_id == route_id)

    def find_stale_before(self, cutoff: datetime) -> tuple[Vehicle, ...]:
        return tuple(
            v
            for v in self._vehicles.values()
            if v.last_update_at is not None and v.last_update_at < cutoff
        )

    def __len__(self) -> int:
        return len(self._vehicles)
