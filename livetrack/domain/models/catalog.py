from __future__ import annotations

from dataclasses import dataclass, field

from .route import Route, VehicleKind
from .seats import SeatCounter


@dataclass(frozen=True, slots=True)
class FleetVehicle:
    """A scheduled vehicle known at startup; used to seed the seat ledger."""

    vehicle_id: str
    route_id: str
    kind: VehicleKind
    seats: dict[str, SeatCounter] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RouteCatalog:
    routes: tuple[Route, ...] = ()
    fleet: tuple[FleetVehicle, ...] = ()

    @property
    def routes_by_id(self) -> dict[str, Route]:
        return {r.id: r for r in self.routes}
