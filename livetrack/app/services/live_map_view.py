from __future__ import annotations

import logging
from dataclasses import dataclass, field

from livetrack.app.services.position_interpolator import PositionInterpolator
from livetrack.domain.models import (
    EventName,
    OutboundEvent,
    Route,
    SeatRecord,
    Vehicle,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LiveMapView:
    """Headless viewer state fed by outbound realtime events.

    Keeps the route picker, vehicle list and seat counters current and hands
    every position sample to the interpolator for smooth display.
    """

    interpolator: PositionInterpolator
    routes: dict[str, Route] = field(default_factory=dict)
    vehicles: dict[str, Vehicle] = field(default_factory=dict)
    seats: dict[str, SeatRecord] = field(default_factory=dict)

    def apply(self, event: OutboundEvent) -> None:
        payload = event.payload
        if event.name == EventName.LOCATION_UPDATE:
            self._track(payload)
        elif event.name == EventName.ROUTE_SNAPSHOT:
            # The snapshot is the whole route: drop vehicles it no longer lists.
            current = {v.vehicle_id for v in payload.vehicles}
            for vehicle_id in [
                v.vehicle_id
                for v in self.vehicles.values()
                if v.route_id == payload.route_id and v.vehicle_id not in current
            ]:
                self._forget(vehicle_id)
            for vehicle in payload.vehicles:
                self._track(vehicle)
        elif event.name == EventName.BUS_DISCONNECTED:
            self._forget(payload.vehicle_id)
        elif event.name == EventName.NEW_ROUTE:
            self.routes[payload.id] = payload
        elif event.name == EventName.ACTIVE_ROUTES:
            for route in payload:
                self.routes[route.id] = route
        elif event.name == EventName.ROUTE_REMOVED:
            self.routes.pop(payload.route_id, None)
            for vehicle_id in [
                v.vehicle_id
                for v in self.vehicles.values()
                if v.route_id == payload.route_id
            ]:
                self._forget(vehicle_id)
        elif event.name == EventName.SEAT_UPDATE:
            self.seats[payload.record.vehicle_id] = payload.record
        else:
            logger.debug("Ignoring event %s", event.name)

    def close(self) -> None:
        self.interpolator.close()
        self.vehicles.clear()

    def _track(self, vehicle: Vehicle) -> None:
        self.vehicles[vehicle.vehicle_id] = vehicle
        self.interpolator.push(
            vehicle.vehicle_id,
            vehicle.position,
            heading=vehicle.heading,
            speed_kmh=vehicle.speed,
        )

    def _forget(self, vehicle_id: str) -> None:
        self.vehicles.pop(vehicle_id, None)
        self.interpolator.remove(vehicle_id)
