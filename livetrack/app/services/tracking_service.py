from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime

from livetrack.app.ports.output import IEventSink
from livetrack.app.services.live_route_manager import LiveRouteManager
from livetrack.app.services.status_write_behind import StatusWriteBehind
from livetrack.app.services.topic_router import TopicRouter
from livetrack.app.services.vehicle_registry import VehicleRegistry
from livetrack.domain.algorithms.geo_utils import bearing_degrees, normalize_heading
from livetrack.domain.exceptions import TrackingError
from livetrack.domain.models import (
    GeoPoint,
    OutboundEvent,
    Route,
    RouteSnapshot,
    Vehicle,
    VehicleKind,
    VehicleLost,
    VehiclePatch,
    VehicleStatusRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LocationUpdate:
    """A single position sample from a publisher."""

    vehicle_id: str
    route_id: str
    position: GeoPoint
    speed: float = 0.0
    heading: float | None = None
    timestamp: datetime | None = None
    start_stop: str | None = None
    end_stop: str | None = None
    kind: VehicleKind | None = None
    status: str | None = None
    is_live_published: bool = True


@dataclass(frozen=True, slots=True)
class DriverStartResult:
    ok: bool
    route: Route | None = None
    error: str | None = None


@dataclass(slots=True)
class TrackingService:
    """Use cases behind the realtime stream.

    Publishers (drivers) announce routes and stream positions; viewers
    subscribe to route topics. Every way a vehicle can go away (explicit
    disconnect, closed socket, staleness) ends in `evict_vehicle`.
    """

    registry: VehicleRegistry
    router: TopicRouter
    live_routes: LiveRouteManager
    status_writer: StatusWriteBehind | None = None

    _vehicles_by_connection: dict[str, set[str]] = field(
        default_factory=dict, init=False
    )
    _connection_by_vehicle: dict[str, str] = field(default_factory=dict, init=False)

    def open_connection(self, connection_id: str, sink: IEventSink) -> None:
        self.router.connect(connection_id, sink)
        logger.info("Client connected: %s", connection_id)
        self.router.send(
            connection_id, OutboundEvent.active_routes(self.live_routes.active_routes())
        )

    def close_connection(self, connection_id: str) -> tuple[str, ...]:
        """Drop the connection; evict every vehicle it was publishing for."""

        self.router.disconnect(connection_id)
        logger.info("Client disconnected: %s", connection_id)

        evicted: list[str] = []
        for vehicle_id in sorted(self._vehicles_by_connection.pop(connection_id, set())):
            if self._connection_by_vehicle.get(vehicle_id) != connection_id:
                continue
            logger.info("Driver %s disconnected (socket closed)", vehicle_id)
            if self.evict_vehicle(
                vehicle_id, message=f"Bus {vehicle_id} has ended their route"
            ):
                evicted.append(vehicle_id)
        return tuple(evicted)

    def subscribe(self, connection_id: str, route_id: str) -> bool:
        if not self.live_routes.is_open(route_id):
            logger.info("Ignoring subscription to unknown/ended route %s", route_id)
            return False
        if not self.router.subscribe(connection_id, route_id):
            return False

        logger.info("Client %s subscribed to route %s", connection_id, route_id)
        snapshot = RouteSnapshot(
            route_id=route_id, vehicles=self.registry.list_by_route(route_id)
        )
        self.router.send(connection_id, OutboundEvent.route_snapshot(snapshot))
        return True

    def unsubscribe(self, connection_id: str, route_id: str) -> bool:
        changed = self.router.unsubscribe(connection_id, route_id)
        if changed:
            logger.info("Client %s unsubscribed from route %s", connection_id, route_id)
        return changed

    def start_driver(
        self,
        connection_id: str | None,
        *,
        vehicle_id: str,
        route_name: str | None = None,
        kind: VehicleKind = VehicleKind.BUS,
        route_id: str | None = None,
    ) -> DriverStartResult:
        if route_id:
            try:
                route = self.live_routes.claim(vehicle_id=vehicle_id, route_id=route_id)
            except TrackingError as exc:
                logger.info("Driver %s rejected: %s", vehicle_id, exc)
                return DriverStartResult(ok=False, error=str(exc))
        else:
            route = self.live_routes.announce(
                vehicle_id=vehicle_id, name=route_name, kind=kind
            )

        if connection_id is not None:
            self._bind(connection_id, vehicle_id)
        return DriverStartResult(ok=True, route=route)

    def update_location(
        self, connection_id: str | None, update: LocationUpdate
    ) -> Vehicle | None:
        route = self.live_routes.resolve(update.route_id)
        if route is None:
            logger.debug(
                "Dropping update for %s on unknown/ended route %s",
                update.vehicle_id,
                update.route_id,
            )
            return None
        if route.is_live and route.owner_vehicle_id != update.vehicle_id:
            logger.info(
                "Dropping update for %s on live route %s owned by %s",
                update.vehicle_id,
                route.id,
                route.owner_vehicle_id,
            )
            return None

        prev = self.registry.get(update.vehicle_id)

        heading = update.heading
        if heading is not None and not math.isfinite(heading):
            logger.debug("Ignoring non-finite heading from %s", update.vehicle_id)
            heading = None
        if heading is not None:
            heading = normalize_heading(heading)
        elif prev is not None:
            # None again (no movement) keeps the stored heading.
            heading = bearing_degrees(prev.position, update.position)

        speed = update.speed if math.isfinite(update.speed) else 0.0

        status = update.status
        if status is None and update.start_stop and update.end_stop:
            status = f"En route: {update.start_stop} → {update.end_stop}"

        vehicle = self.registry.upsert(
            update.vehicle_id,
            VehiclePatch(
                position=update.position,
                speed=speed,
                heading=heading,
                route_id=route.id,
                kind=update.kind or route.kind,
                status=status,
                is_live_published=update.is_live_published,
                timestamp=update.timestamp,
            ),
        )
        if connection_id is not None:
            self._bind(connection_id, update.vehicle_id)

        if prev is not None and prev.route_id and prev.route_id != route.id:
            self.router.publish(
                prev.route_id,
                OutboundEvent.bus_disconnected(
                    VehicleLost(
                        vehicle_id=vehicle.vehicle_id,
                        route_id=prev.route_id,
                        message=f"Bus {vehicle.vehicle_id} switched to another route",
                    )
                ),
            )
            # A live route only exists while its owner drives it.
            owned = self.live_routes.owned_by(vehicle.vehicle_id)
            if owned is not None and owned.id == prev.route_id:
                self.live_routes.tear_down(owned.id)

        if route.is_live:
            self.live_routes.activate(route.id, vehicle.vehicle_id)

        logger.debug(
            "Driver %s location update: %.6f, %.6f speed=%s",
            vehicle.vehicle_id,
            vehicle.position.lat,
            vehicle.position.lng,
            vehicle.speed,
        )
        self.router.publish(route.id, OutboundEvent.location_update(vehicle))
        self._remember_status(vehicle, "active")
        return vehicle

    def disconnect_driver(self, vehicle_id: str) -> bool:
        return self.evict_vehicle(
            vehicle_id, message=f"Bus {vehicle_id} has ended their route"
        )

    def evict_vehicle(self, vehicle_id: str, *, message: str) -> bool:
        """Remove a vehicle and tear down the live route it owns.

        Safe to call repeatedly: once the vehicle and its route are gone
        nothing is emitted again. Returns whether anything was removed.
        """

        vehicle = self.registry.remove(vehicle_id)
        if vehicle is not None and vehicle.route_id:
            self.router.publish(
                vehicle.route_id,
                OutboundEvent.bus_disconnected(
                    VehicleLost(
                        vehicle_id=vehicle_id,
                        route_id=vehicle.route_id,
                        message=message,
                    )
                ),
            )

        torn_down = self.live_routes.tear_down_owned_by(vehicle_id)

        connection_id = self._connection_by_vehicle.pop(vehicle_id, None)
        if connection_id is not None:
            vehicles = self._vehicles_by_connection.get(connection_id)
            if vehicles is not None:
                vehicles.discard(vehicle_id)

        if vehicle is not None:
            logger.info("Vehicle %s removed: %s", vehicle_id, message)
            self._remember_status(vehicle, "idle")
        return vehicle is not None or torn_down is not None

    def _bind(self, connection_id: str, vehicle_id: str) -> None:
        previous = self._connection_by_vehicle.get(vehicle_id)
        if previous == connection_id:
            return
        if previous is not None:
            self._vehicles_by_connection.get(previous, set()).discard(vehicle_id)
        self._connection_by_vehicle[vehicle_id] = connection_id
        self._vehicles_by_connection.setdefault(connection_id, set()).add(vehicle_id)

    def _remember_status(self, vehicle: Vehicle, status: str) -> None:
        if self.status_writer is None:
            return
        self.status_writer.offer(
            VehicleStatusRecord(
                vehicle_id=vehicle.vehicle_id,
                status=status,
                route_id=vehicle.route_id,
                position=vehicle.position,
                last_active=vehicle.last_update_at,
            )
        )
