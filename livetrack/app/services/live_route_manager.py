from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from livetrack.app.services.topic_router import TopicRouter
from livetrack.app.services.vehicle_registry import VehicleRegistry
from livetrack.domain.exceptions import RouteNotFound, RouteOwnershipError
from livetrack.domain.models import OutboundEvent, Route, VehicleKind

logger = logging.getLogger(__name__)

LIVE_ROUTE_PREFIX = "live_"

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9-]+")


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class LiveRouteState(str, Enum):
    ANNOUNCED = "announced"
    ACTIVE = "active"
    TORN_DOWN = "torn_down"


@dataclass(slots=True)
class _LiveRouteRecord:
    route: Route
    announced_at_ms: int
    state: LiveRouteState = LiveRouteState.ANNOUNCED


@dataclass(slots=True)
class LiveRouteManager:
    """Lifecycle of ephemeral routes owned by a single publisher.

    announced -> active -> torn_down (terminal). Records of torn-down routes
    are kept so their ids are never handed out again.
    """

    router: TopicRouter
    registry: VehicleRegistry
    static_routes: dict[str, Route] = field(default_factory=dict)
    default_color: str = "#22C55E"
    clock_ms: Callable[[], int] = _epoch_ms

    _records: dict[str, _LiveRouteRecord] = field(default_factory=dict, init=False)
    _owned: dict[str, str] = field(default_factory=dict, init=False)

    def announce(
        self, *, vehicle_id: str, name: str | None, kind: VehicleKind
    ) -> Route:
        previous = self._owned.get(vehicle_id)
        if previous is not None:
            logger.info(
                "Vehicle %s re-announced; tearing down %s", vehicle_id, previous
            )
            self.tear_down(previous)

        route_id = self._allocate_id(vehicle_id)
        route = Route(
            id=route_id,
            name=(name or "").strip() or f"Live route {vehicle_id}",
            kind=kind,
            color=self.default_color,
            is_live=True,
            owner_vehicle_id=vehicle_id,
        )
        self._records[route_id] = _LiveRouteRecord(
            route=route, announced_at_ms=self.clock_ms()
        )
        self._owned[vehicle_id] = route_id

        logger.info("Live route %s announced by %s", route_id, vehicle_id)
        self.router.broadcast(OutboundEvent.new_route(route))
        return route

    def claim(self, *, vehicle_id: str, route_id: str) -> Route:
        """Resolve a route a publisher wants to drive on without creating one."""

        static = self.static_routes.get(route_id)
        if static is not None:
            return static

        record = self._records.get(route_id)
        if record is None:
            raise RouteNotFound(f"Unknown route: {route_id}")
        if record.state == LiveRouteState.TORN_DOWN:
            raise RouteOwnershipError(f"Route {route_id} has ended")
        if record.route.owner_vehicle_id != vehicle_id:
            raise RouteOwnershipError(
                f"Route {route_id} is owned by another vehicle"
            )
        return record.route

    def activate(self, route_id: str, vehicle_id: str) -> bool:
        record = self._records.get(route_id)
        if record is None or record.state != LiveRouteState.ANNOUNCED:
            return False
        if record.route.owner_vehicle_id != vehicle_id:
            return False
        record.state = LiveRouteState.ACTIVE
        logger.info("Live route %s is active", route_id)
        return True

    def tear_down(self, route_id: str) -> bool:
        """Idempotent; only the first call has side effects."""

        record = self._records.get(route_id)
        if record is None or record.state == LiveRouteState.TORN_DOWN:
            return False

        record.state = LiveRouteState.TORN_DOWN
        owner = record.route.owner_vehicle_id
        if owner is not None and self._owned.get(owner) == route_id:
            del self._owned[owner]

        if owner is not None:
            vehicle = self.registry.get(owner)
            if vehicle is not None and vehicle.route_id == route_id:
                self.registry.remove(owner)

        logger.info("Live route %s torn down", route_id)
        self.router.broadcast(OutboundEvent.route_removed(route_id))
        self.router.close_topic(route_id)
        return True

    def tear_down_owned_by(self, vehicle_id: str) -> str | None:
        route_id = self._owned.get(vehicle_id)
        if route_id is None:
            return None
        return route_id if self.tear_down(route_id) else None

    def owned_by(self, vehicle_id: str) -> Route | None:
        route_id = self._owned.get(vehicle_id)
        return self._records[route_id].route if route_id else None

    def get(self, route_id: str) -> Route | None:
        record = self._records.get(route_id)
        return record.route if record else None

    def resolve(self, route_id: str) -> Route | None:
        """Static route or non-ended live route with this id."""

        static = self.static_routes.get(route_id)
        if static is not None:
            return static
        record = self._records.get(route_id)
        if record is None or record.state == LiveRouteState.TORN_DOWN:
            return None
        return record.route

    def state(self, route_id: str) -> LiveRouteState | None:
        record = self._records.get(route_id)
        return record.state if record else None

    def is_torn_down(self, route_id: str) -> bool:
        return self.state(route_id) == LiveRouteState.TORN_DOWN

    def is_open(self, route_id: str) -> bool:
        """True for static routes and live routes that have not ended."""

        return self.resolve(route_id) is not None

    def active_routes(self) -> tuple[Route, ...]:
        return tuple(
            r.route
            for r in self._records.values()
            if r.state != LiveRouteState.TORN_DOWN
        )

    def find_unclaimed_before(self, cutoff_ms: int) -> tuple[str, ...]:
        """Announced routes whose owner never started publishing positions."""

        return tuple(
            route_id
            for route_id, r in self._records.items()
            if r.state == LiveRouteState.ANNOUNCED and r.announced_at_ms < cutoff_ms
        )

    def _allocate_id(self, vehicle_id: str) -> str:
        slug = _UNSAFE_ID_CHARS.sub("-", vehicle_id).strip("-") or "vehicle"
        base = f"{LIVE_ROUTE_PREFIX}{slug}_{self.clock_ms()}"
        candidate = base
        n = 1
        while candidate in self.static_routes or candidate in self._records:
            candidate = f"{base}_{n}"
            n += 1
        return candidate
