from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .route import Route
from .seats import SeatRecord
from .vehicle import Vehicle


class EventName(str, Enum):
    LOCATION_UPDATE = "location_update"
    BUS_DISCONNECTED = "bus_disconnected"
    NEW_ROUTE = "new_route"
    ROUTE_REMOVED = "route_removed"
    SEAT_UPDATE = "seat_update"
    ACTIVE_ROUTES = "active_routes"
    ROUTE_SNAPSHOT = "route_snapshot"


@dataclass(frozen=True, slots=True)
class VehicleLost:
    vehicle_id: str
    route_id: str | None
    message: str


@dataclass(frozen=True, slots=True)
class RouteRemoved:
    route_id: str


@dataclass(frozen=True, slots=True)
class SeatChange:
    record: SeatRecord
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class RouteSnapshot:
    route_id: str
    vehicles: tuple[Vehicle, ...]


@dataclass(frozen=True, slots=True)
class OutboundEvent:
    """Server -> viewer event, delivered through the topic router."""

    name: EventName
    payload: Any

    @staticmethod
    def location_update(vehicle: Vehicle) -> OutboundEvent:
        return OutboundEvent(EventName.LOCATION_UPDATE, vehicle)

    @staticmethod
    def bus_disconnected(lost: VehicleLost) -> OutboundEvent:
        return OutboundEvent(EventName.BUS_DISCONNECTED, lost)

    @staticmethod
    def new_route(route: Route) -> OutboundEvent:
        return OutboundEvent(EventName.NEW_ROUTE, route)

    @staticmethod
    def route_removed(route_id: str) -> OutboundEvent:
        return OutboundEvent(EventName.ROUTE_REMOVED, RouteRemoved(route_id=route_id))

    @staticmethod
    def seat_update(change: SeatChange) -> OutboundEvent:
        return OutboundEvent(EventName.SEAT_UPDATE, change)

    @staticmethod
    def active_routes(routes: tuple[Route, ...]) -> OutboundEvent:
        return OutboundEvent(EventName.ACTIVE_ROUTES, routes)

    @staticmethod
    def route_snapshot(snapshot: RouteSnapshot) -> OutboundEvent:
        return OutboundEvent(EventName.ROUTE_SNAPSHOT, snapshot)
