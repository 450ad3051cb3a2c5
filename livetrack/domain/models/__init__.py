from .catalog import FleetVehicle, RouteCatalog
from .events import (
    EventName,
    OutboundEvent,
    RouteRemoved,
    RouteSnapshot,
    SeatChange,
    VehicleLost,
)
from .geo import GeoPoint
from .route import Route, RouteSchedule, VehicleKind
from .seats import (
    BookingOutcome,
    BookingResult,
    SeatCounter,
    SeatLayout,
    SeatRecord,
)
from .stop import Stop
from .vehicle import Vehicle, VehiclePatch, VehicleStatusRecord

__all__ = [
    "BookingOutcome",
    "BookingResult",
    "EventName",
    "FleetVehicle",
    "GeoPoint",
    "OutboundEvent",
    "Route",
    "RouteCatalog",
    "RouteRemoved",
    "RouteSchedule",
    "RouteSnapshot",
    "SeatChange",
    "SeatCounter",
    "SeatLayout",
    "SeatRecord",
    "Stop",
    "Vehicle",
    "VehicleKind",
    "VehicleLost",
    "VehiclePatch",
    "VehicleStatusRecord",
]
