from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, Field

from livetrack.adapters.api.schemas.common import CamelModel, PositionSchema
from livetrack.adapters.api.schemas.routes import RouteSchema
from livetrack.domain.models import VehicleKind

_VEHICLE_ID = AliasChoices("vehicleId", "busId", "vehicle_id")


# Inbound (publisher/viewer -> server)


class InboundMessageSchema(CamelModel):
    event: str = Field(..., min_length=1)
    data: Any = None


class RouteRefSchema(CamelModel):
    route_id: str = Field(..., min_length=1)


class DriverStartedSchema(CamelModel):
    vehicle_id: str = Field(..., min_length=1, validation_alias=_VEHICLE_ID)
    route_name: str | None = None
    kind: VehicleKind = VehicleKind.BUS
    route_id: str | None = None


class LocationUpdateSchema(CamelModel):
    vehicle_id: str = Field(..., min_length=1, validation_alias=_VEHICLE_ID)
    route_id: str = Field(..., min_length=1)
    position: PositionSchema
    heading: float | None = Field(default=None, allow_inf_nan=False)
    speed: float = Field(default=0.0, ge=0.0, allow_inf_nan=False)
    timestamp: datetime | None = None
    start_stop: str | None = None
    end_stop: str | None = None
    kind: VehicleKind | None = None
    status: str | None = None
    is_live_published: bool = True


class DriverDisconnectedSchema(CamelModel):
    vehicle_id: str = Field(..., min_length=1, validation_alias=_VEHICLE_ID)


# Outbound (server -> viewers)


class VehicleSchema(CamelModel):
    vehicle_id: str
    route_id: str | None = None
    kind: Literal["bus", "airway"]
    position: PositionSchema
    heading: float
    speed: float
    is_live_published: bool = True
    status: str | None = None
    timestamp: datetime | None = None
    last_update_at: datetime | None = None


class VehicleLostSchema(CamelModel):
    vehicle_id: str
    route_id: str | None = None
    message: str


class RouteRemovedSchema(CamelModel):
    id: str


class RouteSnapshotSchema(CamelModel):
    route_id: str
    vehicles: list[VehicleSchema]


class DriverStartedReplySchema(CamelModel):
    ok: bool
    route: RouteSchema | None = None
    error: str | None = None


class ErrorReplySchema(CamelModel):
    event: str | None = None
    detail: Any


class VehicleStatusSchema(CamelModel):
    vehicle_id: str
    status: str
    route_id: str | None = None
    position: PositionSchema | None = None
    last_active: datetime | None = None
