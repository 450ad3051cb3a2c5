from __future__ import annotations

from typing import Literal

from pydantic import Field

from livetrack.adapters.api.schemas.common import CamelModel


class StopSchema(CamelModel):
    id: str
    name: str
    lat: float
    lng: float


class StopRouteRefSchema(CamelModel):
    route_id: str
    kind: Literal["bus", "airway"]


class StopUsageSchema(StopSchema):
    routes: list[StopRouteRefSchema] = []


class ScheduleSchema(CamelModel):
    frequency: str | None = None
    operating_hours: str | None = None
    duration: str | None = None


class RouteSchema(CamelModel):
    id: str
    name: str
    kind: Literal["bus", "airway"]
    color: str | None = None
    stops: list[StopSchema] = []
    path: list[tuple[float, float]] = []
    schedule: ScheduleSchema | None = None
    is_live: bool = False
    owner_vehicle_id: str | None = None


class SuggestRequestSchema(CamelModel):
    start_stop_id: str = Field(..., min_length=1)
    end_stop_id: str = Field(..., min_length=1)


class SuggestionLegSchema(CamelModel):
    route_id: str
    route_name: str
    route_color: str | None = None
    route_kind: Literal["bus", "airway"]
    start_stop: str
    end_stop: str
    stops_count: int
    estimated_minutes: float


class SuggestedRouteSchema(CamelModel):
    route_id: str
    route_name: str
    route_color: str | None = None
    is_direct: bool
    stops_count: int
    estimated_minutes: float
    legs: list[SuggestionLegSchema]


class RouteSuggestionSchema(CamelModel):
    message: str
    requires_transfer: bool = False
    best: SuggestedRouteSchema | None = None
    routes: list[SuggestedRouteSchema] = []
