from __future__ import annotations

from typing import Any

from livetrack.adapters.api.schemas.common import PositionSchema
from livetrack.adapters.api.schemas.realtime import (
    RouteRemovedSchema,
    RouteSnapshotSchema,
    VehicleLostSchema,
    VehicleSchema,
    VehicleStatusSchema,
)
from livetrack.adapters.api.schemas.routes import (
    RouteSchema,
    RouteSuggestionSchema,
    ScheduleSchema,
    StopRouteRefSchema,
    StopSchema,
    StopUsageSchema,
    SuggestedRouteSchema,
    SuggestionLegSchema,
)
from livetrack.adapters.api.schemas.seats import (
    SeatCounterSchema,
    SeatRecordSchema,
    SeatUpdateSchema,
)
from livetrack.app.services.route_catalog_service import StopUsage
from livetrack.domain.algorithms.route_suggestion import RouteSuggestion, SuggestedRoute
from livetrack.domain.models import (
    EventName,
    GeoPoint,
    OutboundEvent,
    Route,
    RouteRemoved,
    RouteSnapshot,
    SeatChange,
    SeatLayout,
    SeatRecord,
    Stop,
    Vehicle,
    VehicleLost,
    VehicleStatusRecord,
)
from livetrack.domain.models.seats import SINGLE_TIER_COUNTER


def position_to_schema(p: GeoPoint) -> PositionSchema:
    return PositionSchema(lat=p.lat, lng=p.lng)


def stop_to_schema(stop: Stop) -> StopSchema:
    return StopSchema(
        id=stop.id, name=stop.name, lat=stop.location.lat, lng=stop.location.lng
    )


def stop_usage_to_schema(usage: StopUsage) -> StopUsageSchema:
    return StopUsageSchema(
        id=usage.stop.id,
        name=usage.stop.name,
        lat=usage.stop.location.lat,
        lng=usage.stop.location.lng,
        routes=[
            StopRouteRefSchema(route_id=route_id, kind=kind.value)
            for route_id, kind in usage.routes
        ],
    )


def route_to_schema(route: Route) -> RouteSchema:
    schedule = None
    if route.schedule is not None:
        schedule = ScheduleSchema(
            frequency=route.schedule.frequency,
            operating_hours=route.schedule.operating_hours,
            duration=route.schedule.duration,
        )
    return RouteSchema(
        id=route.id,
        name=route.name,
        kind=route.kind.value,
        color=route.color,
        stops=[stop_to_schema(s) for s in route.stops],
        path=[(p.lat, p.lng) for p in route.path],
        schedule=schedule,
        is_live=route.is_live,
        owner_vehicle_id=route.owner_vehicle_id,
    )


def suggested_route_to_schema(s: SuggestedRoute) -> SuggestedRouteSchema:
    return SuggestedRouteSchema(
        route_id=s.route_id,
        route_name=s.route_name,
        route_color=s.route_color,
        is_direct=s.is_direct,
        stops_count=s.stops_count,
        estimated_minutes=s.estimated_minutes,
        legs=[
            SuggestionLegSchema(
                route_id=leg.route_id,
                route_name=leg.route_name,
                route_color=leg.route_color,
                route_kind=leg.route_kind.value,
                start_stop=leg.start_stop,
                end_stop=leg.end_stop,
                stops_count=leg.stops_count,
                estimated_minutes=leg.estimated_minutes,
            )
            for leg in s.legs
        ],
    )


def suggestion_to_schema(suggestion: RouteSuggestion) -> RouteSuggestionSchema:
    best = suggestion.best
    return RouteSuggestionSchema(
        message=suggestion.message,
        requires_transfer=suggestion.requires_transfer,
        best=suggested_route_to_schema(best) if best is not None else None,
        routes=[suggested_route_to_schema(s) for s in suggestion.routes],
    )


def vehicle_to_schema(v: Vehicle) -> VehicleSchema:
    return VehicleSchema(
        vehicle_id=v.vehicle_id,
        route_id=v.route_id,
        kind=v.kind.value,
        position=position_to_schema(v.position),
        heading=v.heading,
        speed=v.speed,
        is_live_published=v.is_live_published,
        status=v.status,
        timestamp=v.timestamp,
        last_update_at=v.last_update_at,
    )


def vehicle_status_to_schema(record: VehicleStatusRecord) -> VehicleStatusSchema:
    return VehicleStatusSchema(
        vehicle_id=record.vehicle_id,
        status=record.status,
        route_id=record.route_id,
        position=position_to_schema(record.position) if record.position else None,
        last_active=record.last_active,
    )


def _seat_fields(record: SeatRecord) -> dict[str, Any]:
    counters = {
        tier: SeatCounterSchema(capacity=c.capacity, available=c.available)
        for tier, c in record.counters.items()
    }
    if record.layout == SeatLayout.SINGLE_TIER:
        return {
            "vehicle_id": record.vehicle_id,
            "route_id": record.route_id,
            "kind": "bus",
            "layout": record.layout.value,
            "seats": counters[SINGLE_TIER_COUNTER],
        }
    return {
        "vehicle_id": record.vehicle_id,
        "route_id": record.route_id,
        "kind": "airway",
        "layout": record.layout.value,
        "seats": counters,
    }


def seat_record_to_schema(record: SeatRecord) -> SeatRecordSchema:
    return SeatRecordSchema(**_seat_fields(record))


def seat_change_to_schema(change: SeatChange) -> SeatUpdateSchema:
    return SeatUpdateSchema(**_seat_fields(change.record), timestamp=change.timestamp)


def _payload(event: OutboundEvent) -> Any:
    payload = event.payload
    if event.name == EventName.LOCATION_UPDATE and isinstance(payload, Vehicle):
        return vehicle_to_schema(payload)
    if event.name == EventName.BUS_DISCONNECTED and isinstance(payload, VehicleLost):
        return VehicleLostSchema(
            vehicle_id=payload.vehicle_id,
            route_id=payload.route_id,
            message=payload.message,
        )
    if event.name == EventName.NEW_ROUTE and isinstance(payload, Route):
        return route_to_schema(payload)
    if event.name == EventName.ROUTE_REMOVED and isinstance(payload, RouteRemoved):
        return RouteRemovedSchema(id=payload.route_id)
    if event.name == EventName.SEAT_UPDATE and isinstance(payload, SeatChange):
        return seat_change_to_schema(payload)
    if event.name == EventName.ACTIVE_ROUTES:
        return [route_to_schema(r) for r in payload]
    if event.name == EventName.ROUTE_SNAPSHOT and isinstance(payload, RouteSnapshot):
        return RouteSnapshotSchema(
            route_id=payload.route_id,
            vehicles=[vehicle_to_schema(v) for v in payload.vehicles],
        )
    raise ValueError(f"Unsupported event payload for {event.name.value}")


def _jsonable(value: Any) -> Any:
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", by_alias=True)
    return value


def message(event: str, data: Any) -> dict[str, Any]:
    """Wire envelope shared by both directions: {"event": name, "data": payload}."""

    return {"event": event, "data": _jsonable(data)}


def event_to_message(event: OutboundEvent) -> dict[str, Any]:
    return message(event.name.value, _payload(event))
