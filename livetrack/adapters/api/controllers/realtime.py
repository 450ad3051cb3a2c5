from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable
from uuid import uuid4

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
)
from pydantic import ValidationError

from livetrack.adapters.api.dependencies import (
    get_runtime_config,
    get_tracking_service,
    get_vehicle_registry,
    get_vehicle_status_repository,
)
from livetrack.adapters.api.schemas.realtime import (
    DriverDisconnectedSchema,
    DriverStartedReplySchema,
    DriverStartedSchema,
    ErrorReplySchema,
    InboundMessageSchema,
    LocationUpdateSchema,
    RouteRefSchema,
    VehicleSchema,
    VehicleStatusSchema,
)
from livetrack.adapters.api.serializers import (
    event_to_message,
    message,
    route_to_schema,
    vehicle_status_to_schema,
    vehicle_to_schema,
)
from livetrack.adapters.config import RuntimeConfig
from livetrack.app.ports.output import IEventSink, IVehicleStatusRepository
from livetrack.app.services.tracking_service import LocationUpdate, TrackingService
from livetrack.app.services.vehicle_registry import VehicleRegistry
from livetrack.domain.models import GeoPoint, OutboundEvent, VehicleStatusRecord

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

Reply = dict[str, Any] | None


@router.get("/vehicles", response_model=list[VehicleSchema])
async def list_vehicles(
    route_id: str | None = Query(default=None),
    registry: VehicleRegistry = Depends(get_vehicle_registry),
) -> list[VehicleSchema]:
    vehicles = registry.list_by_route(route_id) if route_id else registry.list_all()
    return [vehicle_to_schema(v) for v in vehicles]


@router.get("/vehicles/{vehicle_id}/status", response_model=VehicleStatusSchema)
async def get_vehicle_status(
    vehicle_id: str,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
    repository: IVehicleStatusRepository | None = Depends(
        get_vehicle_status_repository
    ),
) -> VehicleStatusSchema:
    record = None
    if repository is not None:
        record = await asyncio.to_thread(repository.get_status, vehicle_id=vehicle_id)

    # Without persistence only vehicles currently on the air are known.
    if record is None:
        vehicle = registry.get(vehicle_id)
        if vehicle is not None:
            record = VehicleStatusRecord(
                vehicle_id=vehicle.vehicle_id,
                status="active",
                route_id=vehicle.route_id,
                position=vehicle.position,
                last_active=vehicle.last_update_at,
            )

    if record is None:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle_status_to_schema(record)


@dataclass(slots=True)
class QueueEventSink(IEventSink):
    """Serializes events on delivery and hands them to the connection's writer.

    The queue is bounded: while a client is not reading, frames that do not
    fit are dropped (best-effort) instead of piling up in memory.
    """

    queue: asyncio.Queue[dict[str, Any]]
    connection_id: str = ""
    dropped: int = 0

    def deliver(self, event: OutboundEvent) -> None:
        self.push(event_to_message(event))

    def push(self, data: dict[str, Any]) -> bool:
        try:
            self.queue.put_nowait(data)
        except asyncio.QueueFull:
            if self.dropped == 0:
                logger.warning(
                    "Client %s is not keeping up; dropping events",
                    self.connection_id,
                )
            self.dropped += 1
            return False
        return True


def _error(event: str | None, detail: Any) -> dict[str, Any]:
    return message("error", ErrorReplySchema(event=event, detail=detail))


def _validation_detail(exc: ValidationError) -> list[dict[str, Any]]:
    return exc.errors(include_url=False, include_context=False, include_input=False)


def _route_ref(data: Any) -> str:
    if isinstance(data, str):
        data = {"routeId": data.strip()}
    return RouteRefSchema.model_validate(data).route_id


def _on_subscribe(tracking: TrackingService, connection_id: str, data: Any) -> Reply:
    tracking.subscribe(connection_id, _route_ref(data))
    return None


def _on_unsubscribe(tracking: TrackingService, connection_id: str, data: Any) -> Reply:
    tracking.unsubscribe(connection_id, _route_ref(data))
    return None


def _on_driver_started(
    tracking: TrackingService, connection_id: str, data: Any
) -> Reply:
    req = DriverStartedSchema.model_validate(data)
    result = tracking.start_driver(
        connection_id,
        vehicle_id=req.vehicle_id,
        route_name=req.route_name,
        kind=req.kind,
        route_id=req.route_id,
    )
    return message(
        "driver_started",
        DriverStartedReplySchema(
            ok=result.ok,
            route=route_to_schema(result.route) if result.route else None,
            error=result.error,
        ),
    )


def _on_location_update(
    tracking: TrackingService, connection_id: str, data: Any
) -> Reply:
    req = LocationUpdateSchema.model_validate(data)
    tracking.update_location(
        connection_id,
        LocationUpdate(
            vehicle_id=req.vehicle_id,
            route_id=req.route_id,
            position=GeoPoint(lat=req.position.lat, lng=req.position.lng),
            speed=req.speed,
            heading=req.heading,
            timestamp=req.timestamp,
            start_stop=req.start_stop,
            end_stop=req.end_stop,
            kind=req.kind,
            status=req.status,
            is_live_published=req.is_live_published,
        ),
    )
    return None


def _on_driver_disconnected(
    tracking: TrackingService, connection_id: str, data: Any
) -> Reply:
    req = DriverDisconnectedSchema.model_validate(data)
    logger.info("Driver %s disconnected", req.vehicle_id)
    tracking.disconnect_driver(req.vehicle_id)
    return None


_HANDLERS: dict[str, Callable[[TrackingService, str, Any], Reply]] = {
    "subscribe_route": _on_subscribe,
    "unsubscribe_route": _on_unsubscribe,
    "driver_started": _on_driver_started,
    "driver_location_update": _on_location_update,
    "driver_disconnected": _on_driver_disconnected,
}


def handle_message(tracking: TrackingService, connection_id: str, raw: str) -> Reply:
    """Dispatch one inbound frame. Bad input yields an `error` reply, never a raise."""

    try:
        envelope = InboundMessageSchema.model_validate_json(raw)
    except ValidationError as exc:
        return _error(None, _validation_detail(exc))

    handler = _HANDLERS.get(envelope.event)
    if handler is None:
        return _error(envelope.event, f"Unknown event: {envelope.event}")

    try:
        return handler(tracking, connection_id, envelope.data)
    except ValidationError as exc:
        logger.debug("Rejected %s from %s", envelope.event, connection_id)
        return _error(envelope.event, _validation_detail(exc))
    except ValueError as exc:
        logger.info("Rejected %s from %s: %s", envelope.event, connection_id, exc)
        return _error(envelope.event, str(exc))


async def _pump(websocket: WebSocket, queue: asyncio.Queue[dict[str, Any]]) -> None:
    while True:
        data = await queue.get()
        await websocket.send_json(data)


@router.websocket("/ws")
async def realtime_stream(
    websocket: WebSocket,
    tracking: TrackingService = Depends(get_tracking_service),
    config: RuntimeConfig = Depends(get_runtime_config),
) -> None:
    """Bidirectional event stream shared by publishers (drivers) and viewers."""

    await websocket.accept()

    connection_id = uuid4().hex
    queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=config.ws_queue_size)
    sink = QueueEventSink(queue, connection_id=connection_id)
    tracking.open_connection(connection_id, sink)
    writer = asyncio.create_task(_pump(websocket, queue))

    try:
        while True:
            raw = await websocket.receive_text()
            reply = handle_message(tracking, connection_id, raw)
            if reply is not None:
                sink.push(reply)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WebSocket error", extra={"connection_id": connection_id})
    finally:
        tracking.close_connection(connection_id)
        writer.cancel()
        await asyncio.gather(writer, return_exceptions=True)
