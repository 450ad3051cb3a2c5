from __future__ import annotations

from datetime import datetime
from typing import Literal

from livetrack.adapters.api.schemas.common import CamelModel


class SeatCounterSchema(CamelModel):
    capacity: int
    available: int


class SeatRecordSchema(CamelModel):
    vehicle_id: str
    route_id: str | None = None
    kind: Literal["bus", "airway"]
    layout: Literal["single_tier", "two_tier"]
    # Single-tier: {capacity, available}; two-tier: {economy: {...}, business: {...}}.
    seats: SeatCounterSchema | dict[str, SeatCounterSchema]


class SeatUpdateSchema(SeatRecordSchema):
    timestamp: datetime


class BookingRequestSchema(CamelModel):
    tier: str | None = None


class BookingResponseSchema(CamelModel):
    booked: bool
    outcome: Literal["booked", "sold_out", "unknown_vehicle", "unknown_tier"]
    record: SeatRecordSchema | None = None
