from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from livetrack.adapters.api.dependencies import get_seat_ledger
from livetrack.adapters.api.schemas.seats import (
    BookingRequestSchema,
    BookingResponseSchema,
    SeatRecordSchema,
)
from livetrack.adapters.api.serializers import seat_record_to_schema
from livetrack.app.services.seat_ledger import SeatLedger

router = APIRouter(prefix="/seats", tags=["seats"])


@router.get("", response_model=list[SeatRecordSchema])
async def list_seats(
    route_id: str | None = Query(default=None),
    ledger: SeatLedger = Depends(get_seat_ledger),
) -> list[SeatRecordSchema]:
    records = ledger.snapshot_by_route(route_id) if route_id else ledger.snapshot_all()
    return [seat_record_to_schema(r) for r in records]


@router.get("/{vehicle_id}", response_model=SeatRecordSchema)
async def get_seats(
    vehicle_id: str,
    ledger: SeatLedger = Depends(get_seat_ledger),
) -> SeatRecordSchema:
    record = ledger.snapshot(vehicle_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return seat_record_to_schema(record)


@router.post("/{vehicle_id}/book", response_model=BookingResponseSchema)
async def book_seat(
    vehicle_id: str,
    req: BookingRequestSchema | None = Body(default=None),
    ledger: SeatLedger = Depends(get_seat_ledger),
) -> BookingResponseSchema:
    """Book one seat. Sold-out and unknown ids are reported, not raised."""

    result = ledger.book(vehicle_id, req.tier if req else None)
    return BookingResponseSchema(
        booked=result.booked,
        outcome=result.outcome.value,
        record=seat_record_to_schema(result.record) if result.record else None,
    )
