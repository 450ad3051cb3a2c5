from __future__ import annotations

from datetime import datetime, timezone

import pytest

from fakes import RecordingSink
from livetrack.app.services.seat_ledger import SeatDefaults, SeatLedger
from livetrack.app.services.topic_router import TopicRouter
from livetrack.domain.models import (
    BookingOutcome,
    EventName,
    FleetVehicle,
    SeatCounter,
    SeatLayout,
    SeatRecord,
    VehicleKind,
)

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _ledger() -> tuple[SeatLedger, RecordingSink]:
    router = TopicRouter()
    sink = RecordingSink()
    router.connect("viewer", sink)
    router.subscribe("viewer", "route_1")
    ledger = SeatLedger(router=router, clock=lambda: T0)
    return ledger, sink


def _bus(available: int = 50) -> SeatRecord:
    return SeatRecord(
        vehicle_id="BUS-1",
        route_id="route_1",
        layout=SeatLayout.SINGLE_TIER,
        counters={"seats": SeatCounter(capacity=50, available=available)},
    )


def _flight() -> SeatRecord:
    return SeatRecord(
        vehicle_id="AI-101",
        route_id="airway_1",
        layout=SeatLayout.TWO_TIER,
        counters={
            "economy": SeatCounter(capacity=120, available=45),
            "business": SeatCounter(capacity=30, available=1),
        },
    )


def test_seat_counter_rejects_invalid_state() -> None:
    with pytest.raises(ValueError):
        SeatCounter(capacity=50, available=51)
    with pytest.raises(ValueError):
        SeatCounter(capacity=50, available=-1)


def test_fifty_first_booking_is_a_no_op() -> None:
    ledger, sink = _ledger()
    ledger.seed([_bus()])

    results = [ledger.book("BUS-1") for _ in range(50)]
    assert all(r.booked for r in results)

    last = ledger.book("BUS-1")

    assert last.booked is False
    assert last.outcome == BookingOutcome.SOLD_OUT
    assert ledger.snapshot("BUS-1").counters["seats"].available == 0
    # One update per successful booking, none for the sold-out attempt.
    assert sink.names() == [EventName.SEAT_UPDATE] * 50


def test_booking_publishes_updated_record_on_route_topic() -> None:
    ledger, sink = _ledger()
    ledger.seed([_bus(available=32)])

    result = ledger.book("BUS-1", "business")  # class hint ignored for buses

    assert result.outcome == BookingOutcome.BOOKED
    assert result.record.counters["seats"].available == 31
    change = sink.events[0].payload
    assert change.record == result.record
    assert change.timestamp == T0


def test_two_tier_defaults_to_economy_and_accepts_class_hint() -> None:
    ledger, _ = _ledger()
    ledger.seed([_flight()])

    assert ledger.book("AI-101").record.counters["economy"].available == 44
    assert ledger.book("AI-101", " Business ").record.counters["business"].available == 0
    assert ledger.book("AI-101", "business").outcome == BookingOutcome.SOLD_OUT
    assert ledger.book("AI-101", "first").outcome == BookingOutcome.UNKNOWN_TIER


def test_unknown_vehicle_is_reported_not_raised() -> None:
    ledger, sink = _ledger()

    result = ledger.book("ghost")

    assert result.outcome == BookingOutcome.UNKNOWN_VEHICLE
    assert result.record is None
    assert sink.events == []


def test_seed_from_fleet_fills_missing_counters_from_defaults() -> None:
    ledger, _ = _ledger()
    ledger.seed_from_fleet(
        [
            FleetVehicle(vehicle_id="BUS-9", route_id="route_1", kind=VehicleKind.BUS),
            FleetVehicle(
                vehicle_id="FL-9",
                route_id="airway_1",
                kind=VehicleKind.AIRWAY,
                seats={"business": SeatCounter(capacity=20, available=3)},
            ),
        ],
        SeatDefaults(bus_capacity=40, economy_capacity=100, business_capacity=10),
    )

    bus = ledger.snapshot("BUS-9")
    flight = ledger.snapshot("FL-9")

    assert bus.layout == SeatLayout.SINGLE_TIER
    assert bus.counters["seats"] == SeatCounter(capacity=40, available=40)
    assert flight.layout == SeatLayout.TWO_TIER
    assert flight.counters["economy"] == SeatCounter(capacity=100, available=100)
    assert flight.counters["business"] == SeatCounter(capacity=20, available=3)
    assert [r.vehicle_id for r in ledger.snapshot_by_route("route_1")] == ["BUS-9"]
    assert len(ledger.snapshot_all()) == 2
