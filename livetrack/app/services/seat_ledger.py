from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Iterable

from livetrack.app.services.topic_router import TopicRouter
from livetrack.domain.models import (
    BookingOutcome,
    BookingResult,
    FleetVehicle,
    OutboundEvent,
    SeatChange,
    SeatCounter,
    SeatLayout,
    SeatRecord,
    VehicleKind,
)
from livetrack.domain.models.seats import BUSINESS, ECONOMY, SINGLE_TIER_COUNTER

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class SeatDefaults:
    bus_capacity: int = 50
    economy_capacity: int = 120
    business_capacity: int = 30


def record_for_fleet_vehicle(vehicle: FleetVehicle, defaults: SeatDefaults) -> SeatRecord:
    """Seat layout follows the vehicle kind; missing counters start fully available."""

    if vehicle.kind == VehicleKind.AIRWAY:
        economy = vehicle.seats.get(ECONOMY) or SeatCounter(
            capacity=defaults.economy_capacity, available=defaults.economy_capacity
        )
        business = vehicle.seats.get(BUSINESS) or SeatCounter(
            capacity=defaults.business_capacity, available=defaults.business_capacity
        )
        return SeatRecord(
            vehicle_id=vehicle.vehicle_id,
            route_id=vehicle.route_id,
            layout=SeatLayout.TWO_TIER,
            counters={ECONOMY: economy, BUSINESS: business},
        )

    seats = vehicle.seats.get(SINGLE_TIER_COUNTER) or SeatCounter(
        capacity=defaults.bus_capacity, available=defaults.bus_capacity
    )
    return SeatRecord(
        vehicle_id=vehicle.vehicle_id,
        route_id=vehicle.route_id,
        layout=SeatLayout.SINGLE_TIER,
        counters={SINGLE_TIER_COUNTER: seats},
    )


@dataclass(slots=True)
class SeatLedger:
    """Per-vehicle seat counters.

    Bookings only ever decrement; there is no cancellation/refund operation.
    Every successful booking is published on the vehicle's route topic.
    """

    router: TopicRouter
    clock: Callable[[], datetime] = _utcnow
    _records: dict[str, SeatRecord] = field(default_factory=dict, init=False)

    def seed(self, records: Iterable[SeatRecord]) -> None:
        for record in records:
            self._records[record.vehicle_id] = record

    def seed_from_fleet(
        self, fleet: Iterable[FleetVehicle], defaults: SeatDefaults | None = None
    ) -> None:
        defaults = defaults or SeatDefaults()
        self.seed(record_for_fleet_vehicle(v, defaults) for v in fleet)

    def book(self, vehicle_id: str, tier: str | None = None) -> BookingResult:
        record = self._records.get(vehicle_id)
        if record is None:
            return BookingResult(outcome=BookingOutcome.UNKNOWN_VEHICLE)

        # Single-tier vehicles ignore the class hint.
        if record.layout == SeatLayout.SINGLE_TIER:
            key = SINGLE_TIER_COUNTER
        else:
            key = (tier or record.default_tier).strip().lower()

        counter = record.counters.get(key)
        if counter is None:
            return BookingResult(outcome=BookingOutcome.UNKNOWN_TIER, record=record)
        if counter.available <= 0:
            return BookingResult(outcome=BookingOutcome.SOLD_OUT, record=record)

        counters = dict(record.counters)
        counters[key] = counter.take_one()
        updated = replace(record, counters=counters)
        self._records[vehicle_id] = updated

        logger.info(
            "Booked 1 %s seat on %s; %d left",
            key,
            vehicle_id,
            counters[key].available,
        )
        if updated.route_id:
            self.router.publish(
                updated.route_id,
                OutboundEvent.seat_update(
                    SeatChange(record=updated, timestamp=self.clock())
                ),
            )
        return BookingResult(outcome=BookingOutcome.BOOKED, record=updated)

    def snapshot(self, vehicle_id: str) -> SeatRecord | None:
        return self._records.get(vehicle_id)

    def snapshot_by_route(self, route_id: str) -> tuple[SeatRecord, ...]:
        return tuple(r for r in self._records.values() if r.route_id == route_id)

    def snapshot_all(self) -> tuple[SeatRecord, ...]:
        return tuple(self._records.values())
