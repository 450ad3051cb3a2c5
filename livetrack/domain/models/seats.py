from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SeatLayout(str, Enum):
    SINGLE_TIER = "single_tier"
    TWO_TIER = "two_tier"


SINGLE_TIER_COUNTER = "seats"
ECONOMY = "economy"
BUSINESS = "business"


@dataclass(frozen=True, slots=True)
class SeatCounter:
    capacity: int
    available: int

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError(f"Invalid capacity: {self.capacity}")
        if not (0 <= self.available <= self.capacity):
            raise ValueError(
                f"Available seats {self.available} outside [0, {self.capacity}]"
            )

    def take_one(self) -> SeatCounter:
        return SeatCounter(capacity=self.capacity, available=self.available - 1)


@dataclass(frozen=True, slots=True)
class SeatRecord:
    vehicle_id: str
    route_id: str | None
    layout: SeatLayout
    counters: dict[str, SeatCounter]

    @property
    def default_tier(self) -> str:
        if self.layout == SeatLayout.SINGLE_TIER:
            return SINGLE_TIER_COUNTER
        return ECONOMY


class BookingOutcome(str, Enum):
    BOOKED = "booked"
    SOLD_OUT = "sold_out"
    UNKNOWN_VEHICLE = "unknown_vehicle"
    UNKNOWN_TIER = "unknown_tier"


@dataclass(frozen=True, slots=True)
class BookingResult:
    outcome: BookingOutcome
    record: SeatRecord | None = None

    @property
    def booked(self) -> bool:
        return self.outcome == BookingOutcome.BOOKED
