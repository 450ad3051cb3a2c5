from __future__ import annotations

from datetime import datetime, timedelta, timezone

from livetrack.app.services.vehicle_registry import VehicleRegistry
from livetrack.domain.models import GeoPoint, VehicleKind, VehiclePatch

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_upsert_creates_with_defaults() -> None:
    reg = VehicleRegistry(clock=_Clock(T0))

    v = reg.upsert(
        "B1", VehiclePatch(position=GeoPoint(lat=1.0, lng=2.0), speed=30.0, route_id="r1")
    )

    assert v.vehicle_id == "B1"
    assert v.kind == VehicleKind.BUS
    assert v.heading == 0.0
    assert v.is_live_published is True
    assert v.last_update_at == T0
    assert reg.get("B1") == v
    assert len(reg) == 1


def test_upsert_replaces_movement_and_merges_metadata() -> None:
    clock = _Clock(T0)
    reg = VehicleRegistry(clock=clock)
    reg.upsert(
        "B1",
        VehiclePatch(
            position=GeoPoint(lat=1.0, lng=2.0),
            speed=30.0,
            heading=90.0,
            route_id="r1",
            kind=VehicleKind.AIRWAY,
            status="En route: A → B",
        ),
    )

    clock.now = T0 + timedelta(seconds=5)
    v = reg.upsert("B1", VehiclePatch(position=GeoPoint(lat=1.5, lng=2.5), speed=0.0))

    assert v.position == GeoPoint(lat=1.5, lng=2.5)
    assert v.speed == 0.0
    # Undefined heading and unset metadata keep the stored values.
    assert v.heading == 90.0
    assert v.route_id == "r1"
    assert v.kind == VehicleKind.AIRWAY
    assert v.status == "En route: A → B"
    assert v.last_update_at == T0 + timedelta(seconds=5)


def test_list_by_route_and_remove() -> None:
    reg = VehicleRegistry(clock=_Clock(T0))
    p = GeoPoint(lat=0.0, lng=0.0)
    reg.upsert("B1", VehiclePatch(position=p, route_id="r1"))
    reg.upsert("B2", VehiclePatch(position=p, route_id="r2"))
    reg.upsert("B3", VehiclePatch(position=p, route_id="r1"))

    assert {v.vehicle_id for v in reg.list_by_route("r1")} == {"B1", "B3"}

    removed = reg.remove("B1")
    assert removed is not None and removed.vehicle_id == "B1"
    assert reg.remove("B1") is None
    assert {v.vehicle_id for v in reg.list_all()} == {"B2", "B3"}


def test_find_stale_before_uses_arrival_time() -> None:
    clock = _Clock(T0)
    reg = VehicleRegistry(clock=clock)
    p = GeoPoint(lat=0.0, lng=0.0)
    reg.upsert("old", VehiclePatch(position=p, timestamp=T0 + timedelta(hours=1)))
    clock.now = T0 + timedelta(minutes=10)
    reg.upsert("fresh", VehiclePatch(position=p))

    stale = reg.find_stale_before(T0 + timedelta(minutes=5))

    assert [v.vehicle_id for v in stale] == ["old"]
