from __future__ import annotations

from datetime import datetime, timezone

import pytest

from livetrack.app.services.live_map_view import LiveMapView
from livetrack.app.services.position_interpolator import PositionInterpolator
from livetrack.domain.models import (
    GeoPoint,
    OutboundEvent,
    Route,
    RouteSnapshot,
    SeatChange,
    SeatCounter,
    SeatLayout,
    SeatRecord,
    Vehicle,
    VehicleKind,
    VehicleLost,
)

LIVE = Route(
    id="live_B1_1", name="X", kind=VehicleKind.BUS, is_live=True, owner_vehicle_id="B1"
)


def _vehicle(vehicle_id: str, route_id: str, lng: float) -> Vehicle:
    return Vehicle(
        vehicle_id=vehicle_id,
        route_id=route_id,
        kind=VehicleKind.BUS,
        position=GeoPoint(lat=0.0, lng=lng),
        speed=100.0,
    )


@pytest.fixture
def view(ticker) -> LiveMapView:
    return LiveMapView(interpolator=PositionInterpolator(ticker=ticker))


def test_route_lifecycle_events(view: LiveMapView) -> None:
    static = Route(id="route_1", name="R1", kind=VehicleKind.BUS)

    view.apply(OutboundEvent.active_routes((static,)))
    view.apply(OutboundEvent.new_route(LIVE))
    assert set(view.routes) == {"route_1", LIVE.id}

    view.apply(OutboundEvent.route_removed(LIVE.id))
    assert set(view.routes) == {"route_1"}


def test_location_updates_feed_the_interpolator(view: LiveMapView, ticker) -> None:
    view.apply(OutboundEvent.location_update(_vehicle("B1", LIVE.id, 0.0)))
    view.apply(OutboundEvent.location_update(_vehicle("B1", LIVE.id, 0.001)))

    assert view.vehicles["B1"].position.lng == 0.001
    assert view.interpolator.is_animating("B1")

    ticker.advance(10.0)
    assert view.interpolator.displayed("B1").position.lng == pytest.approx(0.001)


def test_snapshot_and_disconnect(view: LiveMapView, ticker) -> None:
    view.apply(
        OutboundEvent.route_snapshot(
            RouteSnapshot(
                route_id="route_1",
                vehicles=(_vehicle("B1", "route_1", 0.0), _vehicle("B2", "route_1", 1.0)),
            )
        )
    )
    assert set(view.vehicles) == {"B1", "B2"}

    view.apply(
        OutboundEvent.bus_disconnected(
            VehicleLost(vehicle_id="B1", route_id="route_1", message="gone")
        )
    )
    assert set(view.vehicles) == {"B2"}
    assert view.interpolator.displayed("B1") is None


def test_snapshot_replaces_vehicles_of_its_route(view: LiveMapView, ticker) -> None:
    view.apply(OutboundEvent.location_update(_vehicle("B1", "route_1", 0.0)))
    view.apply(OutboundEvent.location_update(_vehicle("B1", "route_1", 0.001)))
    view.apply(OutboundEvent.location_update(_vehicle("B2", "route_1", 1.0)))
    view.apply(OutboundEvent.location_update(_vehicle("B9", "route_2", 2.0)))
    assert ticker.live_handles

    # Resubscribing after B1 left: the snapshot only lists B2.
    view.apply(
        OutboundEvent.route_snapshot(
            RouteSnapshot(route_id="route_1", vehicles=(_vehicle("B2", "route_1", 1.0),))
        )
    )

    assert set(view.vehicles) == {"B2", "B9"}
    assert view.interpolator.displayed("B1") is None
    assert ticker.live_handles == []

    view.apply(OutboundEvent.route_snapshot(RouteSnapshot(route_id="route_1", vehicles=())))
    assert set(view.vehicles) == {"B9"}


def test_route_removed_drops_its_vehicles_and_animations(
    view: LiveMapView, ticker
) -> None:
    view.apply(OutboundEvent.new_route(LIVE))
    view.apply(OutboundEvent.location_update(_vehicle("B1", LIVE.id, 0.0)))
    view.apply(OutboundEvent.location_update(_vehicle("B1", LIVE.id, 0.001)))
    assert ticker.live_handles

    view.apply(OutboundEvent.route_removed(LIVE.id))

    assert view.vehicles == {}
    assert ticker.live_handles == []


def test_seat_updates_and_close(view: LiveMapView, ticker) -> None:
    record = SeatRecord(
        vehicle_id="B1",
        route_id="route_1",
        layout=SeatLayout.SINGLE_TIER,
        counters={"seats": SeatCounter(capacity=50, available=10)},
    )
    view.apply(
        OutboundEvent.seat_update(
            SeatChange(record=record, timestamp=datetime.now(timezone.utc))
        )
    )
    assert view.seats["B1"] == record

    view.apply(OutboundEvent.location_update(_vehicle("B1", "route_1", 0.0)))
    view.apply(OutboundEvent.location_update(_vehicle("B1", "route_1", 0.001)))
    view.close()

    assert view.vehicles == {}
    assert ticker.live_handles == []
