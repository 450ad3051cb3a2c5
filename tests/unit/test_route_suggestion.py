from __future__ import annotations

import pytest

from livetrack.domain.algorithms.route_suggestion import suggest_route
from livetrack.domain.models import GeoPoint, Route, RouteSchedule, Stop, VehicleKind


def _stop(sid: str) -> Stop:
    return Stop(id=sid, name=sid.upper(), location=GeoPoint(lat=0.0, lng=0.0))


S1, S2, S3, S4, S5, S6 = (_stop(f"s{i}") for i in range(1, 7))

LONG_BUS = Route(id="long", name="Long", kind=VehicleKind.BUS, stops=(S1, S2, S3, S4))
SHORT_BUS = Route(id="short", name="Short", kind=VehicleKind.BUS, stops=(S1, S3))
FLIGHT = Route(
    id="air",
    name="Air",
    kind=VehicleKind.AIRWAY,
    stops=(S1, S3),
    schedule=RouteSchedule(duration="2.5 hours"),
)
FEEDER = Route(id="feeder", name="Feeder", kind=VehicleKind.BUS, stops=(S4, S5))
FAST_HOP = Route(id="hop", name="Hop", kind=VehicleKind.BUS, stops=(S2, S5))


def test_schedule_duration_is_parsed_in_minutes() -> None:
    assert RouteSchedule(duration="2.5 hours").duration_minutes == pytest.approx(150.0)
    assert RouteSchedule(duration="3 hours").duration_minutes == pytest.approx(180.0)
    assert RouteSchedule(duration="soon").duration_minutes is None
    assert RouteSchedule().duration_minutes is None


def test_direct_routes_prefer_buses_by_stop_count_then_flights() -> None:
    res = suggest_route(
        (FLIGHT, LONG_BUS, SHORT_BUS), start_stop_id="s1", end_stop_id="s3"
    )

    assert res.requires_transfer is False
    assert [r.route_id for r in res.routes] == ["short", "long", "air"]
    assert res.best.route_id == "short"
    assert res.routes[0].stops_count == 1
    assert res.routes[0].estimated_minutes == pytest.approx(12.0)
    assert res.routes[2].estimated_minutes == pytest.approx(150.0)


def test_direct_route_in_reverse_direction_counts_absolute_stops() -> None:
    res = suggest_route((LONG_BUS,), start_stop_id="s4", end_stop_id="s1")

    leg = res.best.legs[0]
    assert leg.stops_count == 3
    assert (leg.start_stop, leg.end_stop) == ("S4", "S1")


def test_two_leg_transfers_sorted_by_time() -> None:
    res = suggest_route(
        (LONG_BUS, FEEDER, FAST_HOP), start_stop_id="s1", end_stop_id="s5"
    )

    assert res.requires_transfer is True
    assert [r.route_id for r in res.routes] == ["long+hop", "long+feeder"]
    best = res.best
    assert best.is_direct is False
    assert [leg.route_id for leg in best.legs] == ["long", "hop"]
    assert best.estimated_minutes == pytest.approx(24.0)


def test_no_route_found() -> None:
    res = suggest_route((LONG_BUS, FEEDER), start_stop_id="s1", end_stop_id="s6")

    assert res.routes == ()
    assert res.best is None
    assert res.requires_transfer is True
    assert "multi-route" in res.message
