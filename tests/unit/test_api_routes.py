from __future__ import annotations

import httpx
import pytest

from livetrack.adapters.api.dependencies import (
    build_container,
    get_route_catalog_service,
)
from livetrack.adapters.config import RuntimeConfig
from livetrack.app.services.route_catalog_service import RouteCatalogService
from livetrack.domain.models import (
    GeoPoint,
    Route,
    RouteCatalog,
    Stop,
    VehicleKind,
    VehiclePatch,
)
from livetrack.main import create_app


@pytest.fixture
def app():
    return create_app(build_container(RuntimeConfig()))


def _client(app) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.unit
@pytest.mark.anyio
async def test_health(app) -> None:
    async with _client(app) as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_routes_are_served_in_camel_case(app) -> None:
    async with _client(app) as client:
        listing = await client.get("/routes")
        one = await client.get("/routes/airway_1")
        missing = await client.get("/routes/route_99")

    assert listing.status_code == 200
    assert len(listing.json()) == 9

    assert one.status_code == 200
    route = one.json()
    assert route["kind"] == "airway"
    assert route["isLive"] is False
    assert route["ownerVehicleId"] is None
    assert route["schedule"]["operatingHours"] == "6:00 AM - 8:00 PM"
    assert route["schedule"]["duration"] == "2.5 hours"
    assert route["stops"][0] == {
        "id": "stop_21",
        "name": route["stops"][0]["name"],
        "lat": route["stops"][0]["lat"],
        "lng": route["stops"][0]["lng"],
    }
    assert all(len(p) == 2 for p in route["path"])

    assert missing.status_code == 404


@pytest.mark.unit
@pytest.mark.anyio
async def test_stops_are_annotated(app) -> None:
    async with _client(app) as client:
        resp = await client.get("/stops")

    stops = {s["id"]: s for s in resp.json()}
    assert len(stops) == 29
    assert {r["routeId"] for r in stops["stop_21"]["routes"]} == {
        "route_4",
        "airway_1",
        "airway_3",
    }


@pytest.mark.unit
@pytest.mark.anyio
async def test_suggest_route(app) -> None:
    async with _client(app) as client:
        same = await client.post(
            "/routes/suggest", json={"startStopId": "stop_1", "endStopId": "stop_1"}
        )
        direct = await client.post(
            "/routes/suggest", json={"startStopId": "stop_1", "endStopId": "stop_3"}
        )
        invalid = await client.post("/routes/suggest", json={"startStopId": "stop_1"})

    assert same.status_code == 400

    assert direct.status_code == 200
    body = direct.json()
    assert body["requiresTransfer"] is False
    assert body["best"]["routeId"] == "route_1"
    assert body["best"]["estimatedMinutes"] == 24.0
    assert body["best"]["legs"][0]["stopsCount"] == 2

    assert invalid.status_code == 422


@pytest.mark.unit
@pytest.mark.anyio
async def test_optimize_route_path_matches_suggest(app) -> None:
    body = {"startStopId": "stop_1", "endStopId": "stop_16"}
    async with _client(app) as client:
        suggest = await client.post("/routes/suggest", json=body)
        optimize = await client.post("/optimize-route", json=body)
        same = await client.post(
            "/optimize-route", json={"startStopId": "stop_1", "endStopId": "stop_1"}
        )

    assert optimize.status_code == 200
    assert optimize.json() == suggest.json()
    assert same.status_code == 400


@pytest.mark.unit
@pytest.mark.anyio
async def test_suggest_uses_injected_service() -> None:
    stop_a = Stop(id="a", name="A", location=GeoPoint(lat=0.0, lng=0.0))
    stop_b = Stop(id="b", name="B", location=GeoPoint(lat=0.0, lng=1.0))
    catalog = RouteCatalog(
        routes=(Route(id="r", name="R", kind=VehicleKind.BUS, stops=(stop_a, stop_b)),)
    )

    app = create_app(build_container(RuntimeConfig()))
    app.dependency_overrides[get_route_catalog_service] = lambda: RouteCatalogService(
        catalog=catalog
    )

    async with _client(app) as client:
        resp = await client.post(
            "/routes/suggest", json={"startStopId": "a", "endStopId": "b"}
        )

    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json()["best"]["routeId"] == "r"


@pytest.mark.unit
@pytest.mark.anyio
async def test_seats_listing_and_booking(app) -> None:
    async with _client(app) as client:
        by_route = await client.get("/seats", params={"route_id": "airway_1"})
        everything = await client.get("/seats")
        missing = await client.get("/seats/ghost")
        bus = await client.post("/seats/MH-01-BUS-1001/book")
        flight = await client.post("/seats/AI-101/book", json={"tier": "business"})
        unknown = await client.post("/seats/ghost/book", json={})
        bus_after = await client.get("/seats/MH-01-BUS-1001")

    records = by_route.json()
    assert [r["vehicleId"] for r in records] == ["AI-101"]
    assert records[0]["layout"] == "two_tier"
    assert records[0]["seats"]["economy"] == {"capacity": 120, "available": 45}
    assert len(everything.json()) == 11
    assert missing.status_code == 404

    assert bus.json()["booked"] is True
    assert bus.json()["record"]["seats"] == {"capacity": 50, "available": 31}
    assert flight.json()["record"]["seats"]["business"]["available"] == 7
    assert unknown.json() == {
        "booked": False,
        "outcome": "unknown_vehicle",
        "record": None,
    }
    assert bus_after.json()["seats"]["available"] == 31


@pytest.mark.unit
@pytest.mark.anyio
async def test_vehicles_and_status() -> None:
    container = build_container(RuntimeConfig())
    container.registry.upsert(
        "B1",
        VehiclePatch(position=GeoPoint(lat=19.0, lng=72.8), speed=20.0, route_id="route_1"),
    )
    app = create_app(container)

    async with _client(app) as client:
        all_vehicles = await client.get("/vehicles")
        other_route = await client.get("/vehicles", params={"route_id": "route_2"})
        status = await client.get("/vehicles/B1/status")
        missing = await client.get("/vehicles/ghost/status")

    assert [v["vehicleId"] for v in all_vehicles.json()] == ["B1"]
    assert all_vehicles.json()[0]["position"] == {"lat": 19.0, "lng": 72.8}
    assert other_route.json() == []
    assert status.json()["status"] == "active"
    assert status.json()["routeId"] == "route_1"
    assert missing.status_code == 404
