from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from livetrack.app.ports.output import IRouteCatalogRepository
from livetrack.domain.models import (
    FleetVehicle,
    GeoPoint,
    Route,
    RouteCatalog,
    RouteSchedule,
    SeatCounter,
    Stop,
    VehicleKind,
)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[2] / "data" / "routes.json"


def _text(raw: Any) -> str | None:
    value = str(raw).strip() if raw is not None else ""
    return value or None


def _parse_counter(raw: Any) -> SeatCounter | None:
    if not isinstance(raw, dict):
        return None
    try:
        capacity = int(raw["capacity"])
        available = int(raw.get("available", capacity))
    except (TypeError, ValueError, KeyError):
        return None
    return SeatCounter(capacity=capacity, available=max(0, min(available, capacity)))


def _parse_route(raw: dict[str, Any]) -> Route | None:
    route_id = _text(raw.get("id"))
    if not route_id:
        return None

    stops: list[Stop] = []
    for s in raw.get("stops") or []:
        stop_id = _text(s.get("id"))
        if not stop_id:
            continue
        try:
            location = GeoPoint(lat=float(s["lat"]), lng=float(s["lng"]))
        except (TypeError, ValueError, KeyError):
            continue
        stops.append(Stop(id=stop_id, name=_text(s.get("name")) or stop_id, location=location))

    path: list[GeoPoint] = []
    for p in raw.get("path") or []:
        try:
            path.append(GeoPoint(lat=float(p[0]), lng=float(p[1])))
        except (TypeError, ValueError, IndexError):
            continue

    schedule = None
    sched = raw.get("schedule")
    if isinstance(sched, dict):
        schedule = RouteSchedule(
            frequency=_text(sched.get("frequency")),
            operating_hours=_text(sched.get("operatingHours")),
            duration=_text(sched.get("duration")),
        )

    return Route(
        id=route_id,
        name=_text(raw.get("name")) or route_id,
        kind=VehicleKind(raw.get("kind") or "bus"),
        color=_text(raw.get("color")),
        stops=tuple(stops),
        path=tuple(path),
        schedule=schedule,
    )


def _parse_fleet_vehicle(raw: dict[str, Any]) -> FleetVehicle | None:
    vehicle_id = _text(raw.get("vehicleId"))
    route_id = _text(raw.get("routeId"))
    if not vehicle_id or not route_id:
        return None

    seats: dict[str, SeatCounter] = {}
    raw_seats = raw.get("seats") or {}
    if "capacity" in raw_seats:
        counter = _parse_counter(raw_seats)
        if counter is not None:
            seats["seats"] = counter
    else:
        for tier, value in raw_seats.items():
            counter = _parse_counter(value)
            if counter is not None:
                seats[str(tier)] = counter

    return FleetVehicle(
        vehicle_id=vehicle_id,
        route_id=route_id,
        kind=VehicleKind(raw.get("kind") or "bus"),
        seats=seats,
    )


@dataclass(slots=True)
class LocalRouteCatalogRepository(IRouteCatalogRepository):
    """Loads static routes and the scheduled fleet from a JSON file.

    Env vars:
      - ROUTES_PATH: path to the catalog JSON (default: bundled data/routes.json)
    """

    path: str | Path | None = None

    def _path(self) -> Path:
        value = self.path or os.getenv("ROUTES_PATH") or DEFAULT_CATALOG_PATH
        return Path(value)

    def load_catalog(self) -> RouteCatalog:
        with self._path().open("r", encoding="utf-8") as fp:
            data = json.load(fp)

        routes: list[Route] = []
        seen: set[str] = set()
        for raw in data.get("routes") or []:
            route = _parse_route(raw)
            if route is None or route.id in seen:
                continue
            seen.add(route.id)
            routes.append(route)

        fleet = [
            v
            for v in (_parse_fleet_vehicle(raw) for raw in data.get("fleet") or [])
            if v is not None and v.route_id in seen
        ]

        return RouteCatalog(routes=tuple(routes), fleet=tuple(fleet))
