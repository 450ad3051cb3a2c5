from __future__ import annotations

from dataclasses import dataclass

from livetrack.app.services.live_route_manager import LiveRouteManager
from livetrack.domain.algorithms.route_suggestion import RouteSuggestion, suggest_route
from livetrack.domain.exceptions import RouteNotFound
from livetrack.domain.models import Route, RouteCatalog, Stop, VehicleKind


@dataclass(frozen=True, slots=True)
class StopUsage:
    """A stop together with every (route_id, kind) that serves it."""

    stop: Stop
    routes: tuple[tuple[str, VehicleKind], ...]


@dataclass(slots=True)
class RouteCatalogService:
    """One-shot reads over static routes plus the currently live ones.

    The static catalog is loaded once at startup and never changes.
    """

    catalog: RouteCatalog
    live_routes: LiveRouteManager | None = None

    def list_routes(self) -> tuple[Route, ...]:
        live = self.live_routes.active_routes() if self.live_routes else ()
        return self.catalog.routes + live

    def get_route(self, route_id: str) -> Route:
        for route in self.catalog.routes:
            if route.id == route_id:
                return route
        if self.live_routes is not None:
            route = self.live_routes.resolve(route_id)
            if route is not None:
                return route
        raise RouteNotFound(f"Route not found: {route_id}")

    def list_stops(self) -> tuple[StopUsage, ...]:
        stops: dict[str, Stop] = {}
        usage: dict[str, list[tuple[str, VehicleKind]]] = {}
        for route in self.catalog.routes:
            for stop in route.stops:
                stops.setdefault(stop.id, stop)
                usage.setdefault(stop.id, []).append((route.id, route.kind))

        out = [StopUsage(stop=stops[sid], routes=tuple(refs)) for sid, refs in usage.items()]
        out.sort(key=lambda u: (u.stop.name, u.stop.id))
        return tuple(out)

    def suggest(self, *, start_stop_id: str, end_stop_id: str) -> RouteSuggestion:
        return suggest_route(
            self.catalog.routes,
            start_stop_id=start_stop_id,
            end_stop_id=end_stop_id,
        )
