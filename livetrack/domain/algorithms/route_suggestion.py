from __future__ import annotations

from dataclasses import dataclass

from livetrack.domain.models import Route, VehicleKind

BUS_MINUTES_PER_STOP = 12.0


@dataclass(frozen=True, slots=True)
class SuggestionLeg:
    route_id: str
    route_name: str
    route_color: str | None
    route_kind: VehicleKind
    start_stop: str
    end_stop: str
    stops_count: int
    estimated_minutes: float


@dataclass(frozen=True, slots=True)
class SuggestedRoute:
    route_id: str
    route_name: str
    route_color: str | None
    is_direct: bool
    legs: tuple[SuggestionLeg, ...]

    @property
    def stops_count(self) -> int:
        return sum(leg.stops_count for leg in self.legs)

    @property
    def estimated_minutes(self) -> float:
        return float(sum(leg.estimated_minutes for leg in self.legs))


@dataclass(frozen=True, slots=True)
class RouteSuggestion:
    message: str
    routes: tuple[SuggestedRoute, ...] = ()
    requires_transfer: bool = False

    @property
    def best(self) -> SuggestedRoute | None:
        return self.routes[0] if self.routes else None


def _estimate_minutes(route: Route, stops_count: int) -> float:
    if route.kind == VehicleKind.AIRWAY:
        minutes = route.schedule.duration_minutes if route.schedule else None
        return float(minutes or 0.0)
    return stops_count * BUS_MINUTES_PER_STOP


def _leg(route: Route, i_from: int, i_to: int) -> SuggestionLeg:
    stops_count = abs(i_to - i_from)
    return SuggestionLeg(
        route_id=route.id,
        route_name=route.name,
        route_color=route.color,
        route_kind=route.kind,
        start_stop=route.stops[i_from].name,
        end_stop=route.stops[i_to].name,
        stops_count=stops_count,
        estimated_minutes=_estimate_minutes(route, stops_count),
    )


def direct_routes(
    routes: tuple[Route, ...], *, start_stop_id: str, end_stop_id: str
) -> list[SuggestedRoute]:
    out: list[SuggestedRoute] = []
    for route in routes:
        i_start = route.stop_index(start_stop_id)
        i_end = route.stop_index(end_stop_id)
        if i_start is None or i_end is None:
            continue
        out.append(
            SuggestedRoute(
                route_id=route.id,
                route_name=route.name,
                route_color=route.color,
                is_direct=True,
                legs=(_leg(route, i_start, i_end),),
            )
        )

    # Buses first (fewest stops), then flights (shortest time).
    def _key(s: SuggestedRoute) -> tuple[int, float]:
        leg = s.legs[0]
        if leg.route_kind == VehicleKind.BUS:
            return (0, float(leg.stops_count))
        return (1, leg.estimated_minutes)

    out.sort(key=_key)
    return out


def transfer_routes(
    routes: tuple[Route, ...], *, start_stop_id: str, end_stop_id: str
) -> list[SuggestedRoute]:
    """Two-leg journeys changing at a stop shared by both routes."""

    with_start = [r for r in routes if r.stop_index(start_stop_id) is not None]
    with_end = [r for r in routes if r.stop_index(end_stop_id) is not None]

    out: list[SuggestedRoute] = []
    for first in with_start:
        for second in with_end:
            if first.id == second.id:
                continue

            second_ids = {s.id for s in second.stops}
            for stop in first.stops:
                if stop.id not in second_ids:
                    continue
                if stop.id in (start_stop_id, end_stop_id):
                    continue

                i_a = first.stop_index(start_stop_id)
                t_a = first.stop_index(stop.id)
                t_b = second.stop_index(stop.id)
                i_b = second.stop_index(end_stop_id)
                if i_a is None or t_a is None or t_b is None or i_b is None:
                    continue

                out.append(
                    SuggestedRoute(
                        route_id=f"{first.id}+{second.id}",
                        route_name=f"{first.name} → {second.name}",
                        route_color=first.color,
                        is_direct=False,
                        legs=(_leg(first, i_a, t_a), _leg(second, t_b, i_b)),
                    )
                )

    out.sort(key=lambda s: (s.estimated_minutes, s.stops_count))
    return out


def suggest_route(
    routes: tuple[Route, ...], *, start_stop_id: str, end_stop_id: str
) -> RouteSuggestion:
    direct = direct_routes(routes, start_stop_id=start_stop_id, end_stop_id=end_stop_id)
    if direct:
        return RouteSuggestion(
            message=f"Found {len(direct)} route(s)", routes=tuple(direct)
        )

    via = transfer_routes(routes, start_stop_id=start_stop_id, end_stop_id=end_stop_id)
    if via:
        return RouteSuggestion(
            message="No direct routes found. Suggested 2-leg (via) routes:",
            routes=tuple(via),
            requires_transfer=True,
        )

    return RouteSuggestion(
        message="No direct routes found. Consider multi-route journey.",
        requires_transfer=True,
    )
