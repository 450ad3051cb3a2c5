from __future__ import annotations

from livetrack.domain.algorithms.geo_utils import (
    haversine_distance_m,
    normalize_heading,
    shortest_rotation_delta,
)
from livetrack.domain.models import GeoPoint


def ease_in_out_cubic(t: float) -> float:
    t = max(0.0, min(1.0, float(t)))
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 3) / 2.0


def interpolate_position(start: GeoPoint, end: GeoPoint, progress: float) -> GeoPoint:
    """Linear lat/lng blend; fine for the short hops between two samples."""

    return GeoPoint(
        lat=start.lat + (end.lat - start.lat) * progress,
        lng=start.lng + (end.lng - start.lng) * progress,
    )


def interpolate_heading(start_deg: float, end_deg: float, progress: float) -> float:
    delta = shortest_rotation_delta(start_deg, end_deg)
    return normalize_heading(start_deg + delta * progress)


def animation_duration_s(
    start: GeoPoint,
    end: GeoPoint,
    *,
    speed_kmh: float,
    min_s: float,
    max_s: float,
    min_speed_mps: float = 0.1,
) -> float:
    """Time a vehicle at `speed_kmh` needs to cover start -> end, clamped.

    The clamp keeps teleports (reconnects, GPS jumps) from producing
    zero-length or multi-minute animations.
    """

    distance_m = haversine_distance_m(start, end)
    speed_mps = max(float(speed_kmh) / 3.6, float(min_speed_mps))
    return max(float(min_s), min(float(max_s), distance_m / speed_mps))
