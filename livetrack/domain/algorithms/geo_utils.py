from __future__ import annotations

import math
from typing import Iterable

from livetrack.domain.models import GeoPoint, Stop


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    r = 6371000.0
    lat1 = math.radians(a.lat)
    lng1 = math.radians(a.lng)
    lat2 = math.radians(b.lat)
    lng2 = math.radians(b.lng)

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2.0) ** 2
    )
    return 2.0 * r * math.asin(math.sqrt(s))


def normalize_heading(deg: float) -> float:
    out = math.fmod(float(deg), 360.0)
    if out < 0.0:
        out += 360.0
    # fmod(-1e-20, 360) + 360 rounds to exactly 360.0
    return 0.0 if out >= 360.0 else out


def bearing_degrees(a: GeoPoint, b: GeoPoint) -> float | None:
    """Initial great-circle bearing from a to b, in [0, 360).

    Returns None for identical points: the heading is undefined and callers
    keep whatever heading they had.
    """

    if a.lat == b.lat and a.lng == b.lng:
        return None

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlng = math.radians(b.lng - a.lng)

    y = math.sin(dlng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        dlng
    )
    return normalize_heading(math.degrees(math.atan2(y, x)))


def shortest_rotation_delta(from_deg: float, to_deg: float) -> float:
    """Signed rotation in (-180, 180] taking from_deg to to_deg the short way."""

    delta = math.fmod(float(to_deg) - float(from_deg), 360.0)
    if delta <= -180.0:
        delta += 360.0
    elif delta > 180.0:
        delta -= 360.0
    return delta


def nearest_stop(position: GeoPoint, stops: Iterable[Stop]) -> Stop | None:
    best: Stop | None = None
    best_d = float("inf")
    for stop in stops:
        d = haversine_distance_m(position, stop.location)
        if d < best_d:
            best_d = d
            best = stop
    return best
