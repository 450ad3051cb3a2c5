from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from livetrack.app.ports.output import ITicker, ITickHandle
from livetrack.domain.algorithms.geo_utils import bearing_degrees, normalize_heading
from livetrack.domain.algorithms.interpolation import (
    animation_duration_s,
    ease_in_out_cubic,
    interpolate_heading,
    interpolate_position,
)
from livetrack.domain.models import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InterpolationConfig:
    min_duration_s: float = 0.5
    max_duration_s: float = 10.0
    min_speed_mps: float = 0.1
    frame_interval_s: float = 1.0 / 30.0


@dataclass(frozen=True, slots=True)
class DisplayedPose:
    position: GeoPoint
    heading: float


FrameCallback = Callable[[str, DisplayedPose], None]


@dataclass(slots=True)
class _Animation:
    start: GeoPoint
    target: GeoPoint
    start_heading: float
    target_heading: float
    started_at: float
    duration_s: float
    handle: ITickHandle | None = None

    def pose_at(self, now: float) -> tuple[DisplayedPose, bool]:
        if self.duration_s <= 0.0:
            progress = 1.0
        else:
            progress = max(0.0, min(1.0, (now - self.started_at) / self.duration_s))
        eased = ease_in_out_cubic(progress)
        pose = DisplayedPose(
            position=interpolate_position(self.start, self.target, eased),
            heading=interpolate_heading(self.start_heading, self.target_heading, eased),
        )
        return pose, progress >= 1.0


@dataclass(slots=True)
class PositionInterpolator:
    """Viewer-side dead reckoning between sparse position samples.

    One animation per vehicle. A new sample always starts from the pose that
    is currently on screen, never from the previous target, so early updates
    don't make markers jump. Purely presentational: it never talks back to
    the server.
    """

    ticker: ITicker
    on_frame: FrameCallback | None = None
    config: InterpolationConfig = field(default_factory=InterpolationConfig)

    _displayed: dict[str, DisplayedPose] = field(default_factory=dict, init=False)
    _animations: dict[str, _Animation] = field(default_factory=dict, init=False)
    _closed: bool = field(default=False, init=False)

    def push(
        self,
        vehicle_id: str,
        position: GeoPoint,
        *,
        heading: float | None = None,
        speed_kmh: float = 0.0,
    ) -> None:
        if self._closed:
            return

        now = self.ticker.now()
        current = self._advance(vehicle_id, now)
        self._cancel(vehicle_id)

        if current is None:
            # First sighting: place the marker, nothing to animate from.
            pose = DisplayedPose(
                position=position,
                heading=normalize_heading(heading) if heading is not None else 0.0,
            )
            self._show(vehicle_id, pose)
            return

        target_heading = bearing_degrees(current.position, position)
        if target_heading is None:
            target_heading = (
                normalize_heading(heading) if heading is not None else current.heading
            )

        if current.position == position and target_heading == current.heading:
            return

        animation = _Animation(
            start=current.position,
            target=position,
            start_heading=current.heading,
            target_heading=target_heading,
            started_at=now,
            duration_s=animation_duration_s(
                current.position,
                position,
                speed_kmh=speed_kmh,
                min_s=self.config.min_duration_s,
                max_s=self.config.max_duration_s,
                min_speed_mps=self.config.min_speed_mps,
            ),
        )
        self._animations[vehicle_id] = animation
        animation.handle = self.ticker.schedule_repeating(
            self.config.frame_interval_s,
            lambda: self._tick(vehicle_id, animation),
        )

    def displayed(self, vehicle_id: str) -> DisplayedPose | None:
        return self._displayed.get(vehicle_id)

    def is_animating(self, vehicle_id: str) -> bool:
        return vehicle_id in self._animations

    def remove(self, vehicle_id: str) -> None:
        self._cancel(vehicle_id)
        self._displayed.pop(vehicle_id, None)

    def close(self) -> None:
        for vehicle_id in list(self._animations):
            self._cancel(vehicle_id)
        self._displayed.clear()
        self._closed = True

    def _advance(self, vehicle_id: str, now: float) -> DisplayedPose | None:
        animation = self._animations.get(vehicle_id)
        if animation is not None:
            pose, _ = animation.pose_at(now)
            self._displayed[vehicle_id] = pose
            return pose
        return self._displayed.get(vehicle_id)

    def _tick(self, vehicle_id: str, animation: _Animation) -> None:
        if self._animations.get(vehicle_id) is not animation:
            # Superseded between scheduling and firing.
            if animation.handle is not None:
                animation.handle.cancel()
            return

        pose, done = animation.pose_at(self.ticker.now())
        self._show(vehicle_id, pose)
        if done:
            self._cancel(vehicle_id)

    def _cancel(self, vehicle_id: str) -> None:
        animation = self._animations.pop(vehicle_id, None)
        if animation is not None and animation.handle is not None:
            animation.handle.cancel()

    def _show(self, vehicle_id: str, pose: DisplayedPose) -> None:
        self._displayed[vehicle_id] = pose
        if self.on_frame is not None:
            self.on_frame(vehicle_id, pose)
