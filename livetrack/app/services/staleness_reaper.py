from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from livetrack.app.services.tracking_service import TrackingService

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class StalenessReaper:
    """Periodic backstop for publishers that vanish without a disconnect."""

    tracking: TrackingService
    timeout_s: float = 300.0
    interval_s: float = 300.0
    clock: Callable[[], datetime] = _utcnow

    def sweep(self, now: datetime | None = None) -> tuple[str, ...]:
        now = now or self.clock()
        cutoff = now - timedelta(seconds=self.timeout_s)

        evicted: list[str] = []
        for vehicle in self.tracking.registry.find_stale_before(cutoff):
            logger.info("Removing stale vehicle: %s", vehicle.vehicle_id)
            if self.tracking.evict_vehicle(
                vehicle.vehicle_id,
                message=f"Bus {vehicle.vehicle_id} connection lost",
            ):
                evicted.append(vehicle.vehicle_id)

        # Live routes announced by a publisher that never sent a position.
        live_routes = self.tracking.live_routes
        for route_id in live_routes.find_unclaimed_before(int(cutoff.timestamp() * 1000)):
            logger.info("Removing unclaimed live route: %s", route_id)
            live_routes.tear_down(route_id)

        return tuple(evicted)

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_s)
            try:
                self.sweep()
            except Exception:
                logger.exception("Staleness sweep failed")
