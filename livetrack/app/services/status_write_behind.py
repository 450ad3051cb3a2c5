from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from livetrack.app.ports.output import IVehicleStatusRepository
from livetrack.domain.models import VehicleStatusRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StatusWriteBehind:
    """Best-effort write-behind cache for vehicle status.

    `offer` never blocks and never raises. Pending writes are coalesced per
    vehicle (latest wins) and flushed from a background task; repository
    failures are logged and dropped.
    """

    repository: IVehicleStatusRepository

    _pending: dict[str, VehicleStatusRecord] = field(default_factory=dict, init=False)
    _wakeup: asyncio.Event = field(
        default_factory=asyncio.Event, init=False, repr=False
    )

    def offer(self, record: VehicleStatusRecord) -> None:
        # Re-insert so the newest record moves to the back of the queue.
        self._pending.pop(record.vehicle_id, None)
        self._pending[record.vehicle_id] = record
        self._wakeup.set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def flush(self) -> int:
        written = 0
        while self._pending:
            vehicle_id = next(iter(self._pending))
            record = self._pending.pop(vehicle_id)
            try:
                await asyncio.to_thread(self.repository.put_status, record)
                written += 1
            except Exception:
                logger.exception(
                    "Failed to persist vehicle status", extra={"vehicle_id": vehicle_id}
                )
        return written

    async def run(self) -> None:
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            await self.flush()
