from __future__ import annotations

from abc import ABC, abstractmethod

from livetrack.domain.models import VehicleStatusRecord


class IVehicleStatusRepository(ABC):
    """Persistence port for long-lived vehicle status (write-behind only)."""

    @abstractmethod
    def put_status(self, record: VehicleStatusRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_status(self, *, vehicle_id: str) -> VehicleStatusRecord | None:
        raise NotImplementedError
