from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from livetrack.app.services.status_write_behind import StatusWriteBehind
from livetrack.domain.models import GeoPoint, VehicleStatusRecord


@dataclass(slots=True)
class FakeStatusRepository:
    records: list[VehicleStatusRecord] = field(default_factory=list)
    fail_for: set[str] = field(default_factory=set)

    def put_status(self, record: VehicleStatusRecord) -> None:
        if record.vehicle_id in self.fail_for:
            raise RuntimeError("table unavailable")
        self.records.append(record)

    def get_status(self, *, vehicle_id: str) -> VehicleStatusRecord | None:
        return None


def _record(vehicle_id: str, status: str) -> VehicleStatusRecord:
    return VehicleStatusRecord(
        vehicle_id=vehicle_id, status=status, position=GeoPoint(lat=0.0, lng=0.0)
    )


@pytest.mark.unit
@pytest.mark.anyio
async def test_flush_coalesces_per_vehicle() -> None:
    repo = FakeStatusRepository()
    writer = StatusWriteBehind(repo)

    writer.offer(_record("B1", "active"))
    writer.offer(_record("B2", "active"))
    writer.offer(_record("B1", "idle"))

    assert await writer.flush() == 2
    assert [(r.vehicle_id, r.status) for r in repo.records] == [
        ("B2", "active"),
        ("B1", "idle"),
    ]
    assert writer.pending == 0


@pytest.mark.unit
@pytest.mark.anyio
async def test_flush_swallows_repository_errors() -> None:
    repo = FakeStatusRepository(fail_for={"B1"})
    writer = StatusWriteBehind(repo)

    writer.offer(_record("B1", "active"))
    writer.offer(_record("B2", "active"))

    assert await writer.flush() == 1
    assert [r.vehicle_id for r in repo.records] == ["B2"]
    assert writer.pending == 0
