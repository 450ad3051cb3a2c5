from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from livetrack.adapters.aws import dynamodb_client
from livetrack.app.ports.output import IVehicleStatusRepository
from livetrack.domain.models import GeoPoint, VehicleStatusRecord


@dataclass(slots=True)
class DynamoDbVehicleStatusRepository(IVehicleStatusRepository):
    """Stores the last known status of each vehicle in DynamoDB.

    Env vars:
      - VEHICLE_STATUS_TABLE (default: livetrack-vehicle-status)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    table_name: str | None = None

    def _table(self) -> str:
        return (
            self.table_name
            or os.getenv("VEHICLE_STATUS_TABLE")
            or "livetrack-vehicle-status"
        )

    def put_status(self, record: VehicleStatusRecord) -> None:
        item: dict[str, Any] = {
            "vehicle_id": {"S": record.vehicle_id},
            "status": {"S": record.status},
        }
        if record.route_id:
            item["route_id"] = {"S": record.route_id}
        if record.position is not None:
            item["lat"] = {"N": repr(float(record.position.lat))}
            item["lng"] = {"N": repr(float(record.position.lng))}
        if record.last_active is not None:
            item["last_active"] = {"S": record.last_active.isoformat()}

        ddb = dynamodb_client()
        ddb.put_item(TableName=self._table(), Item=item)

    def get_status(self, *, vehicle_id: str) -> VehicleStatusRecord | None:
        ddb = dynamodb_client()
        resp = ddb.get_item(
            TableName=self._table(),
            Key={"vehicle_id": {"S": vehicle_id}},
            ConsistentRead=True,
        )
        item = resp.get("Item")
        if not item:
            return None

        position = None
        if "lat" in item and "lng" in item:
            position = GeoPoint(lat=float(item["lat"]["N"]), lng=float(item["lng"]["N"]))

        last_active = None
        if "last_active" in item and "S" in item["last_active"]:
            last_active = datetime.fromisoformat(item["last_active"]["S"])

        return VehicleStatusRecord(
            vehicle_id=item["vehicle_id"]["S"],
            status=item.get("status", {}).get("S", "idle"),
            route_id=item.get("route_id", {}).get("S"),
            position=position,
            last_active=last_active,
        )
