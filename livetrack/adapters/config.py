from __future__ import annotations

import os
from dataclasses import dataclass

from livetrack.adapters.aws import _env_bool


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    routes_path: str | None = None
    stale_timeout_s: float = 300.0
    reaper_interval_s: float = 300.0
    bus_seat_capacity: int = 50
    flight_economy_capacity: int = 120
    flight_business_capacity: int = 30
    client_url: str = "*"
    vehicle_status_table: str | None = None
    host: str = "0.0.0.0"
    port: int = 5000
    reveal_errors: bool = False
    ws_queue_size: int = 1000

    @staticmethod
    def from_env() -> "RuntimeConfig":
        return RuntimeConfig(
            routes_path=(os.getenv("ROUTES_PATH") or "").strip() or None,
            stale_timeout_s=_env_float("STALE_TIMEOUT_S", 300.0),
            reaper_interval_s=_env_float("REAPER_INTERVAL_S", 300.0),
            bus_seat_capacity=_env_int("BUS_SEAT_CAPACITY", 50),
            flight_economy_capacity=_env_int("FLIGHT_ECONOMY_CAPACITY", 120),
            flight_business_capacity=_env_int("FLIGHT_BUSINESS_CAPACITY", 30),
            client_url=(os.getenv("CLIENT_URL") or "").strip() or "*",
            vehicle_status_table=(os.getenv("VEHICLE_STATUS_TABLE") or "").strip()
            or None,
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 5000),
            reveal_errors=_env_bool("LIVETRACK_REVEAL_ERRORS", False),
            ws_queue_size=_env_int("WS_QUEUE_SIZE", 1000),
        )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.client_url.split(",") if o.strip()] or ["*"]
