from __future__ import annotations

import logging
from dataclasses import dataclass

from starlette.requests import HTTPConnection

from livetrack.adapters.config import RuntimeConfig
from livetrack.adapters.persistence import (
    DynamoDbVehicleStatusRepository,
    LocalRouteCatalogRepository,
)
from livetrack.app.ports.output import IRouteCatalogRepository, IVehicleStatusRepository
from livetrack.app.services.live_route_manager import LiveRouteManager
from livetrack.app.services.route_catalog_service import RouteCatalogService
from livetrack.app.services.seat_ledger import SeatDefaults, SeatLedger
from livetrack.app.services.staleness_reaper import StalenessReaper
from livetrack.app.services.status_write_behind import StatusWriteBehind
from livetrack.app.services.topic_router import TopicRouter
from livetrack.app.services.tracking_service import TrackingService
from livetrack.app.services.vehicle_registry import VehicleRegistry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TrackingContainer:
    """Process-wide state shared by the HTTP routes and the realtime stream."""

    config: RuntimeConfig
    registry: VehicleRegistry
    router: TopicRouter
    live_routes: LiveRouteManager
    seats: SeatLedger
    tracking: TrackingService
    catalog: RouteCatalogService
    reaper: StalenessReaper
    status_repository: IVehicleStatusRepository | None = None
    status_writer: StatusWriteBehind | None = None


def build_container(
    config: RuntimeConfig | None = None,
    *,
    catalog_repository: IRouteCatalogRepository | None = None,
    status_repository: IVehicleStatusRepository | None = None,
) -> TrackingContainer:
    config = config or RuntimeConfig.from_env()
    catalog_repository = catalog_repository or LocalRouteCatalogRepository(
        path=config.routes_path
    )
    catalog = catalog_repository.load_catalog()
    logger.info(
        "Loaded %d routes and %d fleet vehicles", len(catalog.routes), len(catalog.fleet)
    )

    if status_repository is None and config.vehicle_status_table:
        status_repository = DynamoDbVehicleStatusRepository(
            table_name=config.vehicle_status_table
        )
    status_writer = StatusWriteBehind(status_repository) if status_repository else None

    registry = VehicleRegistry()
    router = TopicRouter()
    live_routes = LiveRouteManager(
        router=router, registry=registry, static_routes=catalog.routes_by_id
    )

    seats = SeatLedger(router=router)
    seats.seed_from_fleet(
        catalog.fleet,
        SeatDefaults(
            bus_capacity=config.bus_seat_capacity,
            economy_capacity=config.flight_economy_capacity,
            business_capacity=config.flight_business_capacity,
        ),
    )

    tracking = TrackingService(
        registry=registry,
        router=router,
        live_routes=live_routes,
        status_writer=status_writer,
    )
    reaper = StalenessReaper(
        tracking=tracking,
        timeout_s=config.stale_timeout_s,
        interval_s=config.reaper_interval_s,
    )

    return TrackingContainer(
        config=config,
        registry=registry,
        router=router,
        live_routes=live_routes,
        seats=seats,
        tracking=tracking,
        catalog=RouteCatalogService(catalog=catalog, live_routes=live_routes),
        reaper=reaper,
        status_repository=status_repository,
        status_writer=status_writer,
    )


def get_container(connection: HTTPConnection) -> TrackingContainer:
    container = getattr(connection.app.state, "container", None)
    if container is None:
        raise RuntimeError("Tracking services not initialised")
    return container


def get_tracking_service(connection: HTTPConnection) -> TrackingService:
    return get_container(connection).tracking


def get_route_catalog_service(connection: HTTPConnection) -> RouteCatalogService:
    return get_container(connection).catalog


def get_seat_ledger(connection: HTTPConnection) -> SeatLedger:
    return get_container(connection).seats


def get_vehicle_registry(connection: HTTPConnection) -> VehicleRegistry:
    return get_container(connection).registry


def get_vehicle_status_repository(
    connection: HTTPConnection,
) -> IVehicleStatusRepository | None:
    return get_container(connection).status_repository


def get_runtime_config(connection: HTTPConnection) -> RuntimeConfig:
    return get_container(connection).config
