from .event_sink import IEventSink
from .route_catalog_repository import IRouteCatalogRepository
from .ticker import ITicker, ITickHandle
from .vehicle_status_repository import IVehicleStatusRepository

__all__ = [
    "IEventSink",
    "IRouteCatalogRepository",
    "ITickHandle",
    "ITicker",
    "IVehicleStatusRepository",
]
