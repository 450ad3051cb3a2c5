from .dynamodb_vehicle_status_repository import DynamoDbVehicleStatusRepository
from .local_route_catalog_repository import LocalRouteCatalogRepository

__all__ = [
    "DynamoDbVehicleStatusRepository",
    "LocalRouteCatalogRepository",
]
