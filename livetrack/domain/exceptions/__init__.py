from .tracking import RouteNotFound, RouteOwnershipError, TrackingError

__all__ = ["RouteNotFound", "RouteOwnershipError", "TrackingError"]
