class TrackingError(Exception):
    """Base exception for tracking/lifecycle failures."""


class RouteNotFound(TrackingError):
    """Raised when a route id is neither static nor a known live route."""


class RouteOwnershipError(TrackingError):
    """Raised when a publisher tries to claim a route it does not own."""
