"""Exception hierarchy for the transit tracker."""


class TransitError(Exception):
    """Base exception for all transit tracker errors."""

    status_code = 400


class ValidationError(TransitError):
    """Request data passed schema checks but is semantically invalid."""


class NotFoundError(TransitError):
    status_code = 404


class StopNotFoundError(NotFoundError):
    def __init__(self, stop_id: str) -> None:
        self.stop_id = stop_id
        super().__init__(f"Stop not found: {stop_id}")


class RouteNotFoundError(NotFoundError):
    def __init__(self, route_id: str) -> None:
        self.route_id = route_id
        super().__init__(f"Route not found: {route_id}")


class VehicleNotFoundError(NotFoundError):
    def __init__(self, vehicle_id: str) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(f"Vehicle not found: {vehicle_id}")


class NoStopsError(NotFoundError):
    """The registry holds no stops at all."""

    def __init__(self) -> None:
        super().__init__("No stops registered")


class NoStopNearbyError(NotFoundError):
    """Stops exist, but none lies within the search radius."""

    def __init__(self, max_distance_km: float) -> None:
        self.max_distance_km = max_distance_km
        super().__init__(f"No stop within {max_distance_km * 1000:.0f} m")


class TripPlanError(NotFoundError):
    """A trip could not be planned between the requested points."""


class SimulationError(TransitError):
    status_code = 409
