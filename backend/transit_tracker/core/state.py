"""Process-wide tracking state, owned by the application and passed to components."""

from dataclasses import InitVar, dataclass, field

from transit_tracker.core.registry import RouteRegistry
from transit_tracker.core.route_assignment import VehicleRouteMap
from transit_tracker.core.vehicle_store import VehicleStore
from transit_tracker.schemas.route import Route


@dataclass
class TransitState:
    registry: RouteRegistry = field(default_factory=RouteRegistry)
    vehicles: VehicleStore = field(default_factory=VehicleStore)
    vehicle_routes: InitVar[dict[str, str] | None] = None
    assignments: VehicleRouteMap = field(init=False)

    def __post_init__(self, vehicle_routes: dict[str, str] | None) -> None:
        self.assignments = VehicleRouteMap(self.vehicles, vehicle_routes)

    @classmethod
    def from_seed(
        cls,
        routes: list[Route],
        vehicle_routes: dict[str, str] | None = None,
    ) -> "TransitState":
        state = cls(vehicle_routes=vehicle_routes)
        for route in routes:
            state.registry.add_route(route)
        return state
