"""In-memory catalog of routes and their stops."""

import logging
from dataclasses import dataclass

from transit_tracker.core.geo import distance_km
from transit_tracker.schemas.route import Route, Stop, StopWithRoute

logger = logging.getLogger(__name__)


@dataclass
class StopMatch:
    stop: Stop
    route_id: str
    distance_km: float


class RouteRegistry:
    """Routes keyed by id plus a stop_id -> (stop, route_id) index."""

    def __init__(self) -> None:
        self._routes: dict[str, Route] = {}
        self._stops: dict[str, tuple[Stop, str]] = {}

    def add_route(self, route: Route) -> None:
        """Insert or replace a route. Last write wins on duplicate ids."""
        old = self._routes.get(route.id)
        if old is not None:
            for s in old.stops:
                indexed = self._stops.get(s.id)
                if indexed and indexed[1] == route.id:
                    del self._stops[s.id]
        self._routes[route.id] = route
        for s in route.stops:
            prev = self._stops.get(s.id)
            if prev and prev[1] != route.id:
                logger.warning(
                    "Stop %s moved from route %s to route %s", s.id, prev[1], route.id,
                )
            self._stops[s.id] = (s, route.id)
        logger.info("Route %s (%s): %d stops registered", route.id, route.name, len(route.stops))

    def get_route(self, route_id: str) -> Route | None:
        return self._routes.get(route_id)

    def get_stop(self, stop_id: str) -> tuple[Stop, str] | None:
        """Return (stop, owning route id)."""
        return self._stops.get(stop_id)

    def list_routes(self) -> list[Route]:
        return list(self._routes.values())

    def list_stops(self) -> list[StopWithRoute]:
        return [
            StopWithRoute(**s.model_dump(), route_id=route.id)
            for route in self._routes.values()
            for s in route.stops
            if self._owns(route.id, s.id)
        ]

    @property
    def stop_count(self) -> int:
        return len(self._stops)

    def find_nearest_stop(
        self,
        lat: float,
        lon: float,
        max_distance_km: float | None = None,
    ) -> StopMatch | None:
        """Linear scan for the closest stop; first encountered wins ties."""
        best: StopMatch | None = None
        for route in self._routes.values():
            for s in route.stops:
                if not self._owns(route.id, s.id):
                    continue
                d = distance_km((lat, lon), (s.lat, s.lon))
                if max_distance_km is not None and d > max_distance_km:
                    continue
                if best is None or d < best.distance_km:
                    best = StopMatch(stop=s, route_id=route.id, distance_km=d)
        return best

    def search_stops(self, query: str, limit: int = 10) -> list[StopWithRoute]:
        """Case-insensitive substring search on stop names."""
        term = query.strip().lower()
        if not term:
            return []
        return [s for s in self.list_stops() if term in s.name.lower()][:limit]

    def _owns(self, route_id: str, stop_id: str) -> bool:
        # A stop id re-used by a later route belongs to that route only.
        indexed = self._stops.get(stop_id)
        return indexed is not None and indexed[1] == route_id
