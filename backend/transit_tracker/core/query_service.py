"""Read-side operations over the vehicle store and route registry."""

import logging

from transit_tracker.core.eta_calculator import approach_status, eta_minutes, sort_arrivals
from transit_tracker.core.geo import distance_m, format_distance
from transit_tracker.core.state import TransitState
from transit_tracker.exceptions import (
    NoStopNearbyError,
    NoStopsError,
    RouteNotFoundError,
    StopNotFoundError,
    VehicleNotFoundError,
)
from transit_tracker.schemas.route import NearestStop, Route, StopWithRoute
from transit_tracker.schemas.vehicle import StopArrival, StopDetail, VehicleRecord

logger = logging.getLogger(__name__)

WALKING_SPEED_KMH = 5.0


class QueryService:
    def __init__(self, state: TransitState, walking_speed_kmh: float = WALKING_SPEED_KMH) -> None:
        self.state = state
        self.walking_speed_kmh = walking_speed_kmh

    def list_vehicles(self) -> list[VehicleRecord]:
        return list(self.state.vehicles.all().values())

    def vehicle_ids(self) -> list[str]:
        return self.state.vehicles.ids()

    def get_vehicle(self, vehicle_id: str) -> VehicleRecord:
        record = self.state.vehicles.get(vehicle_id)
        if record is None:
            raise VehicleNotFoundError(vehicle_id)
        return record

    def list_routes(self) -> list[Route]:
        return self.state.registry.list_routes()

    def get_route(self, route_id: str) -> Route:
        route = self.state.registry.get_route(route_id)
        if route is None:
            raise RouteNotFoundError(route_id)
        return route

    def list_stops(self) -> list[StopWithRoute]:
        return self.state.registry.list_stops()

    def search_stops(self, query: str, limit: int = 10) -> list[StopWithRoute]:
        return self.state.registry.search_stops(query, limit=limit)

    def nearest_stop(self, lat: float, lon: float, max_distance_km: float | None = None) -> NearestStop:
        """Closest stop to a point plus walking time to it."""
        registry = self.state.registry
        if registry.stop_count == 0:
            raise NoStopsError()
        match = registry.find_nearest_stop(lat, lon, max_distance_km)
        if match is None:
            raise NoStopNearbyError(max_distance_km or 0.0)

        walk = max(1, round(match.distance_km / self.walking_speed_kmh * 60))
        return NearestStop(
            stop=match.stop,
            route_id=match.route_id,
            distance_km=match.distance_km,
            distance_m=match.distance_km * 1000,
            distance_text=format_distance(match.distance_km),
            walk_minutes=walk,
        )

    def stop_detail(self, stop_id: str, destination_stop_id: str | None = None) -> StopDetail:
        """Vehicles on the stop's route with ETA and coming/gone status."""
        found = self.state.registry.get_stop(stop_id)
        if found is None:
            raise StopNotFoundError(stop_id)
        stop, route_id = found
        route = self.state.registry.get_route(route_id)

        destination = None
        if destination_stop_id:
            dest = self.state.registry.get_stop(destination_stop_id)
            if dest is not None and dest[1] == route_id:
                destination = dest[0]
            else:
                logger.debug("Destination %s is not on route %s, ignoring", destination_stop_id, route_id)

        assignments = self.state.assignments
        arrivals = []
        for vehicle_id, vehicle in self.state.vehicles.all().items():
            if assignments.route_for_vehicle(vehicle_id) != route_id:
                continue
            arrivals.append(StopArrival(
                vehicle_id=vehicle_id,
                lat=vehicle.lat,
                lon=vehicle.lon,
                speed_kmph=vehicle.speed_kmph,
                heading=vehicle.heading,
                distance_m=round(distance_m((vehicle.lat, vehicle.lon), (stop.lat, stop.lon)), 1),
                eta_to_stop_minutes=eta_minutes(vehicle, stop),
                status=approach_status(vehicle, stop),
                eta_to_dest_minutes=eta_minutes(vehicle, destination) if destination else None,
                last_update=vehicle.last_update,
                simulated=vehicle.simulated,
            ))

        return StopDetail(
            stop=stop,
            route_id=route_id,
            route_name=route.name if route else route_id,
            color=route.color if route else None,
            path=route.path if route else None,
            destination=destination,
            vehicles=sort_arrivals(arrivals),
        )
