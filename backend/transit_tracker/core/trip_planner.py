"""Door-to-door trip estimate: walk to a stop, ride one route, walk on."""

import asyncio
import logging

from transit_tracker.core.geo import Coord
from transit_tracker.core.road_router import Profile, RoadRouter
from transit_tracker.core.state import TransitState
from transit_tracker.exceptions import TripPlanError
from transit_tracker.schemas.trip import BusLeg, TripPlan

logger = logging.getLogger(__name__)

# Assumed wait at the boarding stop (seconds)
WAIT_SECONDS = 300.0
# How far a stop may be from either end of the trip (km)
MAX_ACCESS_DISTANCE_KM = 5.0


class TripPlanner:
    def __init__(self, state: TransitState, router: RoadRouter) -> None:
        self.state = state
        self.router = router

    async def plan(self, origin: Coord, destination: Coord, mode: Profile = "walking") -> TripPlan:
        registry = self.state.registry
        board = registry.find_nearest_stop(*origin, max_distance_km=MAX_ACCESS_DISTANCE_KM)
        if board is None:
            raise TripPlanError("No stops found near your location")
        alight = registry.find_nearest_stop(*destination, max_distance_km=MAX_ACCESS_DISTANCE_KM)
        if alight is None:
            raise TripPlanError("No stops found near your destination")
        if board.stop.id == alight.stop.id:
            raise TripPlanError(f"Both ends are closest to stop {board.stop.name}; no ride needed")
        if board.route_id != alight.route_id:
            raise TripPlanError(
                f"No direct route between {board.stop.name} and {alight.stop.name}"
            )

        route = registry.get_route(board.route_id)
        ids = [s.id for s in route.stops]
        i, j = ids.index(board.stop.id), ids.index(alight.stop.id)
        if i < j:
            direction = "forward"
            ride = route.stops[i:j + 1]
        else:
            direction = "reverse"
            ride = list(reversed(route.stops[j:i + 1]))

        segments = await asyncio.gather(*(
            self.router.route((a.lat, a.lon), (b.lat, b.lon), "driving")
            for a, b in zip(ride, ride[1:])
        ))
        bus_seconds = sum(seg.duration_s for seg in segments)

        to_stop = await self.router.route(origin, (board.stop.lat, board.stop.lon), mode)
        from_stop = await self.router.route((alight.stop.lat, alight.stop.lon), destination, "walking")

        total = to_stop.duration_s + WAIT_SECONDS + bus_seconds + from_stop.duration_s
        logger.info(
            "Trip plan via %s %s -> %s: %.0fs", route.id, board.stop.id, alight.stop.id, total,
        )
        return TripPlan(
            origin_stop=board.stop,
            destination_stop=alight.stop,
            to_stop=to_stop,
            bus=BusLeg(
                route_id=route.id,
                route_name=route.name,
                direction=direction,
                stops=ride,
                duration_s=bus_seconds,
            ),
            from_stop=from_stop,
            wait_s=WAIT_SECONDS,
            total_duration_s=total,
            mode=mode,
        )
