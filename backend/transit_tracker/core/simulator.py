"""Synthetic vehicle movement for demos when no live feed is available.

Each simulated vehicle is a two-state machine:

* ``moving``: advances toward the next waypoint of its route polyline by
  ``speed * tick`` metres per tick (linear interpolation in lat/lon).
* ``dwelling``: parked on the waypoint it just reached until the dwell
  time has elapsed.

At either end of the polyline the direction flips, so vehicles shuttle
back and forth. Every tick goes through the same ingest path as real
telemetry, flagged ``simulated``.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from transit_tracker.core.geo import Coord, bearing_degrees, distance_m
from transit_tracker.core.ingest import TelemetryIngestor
from transit_tracker.core.scheduler import SIMULATOR_JOB_ID, schedule_interval, unschedule
from transit_tracker.core.state import TransitState
from transit_tracker.exceptions import (
    RouteNotFoundError,
    SimulationError,
    ValidationError,
    VehicleNotFoundError,
)
from transit_tracker.schemas.simulation import (
    MAX_SPEED_MULTIPLIER,
    MIN_SPEED_MULTIPLIER,
    SimulatedVehicleConfig,
    SimulatedVehicleStatus,
    SimulationStatus,
)

logger = logging.getLogger(__name__)

# Snap to a waypoint once closer than this, even if the step is shorter (metres)
ARRIVAL_THRESHOLD_M = 5.0

FORWARD = 1
REVERSE = -1


class SimState(str, enum.Enum):
    MOVING = "moving"
    DWELLING = "dwelling"


@dataclass
class SimulatedVehicle:
    vehicle_id: str
    route_id: str
    path: list[Coord]
    speed_kmph: float
    lat: float
    lon: float
    waypoint_index: int  # last waypoint reached
    next_index: int
    direction: int = FORWARD
    state: SimState = SimState.MOVING
    dwell_remaining_s: float = 0.0
    heading: float | None = None

    def advance_waypoint(self) -> None:
        """Snap onto the next waypoint and pick the one after it."""
        self.lat, self.lon = self.path[self.next_index]
        self.waypoint_index = self.next_index
        self.next_index = _next_index(self.waypoint_index, self.direction, len(self.path))
        if (self.next_index - self.waypoint_index) * self.direction < 0:
            self.direction = -self.direction


def _next_index(index: int, direction: int, length: int) -> int:
    nxt = index + direction
    if 0 <= nxt < length:
        return nxt
    # ran off the end: shuttle back the other way
    return index - direction


class Simulator:
    """Drives simulated vehicles from an APScheduler interval job."""

    def __init__(
        self,
        state: TransitState,
        ingestor: TelemetryIngestor,
        fleet: list[SimulatedVehicleConfig] | None = None,
        *,
        tick_seconds: float = 2.0,
        dwell_seconds: float = 10.0,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self.state = state
        self.ingestor = ingestor
        self.tick_seconds = tick_seconds
        self.dwell_seconds = dwell_seconds
        self.scheduler = scheduler
        self.speed_multiplier = 1.0
        self._fleet: dict[str, SimulatedVehicleConfig] = {c.vehicle_id: c for c in fleet or []}
        self.vehicles: dict[str, SimulatedVehicle] = {}
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_seconds(self) -> float:
        """Wall-clock time between ticks."""
        return self.tick_seconds / self.speed_multiplier

    # --- administrative controls ---

    def start(self) -> None:
        """Rebuild vehicles from the configured fleet and start ticking."""
        if self._running:
            return
        self.vehicles = {}
        for config in self._fleet.values():
            try:
                vehicle = self._build_vehicle(config)
            except (RouteNotFoundError, SimulationError) as e:
                logger.warning("Skipping simulated vehicle %s: %s", config.vehicle_id, e)
                continue
            self.vehicles[vehicle.vehicle_id] = vehicle
        self._running = True
        self._schedule()
        logger.info(
            "Simulation started with %d vehicles (x%.1f)", len(self.vehicles), self.speed_multiplier,
        )

    def stop(self) -> None:
        """Stop ticking. Simulated vehicles stay in the vehicle store."""
        if not self._running:
            return
        self._running = False
        if self.scheduler is not None:
            unschedule(self.scheduler, SIMULATOR_JOB_ID)
        logger.info("Simulation stopped")

    def set_speed_multiplier(self, multiplier: float) -> None:
        """Change the tick rate; a running loop is restarted immediately."""
        if not MIN_SPEED_MULTIPLIER <= multiplier <= MAX_SPEED_MULTIPLIER:
            raise ValidationError(
                f"speed multiplier must be between {MIN_SPEED_MULTIPLIER} and {MAX_SPEED_MULTIPLIER}"
            )
        self.speed_multiplier = multiplier
        if self._running and self.scheduler is not None:
            unschedule(self.scheduler, SIMULATOR_JOB_ID)
            self._schedule()
        logger.info("Simulation speed multiplier set to %.2f", multiplier)

    def add_vehicle(self, config: SimulatedVehicleConfig) -> SimulatedVehicle:
        vehicle = self._build_vehicle(config)
        self._fleet[config.vehicle_id] = config
        self.vehicles[vehicle.vehicle_id] = vehicle
        logger.info("Added simulated vehicle %s on route %s", config.vehicle_id, config.route_id)
        return vehicle

    def remove_vehicle(self, vehicle_id: str) -> None:
        if vehicle_id not in self._fleet and vehicle_id not in self.vehicles:
            raise VehicleNotFoundError(vehicle_id)
        self._fleet.pop(vehicle_id, None)
        self.vehicles.pop(vehicle_id, None)
        logger.info("Removed simulated vehicle %s", vehicle_id)

    def status(self) -> SimulationStatus:
        return SimulationStatus(
            running=self._running,
            speed_multiplier=self.speed_multiplier,
            tick_seconds=self.tick_seconds,
            interval_seconds=self.interval_seconds,
            dwell_seconds=self.dwell_seconds,
            vehicles=[
                SimulatedVehicleStatus(
                    vehicle_id=v.vehicle_id,
                    route_id=v.route_id,
                    state=v.state.value,
                    direction="forward" if v.direction == FORWARD else "reverse",
                    waypoint_index=v.waypoint_index,
                    next_index=v.next_index,
                    lat=v.lat,
                    lon=v.lon,
                    speed_kmph=v.speed_kmph,
                    dwell_remaining_seconds=max(v.dwell_remaining_s, 0.0),
                )
                for v in self.vehicles.values()
            ],
        )

    # --- tick ---

    async def tick(self) -> None:
        """Advance every simulated vehicle by one tick and publish it."""
        for vehicle in list(self.vehicles.values()):
            fields = self.step(vehicle)
            await self.ingestor.ingest(vehicle.vehicle_id, fields)

    def step(self, v: SimulatedVehicle) -> dict[str, Any]:
        """Advance one vehicle's state machine and return its telemetry fields."""
        if v.state is SimState.DWELLING:
            v.dwell_remaining_s -= self.tick_seconds
            if v.dwell_remaining_s > 0:
                return self._telemetry(v)
            v.state = SimState.MOVING

        target = v.path[v.next_index]
        here = (v.lat, v.lon)
        remaining = distance_m(here, target)
        step_m = v.speed_kmph / 3.6 * self.tick_seconds
        if remaining > 0:
            v.heading = bearing_degrees(here, target)

        if remaining <= max(step_m, ARRIVAL_THRESHOLD_M):
            v.advance_waypoint()
            v.state = SimState.DWELLING
            v.dwell_remaining_s = self.dwell_seconds
            logger.debug(
                "Simulated %s reached waypoint %d/%d", v.vehicle_id, v.waypoint_index, len(v.path) - 1,
            )
        else:
            ratio = step_m / remaining
            v.lat += (target[0] - v.lat) * ratio
            v.lon += (target[1] - v.lon) * ratio
        return self._telemetry(v)

    # --- internals ---

    def _schedule(self) -> None:
        if self.scheduler is None:
            return
        schedule_interval(
            self.scheduler, self.tick, self.interval_seconds,
            SIMULATOR_JOB_ID, "Advance simulated vehicles",
        )

    def _build_vehicle(self, config: SimulatedVehicleConfig) -> SimulatedVehicle:
        route = self.state.registry.get_route(config.route_id)
        if route is None:
            raise RouteNotFoundError(config.route_id)
        path = route.polyline()
        if len(path) < 2:
            raise SimulationError(f"route {route.id} needs at least 2 points to simulate")

        start = min(config.start_index, len(path) - 1)
        direction = FORWARD if config.direction == "forward" else REVERSE
        next_index = _next_index(start, direction, len(path))
        if (next_index - start) * direction < 0:
            direction = -direction
        lat, lon = path[start]
        return SimulatedVehicle(
            vehicle_id=config.vehicle_id,
            route_id=route.id,
            path=path,
            speed_kmph=config.speed_kmph,
            lat=lat,
            lon=lon,
            waypoint_index=start,
            next_index=next_index,
            direction=direction,
        )

    @staticmethod
    def _telemetry(v: SimulatedVehicle) -> dict[str, Any]:
        moving = v.state is SimState.MOVING
        return {
            "lat": v.lat,
            "lon": v.lon,
            "speed_kmph": v.speed_kmph if moving else 0.0,
            "heading": v.heading,
            "status": "moving" if moving else "stopped",
            "moving": moving,
            "route_id": v.route_id,
            "simulated": True,
        }
