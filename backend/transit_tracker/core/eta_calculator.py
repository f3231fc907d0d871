"""Straight-line ETA, coming/gone classification and next-stop tracking."""

import logging
from typing import Literal

from transit_tracker.core.geo import angle_difference, bearing_degrees, distance_km
from transit_tracker.schemas.route import Route, Stop
from transit_tracker.schemas.vehicle import NextStopInfo, StopArrival, VehicleRecord

logger = logging.getLogger(__name__)

# Speed assumed when a vehicle reports none (km/h)
DEFAULT_SPEED_KMH = 10.0
# Minimum speed to use for ETA (km/h) - prevents division by zero / extreme ETAs
MIN_SPEED_KMH = 8.0
# Within this distance a vehicle is treated as arriving regardless of heading
ARRIVAL_RADIUS_KM = 0.05
# Max heading deviation (degrees) from the bearing to the stop that still counts as approaching
APPROACH_CONE_DEG = 90.0
# A vehicle closer than this to its next stop is reported as approaching (metres)
APPROACHING_RADIUS_M = 100.0

Status = Literal["coming", "gone"]


def eta_minutes(vehicle: VehicleRecord, stop: Stop) -> int:
    """Minutes until ``vehicle`` reaches ``stop``; never less than 1."""
    dist = distance_km((vehicle.lat, vehicle.lon), (stop.lat, stop.lon))
    speed = max(vehicle.speed_kmph or DEFAULT_SPEED_KMH, MIN_SPEED_KMH)
    return max(1, round(dist / speed * 60))


def is_approaching(vehicle: VehicleRecord, stop: Stop) -> bool:
    """Whether the vehicle is heading toward the stop.

    Vehicles closer than 50 m always count as approaching. Without a
    heading there is nothing to compare against, so the answer is yes.
    """
    dist = distance_km((vehicle.lat, vehicle.lon), (stop.lat, stop.lon))
    if dist < ARRIVAL_RADIUS_KM:
        return True
    if vehicle.heading is None:
        return True
    brg = bearing_degrees((vehicle.lat, vehicle.lon), (stop.lat, stop.lon))
    return angle_difference(brg, vehicle.heading) <= APPROACH_CONE_DEG


def approach_status(vehicle: VehicleRecord, stop: Stop) -> Status:
    return "coming" if is_approaching(vehicle, stop) else "gone"


def sort_arrivals(arrivals: list[StopArrival]) -> list[StopArrival]:
    """Coming vehicles by ascending ETA, then gone vehicles in input order."""
    coming = sorted(
        (a for a in arrivals if a.status == "coming"),
        key=lambda a: a.eta_to_stop_minutes,
    )
    gone = [a for a in arrivals if a.status != "coming"]
    return coming + gone


def find_next_stop(route: Route, lat: float, lon: float) -> Stop | None:
    """The stop after the one nearest to (lat, lon), in route order.

    At the last stop the last stop itself is returned.
    """
    if not route.stops:
        return None
    nearest = min(
        range(len(route.stops)),
        key=lambda i: distance_km((lat, lon), (route.stops[i].lat, route.stops[i].lon)),
    )
    return route.stops[min(nearest + 1, len(route.stops) - 1)]


def next_stop_info(vehicle: VehicleRecord, route: Route) -> NextStopInfo | None:
    stop = find_next_stop(route, vehicle.lat, vehicle.lon)
    if stop is None:
        return None
    dist_m = distance_km((vehicle.lat, vehicle.lon), (stop.lat, stop.lon)) * 1000
    return NextStopInfo(
        stop=stop,
        distance_m=round(dist_m, 1),
        eta_minutes=eta_minutes(vehicle, stop),
        status="approaching" if dist_m < APPROACHING_RADIUS_M else "enroute",
    )
