from typing import Literal

from pydantic import BaseModel, Field

from transit_tracker.core.road_router import RoadRoute
from transit_tracker.schemas.route import Stop


class TripPlanRequest(BaseModel):
    from_lat: float = Field(ge=-90, le=90)
    from_lon: float = Field(ge=-180, le=180)
    to_lat: float = Field(ge=-90, le=90)
    to_lon: float = Field(ge=-180, le=180)
    mode: Literal["walking", "cycling", "driving"] = "walking"


class BusLeg(BaseModel):
    route_id: str
    route_name: str
    direction: Literal["forward", "reverse"]
    stops: list[Stop]
    duration_s: float


class TripPlan(BaseModel):
    origin_stop: Stop
    destination_stop: Stop
    to_stop: RoadRoute
    bus: BusLeg
    from_stop: RoadRoute
    wait_s: float
    total_duration_s: float
    mode: str
