from typing import Literal

from pydantic import BaseModel, Field

MIN_SPEED_MULTIPLIER = 0.1
MAX_SPEED_MULTIPLIER = 10.0


class SimulatedVehicleConfig(BaseModel):
    vehicle_id: str = Field(min_length=1)
    route_id: str = Field(min_length=1)
    speed_kmph: float = Field(default=30.0, gt=0)
    start_index: int = Field(default=0, ge=0)
    direction: Literal["forward", "reverse"] = "forward"


class SpeedMultiplierRequest(BaseModel):
    multiplier: float = Field(ge=MIN_SPEED_MULTIPLIER, le=MAX_SPEED_MULTIPLIER)


class SimulatedVehicleStatus(BaseModel):
    vehicle_id: str
    route_id: str
    state: Literal["moving", "dwelling"]
    direction: Literal["forward", "reverse"]
    waypoint_index: int
    next_index: int
    lat: float
    lon: float
    speed_kmph: float
    dwell_remaining_seconds: float


class SimulationStatus(BaseModel):
    running: bool
    speed_multiplier: float
    tick_seconds: float
    interval_seconds: float
    dwell_seconds: float
    vehicles: list[SimulatedVehicleStatus] = []
