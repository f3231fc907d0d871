import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from transit_tracker.core.geo import normalize_heading
from transit_tracker.schemas.route import Stop

# Record keys owned by the tracker; a feed cannot set them
RESERVED_FIELDS = frozenset({
    "vehicle_id", "simulated", "resolved_route_id", "last_update", "next_stop",
})


class NextStopInfo(BaseModel):
    """Where a vehicle is headed next along its resolved route."""

    stop: Stop
    distance_m: float
    eta_minutes: int
    status: Literal["approaching", "enroute"]


class VehicleRecord(BaseModel):
    """Latest known telemetry for one vehicle.

    Keys the feed sends beyond the known fields are kept on the record.
    """

    model_config = ConfigDict(extra="allow")

    vehicle_id: str
    lat: float
    lon: float
    speed_kmph: float = 0.0
    heading: float | None = None
    status: str = "OK"
    moving: bool = False
    route_id: str | None = None  # declared by the telemetry itself
    resolved_route_id: str | None = None
    next_stop: NextStopInfo | None = None
    simulated: bool = False
    last_update: datetime.datetime | None = None


class TelemetryMessage(BaseModel):
    """Inbound position report as published on ``vehicles/{id}/telemetry``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    vehicle_id: str = Field(min_length=1)
    lat: float = Field(
        validation_alias=AliasChoices("lat", "latitude"), ge=-90, le=90, allow_inf_nan=False,
    )
    lon: float = Field(
        validation_alias=AliasChoices("lon", "longitude", "lng"), ge=-180, le=180, allow_inf_nan=False,
    )
    speed_kmph: float | None = Field(
        default=None, validation_alias=AliasChoices("speed_kmph", "speed"), allow_inf_nan=False,
    )
    heading: float | None = Field(
        default=None, validation_alias=AliasChoices("heading", "course"), allow_inf_nan=False,
    )
    status: str | None = None
    moving: bool | None = None
    route_id: str | None = Field(default=None, validation_alias=AliasChoices("routeId", "route_id"))

    @field_validator("vehicle_id", "route_id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("speed_kmph")
    @classmethod
    def _non_negative_speed(cls, v: float | None) -> float | None:
        if v is None:
            return None
        return max(v, 0.0)

    @field_validator("heading")
    @classmethod
    def _normalize_heading(cls, v: float | None) -> float | None:
        if v is None:
            return None
        return normalize_heading(v)

    def to_fields(self) -> dict[str, Any]:
        """Fields present in the message, ready for a shallow merge.

        Extra keys that collide with tracker-owned record fields are dropped.
        """
        fields = self.model_dump(exclude_unset=True, exclude_none=True)
        return {k: v for k, v in fields.items() if k not in RESERVED_FIELDS}


class StopArrival(BaseModel):
    vehicle_id: str
    lat: float
    lon: float
    speed_kmph: float
    heading: float | None = None
    distance_m: float
    eta_to_stop_minutes: int
    status: Literal["coming", "gone"]
    eta_to_dest_minutes: int | None = None
    last_update: datetime.datetime | None = None
    simulated: bool = False


class StopDetail(BaseModel):
    stop: Stop
    route_id: str
    route_name: str
    color: str | None = None
    path: list[tuple[float, float]] | None = None
    destination: Stop | None = None
    vehicles: list[StopArrival] = []


class VehicleRouteMapping(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vehicle_id: str = Field(min_length=1)
    route_id: str = Field(min_length=1, validation_alias=AliasChoices("route_id", "routeId"))
