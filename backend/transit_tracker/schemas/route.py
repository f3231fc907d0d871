from pydantic import BaseModel, Field, model_validator


class Stop(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    seq: int | None = None


class Route(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    stops: list[Stop]
    path: list[tuple[float, float]] | None = None  # [(lat, lon), ...]
    color: str | None = None

    @model_validator(mode="after")
    def _order_stops(self) -> "Route":
        """Fill missing sequence numbers from list position and sort by them."""
        if not self.name:
            self.name = self.id
        for idx, stop in enumerate(self.stops):
            if stop.seq is None:
                stop.seq = idx
        seqs = [s.seq for s in self.stops]
        if len(set(seqs)) != len(seqs):
            raise ValueError(f"route {self.id}: stop sequence numbers must be unique")
        self.stops.sort(key=lambda s: s.seq)
        return self

    def polyline(self) -> list[tuple[float, float]]:
        """Path used for simulation: explicit path, else stop coordinates."""
        if self.path and len(self.path) >= 2:
            return list(self.path)
        return [(s.lat, s.lon) for s in self.stops]


class StopWithRoute(Stop):
    route_id: str


class NearestStop(BaseModel):
    stop: Stop
    route_id: str
    distance_km: float
    distance_m: float
    distance_text: str
    walk_minutes: int
