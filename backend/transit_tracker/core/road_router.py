"""Road routing via OSRM, with a straight-line estimate when OSRM is unavailable."""

import logging
import math
from typing import Literal

import httpx
from pydantic import BaseModel

from transit_tracker.core.geo import Coord, distance_m

logger = logging.getLogger(__name__)

Profile = Literal["walking", "cycling", "driving"]

# Fallback travel speeds (m/s) per profile
FALLBACK_SPEED_MS: dict[str, float] = {
    "walking": 1.4,
    "cycling": 4.0,
    "driving": 11.0,
}


class RoadRoute(BaseModel):
    distance_m: float
    duration_s: float
    geometry: list[tuple[float, float]]  # [(lat, lon), ...]
    source: Literal["osrm", "straight_line"]


def straight_line_route(origin: Coord, destination: Coord, profile: Profile = "walking") -> RoadRoute:
    dist = distance_m(origin, destination)
    speed = FALLBACK_SPEED_MS.get(profile, FALLBACK_SPEED_MS["walking"])
    return RoadRoute(
        distance_m=dist,
        duration_s=float(math.ceil(dist / speed)),
        geometry=[origin, destination],
        source="straight_line",
    )


class RoadRouter:
    """Async OSRM client. Never raises for upstream failures."""

    def __init__(
        self,
        base_url: str = "https://router.project-osrm.org",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def route(self, origin: Coord, destination: Coord, profile: Profile = "walking") -> RoadRoute:
        """Road route between two points, or a straight-line estimate on failure."""
        coords = f"{origin[1]:.6f},{origin[0]:.6f};{destination[1]:.6f},{destination[0]:.6f}"
        url = f"/route/v1/{profile}/{coords}"
        try:
            resp = await self._client.get(url, params={"overview": "full", "geometries": "geojson"})
            resp.raise_for_status()
            data = resp.json()
            if data.get("code") == "Ok" and data.get("routes"):
                best = data["routes"][0]
                # Convert [lon, lat] -> (lat, lon)
                geometry = [(c[1], c[0]) for c in best["geometry"]["coordinates"]]
                return RoadRoute(
                    distance_m=float(best["distance"]),
                    duration_s=float(best["duration"]),
                    geometry=geometry,
                    source="osrm",
                )
            logger.warning("OSRM returned no route (code=%s), using straight line", data.get("code"))
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("OSRM %s route failed (%s), using straight line", profile, e)
        return straight_line_route(origin, destination, profile)
