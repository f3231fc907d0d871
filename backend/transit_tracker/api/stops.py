"""Stop REST API endpoints."""

from fastapi import APIRouter, Depends, Query

from transit_tracker.api.deps import get_services
from transit_tracker.schemas.route import NearestStop, StopWithRoute
from transit_tracker.schemas.vehicle import StopDetail
from transit_tracker.services import Services

router = APIRouter(prefix="/api/stops", tags=["stops"])


@router.get("", response_model=list[StopWithRoute])
async def list_stops(services: Services = Depends(get_services)):
    """Every stop, tagged with the route it belongs to."""
    return services.queries.list_stops()


@router.get("/search", response_model=list[StopWithRoute])
async def search_stops(
    q: str = Query(min_length=1),
    limit: int = Query(default=10, ge=1, le=50),
    services: Services = Depends(get_services),
):
    return services.queries.search_stops(q, limit=limit)


@router.get("/nearest", response_model=NearestStop)
async def nearest_stop(
    lat: float = Query(ge=-90, le=90),
    lon: float = Query(ge=-180, le=180),
    max_distance_m: float | None = Query(default=None, gt=0),
    services: Services = Depends(get_services),
):
    """Closest stop to a point, with walking time at 5 km/h."""
    max_km = max_distance_m / 1000 if max_distance_m is not None else None
    return services.queries.nearest_stop(lat, lon, max_km)


@router.get("/{stop_id}", response_model=StopDetail)
async def get_stop_detail(
    stop_id: str,
    dest: str | None = None,
    services: Services = Depends(get_services),
):
    """Vehicles on the stop's route: coming ones first by ETA, then gone ones."""
    return services.queries.stop_detail(stop_id, dest)
