"""Trip planning endpoint."""

from fastapi import APIRouter, Depends

from transit_tracker.api.deps import get_services
from transit_tracker.schemas.trip import TripPlan, TripPlanRequest
from transit_tracker.services import Services

router = APIRouter(prefix="/api", tags=["trips"])


@router.post("/trip-plan", response_model=TripPlan)
async def plan_trip(body: TripPlanRequest, services: Services = Depends(get_services)):
    """Walk to the nearest stop, ride one route, walk to the destination."""
    return await services.planner.plan(
        (body.from_lat, body.from_lon),
        (body.to_lat, body.to_lon),
        body.mode,
    )
