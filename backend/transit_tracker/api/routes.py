"""Route REST API endpoints."""

from fastapi import APIRouter, Depends

from transit_tracker.api.deps import get_services
from transit_tracker.schemas.route import Route
from transit_tracker.services import Services

router = APIRouter(prefix="/api/routes", tags=["routes"])


@router.get("", response_model=list[Route])
async def list_routes(services: Services = Depends(get_services)):
    """All routes with stops, path and color, in registration order."""
    return services.queries.list_routes()


@router.get("/{route_id}", response_model=Route)
async def get_route(route_id: str, services: Services = Depends(get_services)):
    return services.queries.get_route(route_id)
