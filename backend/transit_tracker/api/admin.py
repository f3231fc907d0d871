"""Administrative endpoints: vehicle->route mapping and route management."""

import logging

from fastapi import APIRouter, Depends

from transit_tracker.api.deps import get_services
from transit_tracker.schemas.route import Route
from transit_tracker.schemas.vehicle import VehicleRouteMapping
from transit_tracker.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/vehicle-routes", response_model=dict[str, str])
async def get_vehicle_routes(services: Services = Depends(get_services)):
    return services.state.assignments.mappings()


@router.post("/vehicle-routes")
async def set_vehicle_route(body: VehicleRouteMapping, services: Services = Depends(get_services)):
    """Set the fallback route for a vehicle whose telemetry carries none."""
    if services.state.registry.get_route(body.route_id) is None:
        logger.warning("Mapping vehicle %s to unknown route %s", body.vehicle_id, body.route_id)
    services.state.assignments.set_mapping(body.vehicle_id, body.route_id)
    return {"ok": True, "vehicle_routes": services.state.assignments.mappings()}


@router.post("/routes")
async def add_route(route: Route, services: Services = Depends(get_services)):
    """Add a route, or replace an existing one with the same id."""
    services.state.registry.add_route(route)
    return {"ok": True, "route": route}
