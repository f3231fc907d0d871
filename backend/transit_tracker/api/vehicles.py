"""Vehicle REST API endpoints."""

from fastapi import APIRouter, Depends

from transit_tracker.api.deps import get_services
from transit_tracker.schemas.vehicle import VehicleRecord
from transit_tracker.services import Services

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"])


@router.get("", response_model=list[VehicleRecord])
async def list_vehicles(route: str | None = None, services: Services = Depends(get_services)):
    """Full snapshot of every vehicle ever seen, optionally filtered by resolved route."""
    vehicles = services.queries.list_vehicles()
    if route:
        resolve = services.state.assignments.route_for_vehicle
        vehicles = [v for v in vehicles if resolve(v.vehicle_id) == route]
    return vehicles


@router.get("/ids", response_model=list[str])
async def list_vehicle_ids(services: Services = Depends(get_services)):
    return services.queries.vehicle_ids()


@router.get("/{vehicle_id}", response_model=VehicleRecord)
async def get_vehicle(vehicle_id: str, services: Services = Depends(get_services)):
    return services.queries.get_vehicle(vehicle_id)
