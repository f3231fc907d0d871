"""Simulation control endpoints."""

from fastapi import APIRouter, Depends

from transit_tracker.api.deps import get_services
from transit_tracker.schemas.simulation import (
    SimulatedVehicleConfig,
    SimulationStatus,
    SpeedMultiplierRequest,
)
from transit_tracker.services import Services

router = APIRouter(prefix="/api/simulation", tags=["simulation"])


@router.post("/start", response_model=SimulationStatus)
async def start_simulation(services: Services = Depends(get_services)):
    services.simulator.start()
    return services.simulator.status()


@router.post("/stop", response_model=SimulationStatus)
async def stop_simulation(services: Services = Depends(get_services)):
    services.simulator.stop()
    return services.simulator.status()


@router.post("/speed", response_model=SimulationStatus)
async def set_speed(body: SpeedMultiplierRequest, services: Services = Depends(get_services)):
    """Change the tick rate; the running loop restarts with the new interval."""
    services.simulator.set_speed_multiplier(body.multiplier)
    return services.simulator.status()


@router.get("/status", response_model=SimulationStatus)
async def simulation_status(services: Services = Depends(get_services)):
    return services.simulator.status()


@router.post("/vehicles", response_model=SimulationStatus)
async def add_simulated_vehicle(body: SimulatedVehicleConfig, services: Services = Depends(get_services)):
    services.simulator.add_vehicle(body)
    return services.simulator.status()


@router.delete("/vehicles/{vehicle_id}", response_model=SimulationStatus)
async def remove_simulated_vehicle(vehicle_id: str, services: Services = Depends(get_services)):
    services.simulator.remove_vehicle(vehicle_id)
    return services.simulator.status()
