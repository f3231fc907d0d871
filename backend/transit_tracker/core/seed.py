"""Static network configuration: built-in Ahmedabad demo data or a JSON file."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import orjson

from transit_tracker.schemas.route import Route
from transit_tracker.schemas.simulation import SimulatedVehicleConfig

logger = logging.getLogger(__name__)

_ROUTES = [
    {
        "id": "R1",
        "name": "Lal Darwaja - Gurukul",
        "color": "#e53935",
        "stops": [
            {"id": "S1", "name": "Lal Darwaja", "lat": 23.026239, "lon": 72.587448},
            {"id": "S2", "name": "Khadia", "lat": 23.030000, "lon": 72.585000},
            {"id": "S3", "name": "Gheekanta", "lat": 23.032000, "lon": 72.583000},
            {"id": "S4", "name": "Income Tax", "lat": 23.038396, "lon": 72.561848},
            {"id": "S5", "name": "Navrangpura", "lat": 23.046896, "lon": 72.556848},
            {"id": "S6", "name": "Stadium", "lat": 23.051396, "lon": 72.551348},
            {"id": "S7", "name": "University", "lat": 23.056896, "lon": 72.545848},
            {"id": "S8", "name": "Commerce Six Roads", "lat": 23.061396, "lon": 72.540848},
            {"id": "S9", "name": "Gurukul", "lat": 23.066396, "lon": 72.535848},
        ],
    },
    {
        "id": "R2",
        "name": "Bapunagar - Maninagar",
        "color": "#1e88e5",
        "stops": [
            {"id": "S10", "name": "Bapunagar", "lat": 23.041896, "lon": 72.631848},
            {"id": "S11", "name": "Ramol", "lat": 23.045000, "lon": 72.628000},
            {"id": "S12", "name": "Saraspur", "lat": 23.051396, "lon": 72.621848},
            {"id": "S13", "name": "Naroda", "lat": 23.054000, "lon": 72.618000},
            {"id": "S14", "name": "CTM Cross Road", "lat": 23.056896, "lon": 72.611848},
            {"id": "S15", "name": "Amraiwadi", "lat": 23.060000, "lon": 72.605000},
            {"id": "S16", "name": "Maninagar", "lat": 23.066396, "lon": 72.601848},
        ],
    },
    {
        "id": "R3",
        "name": "SG Highway - Gota",
        "color": "#43a047",
        "stops": [
            {"id": "S17", "name": "Prahlad Nagar", "lat": 23.031396, "lon": 72.511848},
            {"id": "S18", "name": "Satellite", "lat": 23.036896, "lon": 72.521848},
            {"id": "S19", "name": "Jodhpur Cross", "lat": 23.041396, "lon": 72.531848},
            {"id": "S20", "name": "Shyamal Cross Road", "lat": 23.046000, "lon": 72.536000},
            {"id": "S21", "name": "Vastrapur", "lat": 23.051000, "lon": 72.541000},
            {"id": "S22", "name": "Gurudwara", "lat": 23.056000, "lon": 72.546000},
            {"id": "S23", "name": "Thaltej", "lat": 23.061000, "lon": 72.551000},
            {"id": "S24", "name": "Gota", "lat": 23.091396, "lon": 72.541848},
        ],
    },
    {
        "id": "R4",
        "name": "Isanpur - Narol",
        "color": "#fb8c00",
        "stops": [
            {"id": "S25", "name": "Isanpur", "lat": 22.991396, "lon": 72.601848},
            {"id": "S26", "name": "Vatva", "lat": 22.996000, "lon": 72.596000},
            {"id": "S27", "name": "Narol", "lat": 23.001396, "lon": 72.591848},
            {"id": "S28", "name": "Aslali", "lat": 23.006000, "lon": 72.586000},
            {"id": "S29", "name": "Juhapura", "lat": 23.011000, "lon": 72.581000},
        ],
    },
    {
        "id": "R5",
        "name": "Sabarmati - Gandhigram",
        "color": "#8e24aa",
        "stops": [
            {"id": "S30", "name": "Sabarmati", "lat": 23.081396, "lon": 72.581848},
            {"id": "S31", "name": "Ranip", "lat": 23.086000, "lon": 72.576000},
            {"id": "S32", "name": "Vadaj", "lat": 23.091000, "lon": 72.571000},
            {"id": "S33", "name": "Usmanpura", "lat": 23.051396, "lon": 72.571848},
            {"id": "S34", "name": "Paldi", "lat": 23.041396, "lon": 72.566848},
            {"id": "S35", "name": "Gandhigram", "lat": 23.031396, "lon": 72.561848},
        ],
    },
]

_VEHICLE_ROUTES = {
    "BUS-001": "R1",
    "BUS-002": "R2",
    "BUS-003": "R3",
    "BUS-101": "R1",
    "BUS-102": "R1",
    "BUS-103": "R1",
}

_SIMULATED_VEHICLES = [
    {"vehicle_id": "SBUS-001", "route_id": "R1", "speed_kmph": 28.8},
    {"vehicle_id": "SBUS-002", "route_id": "R1", "speed_kmph": 25.2, "start_index": 5, "direction": "reverse"},
    {"vehicle_id": "SBUS-003", "route_id": "R2", "speed_kmph": 32.4, "start_index": 1},
]


@dataclass
class NetworkConfig:
    routes: list[Route] = field(default_factory=list)
    vehicle_routes: dict[str, str] = field(default_factory=dict)
    simulated_vehicles: list[SimulatedVehicleConfig] = field(default_factory=list)


def _build(data: dict) -> NetworkConfig:
    return NetworkConfig(
        routes=[Route.model_validate(r) for r in data.get("routes", [])],
        vehicle_routes={str(k): str(v) for k, v in data.get("vehicle_routes", {}).items()},
        simulated_vehicles=[
            SimulatedVehicleConfig.model_validate(v) for v in data.get("simulated_vehicles", [])
        ],
    )


def default_network() -> NetworkConfig:
    return _build({
        "routes": _ROUTES,
        "vehicle_routes": _VEHICLE_ROUTES,
        "simulated_vehicles": _SIMULATED_VEHICLES,
    })


def load_network(path: str = "") -> NetworkConfig:
    """Load the network from a JSON file, or the built-in demo network if no path is given.

    The file holds ``routes``, optional ``vehicle_routes`` and optional
    ``simulated_vehicles``, in the same shapes the admin API accepts.
    """
    if not path:
        return default_network()
    data = orjson.loads(Path(path).read_bytes())
    network = _build(data)
    logger.info(
        "Loaded %d routes, %d vehicle mappings, %d simulated vehicles from %s",
        len(network.routes), len(network.vehicle_routes), len(network.simulated_vehicles), path,
    )
    return network
