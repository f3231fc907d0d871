"""Resolve which route a vehicle is running on."""

import logging

from transit_tracker.core.vehicle_store import VehicleStore

logger = logging.getLogger(__name__)


class VehicleRouteMap:
    """Fallback vehicle -> route table, consulted after live telemetry."""

    def __init__(self, store: VehicleStore, mapping: dict[str, str] | None = None) -> None:
        self._store = store
        self._fallback: dict[str, str] = dict(mapping or {})

    def route_for_vehicle(self, vehicle_id: str) -> str | None:
        """Telemetry-declared route, then the fallback table, then None."""
        record = self._store.get(vehicle_id)
        if record is not None and record.route_id:
            return record.route_id
        return self._fallback.get(vehicle_id)

    def set_mapping(self, vehicle_id: str, route_id: str) -> None:
        """Update the fallback table. Stored telemetry is left untouched."""
        previous = self._fallback.get(vehicle_id)
        self._fallback[vehicle_id] = route_id
        if previous != route_id:
            logger.info("Vehicle %s mapped to route %s (was %s)", vehicle_id, route_id, previous)

    def mappings(self) -> dict[str, str]:
        return dict(self._fallback)
