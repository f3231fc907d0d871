"""Latest telemetry per vehicle, merged in place on every update."""

import datetime
import logging
from collections.abc import Callable
from typing import Any

from transit_tracker.schemas.vehicle import NextStopInfo, VehicleRecord

logger = logging.getLogger(__name__)

# Reported speed above which a vehicle counts as moving (km/h)
MOVING_SPEED_KMH = 1.0


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class VehicleStore:
    """vehicle_id -> VehicleRecord. Records are never expired."""

    def __init__(self, clock: Callable[[], datetime.datetime] = _utcnow) -> None:
        self._clock = clock
        self._records: dict[str, VehicleRecord] = {}

    def apply_telemetry(self, vehicle_id: str, fields: dict[str, Any]) -> VehicleRecord:
        """Shallow-merge ``fields`` into the vehicle's record and return it.

        Fields missing from the update keep their previous values. The
        ``moving`` flag is derived from speed unless the update sets it.
        """
        current = self._records.get(vehicle_id)
        merged: dict[str, Any] = current.model_dump() if current else {}
        merged.update(fields)
        merged["vehicle_id"] = vehicle_id
        merged["last_update"] = self._clock()
        if "moving" not in fields:
            merged["moving"] = (merged.get("speed_kmph") or 0.0) > MOVING_SPEED_KMH

        record = VehicleRecord.model_validate(merged)
        if current is None:
            logger.info("New vehicle %s at (%.5f, %.5f)", vehicle_id, record.lat, record.lon)
        self._records[vehicle_id] = record
        return record

    def set_route_progress(
        self, vehicle_id: str, route_id: str | None, next_stop: NextStopInfo | None,
    ) -> None:
        """Store the derived route and next stop on an existing record."""
        record = self._records.get(vehicle_id)
        if record is not None:
            record.resolved_route_id = route_id
            record.next_stop = next_stop

    def get(self, vehicle_id: str) -> VehicleRecord | None:
        return self._records.get(vehicle_id)

    def all(self) -> dict[str, VehicleRecord]:
        return dict(self._records)

    def ids(self) -> list[str]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
