"""Apply inbound position reports to the vehicle store and push them out."""

import logging
from typing import Any

import orjson
import pydantic

from transit_tracker.core.broadcaster import Broadcaster
from transit_tracker.core.eta_calculator import next_stop_info
from transit_tracker.core.state import TransitState
from transit_tracker.schemas.vehicle import TelemetryMessage, VehicleRecord

logger = logging.getLogger(__name__)


def topic_vehicle_id(topic: str) -> str | None:
    """Extract ``{id}`` from ``vehicles/{id}/telemetry``."""
    parts = topic.split("/")
    if len(parts) == 3 and parts[0] == "vehicles" and parts[2] == "telemetry":
        return parts[1] or None
    return None


def parse_telemetry(payload: bytes | str) -> TelemetryMessage | None:
    """Decode and validate a telemetry payload. Returns None if malformed."""
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError:
        logger.warning("Dropping non-JSON telemetry payload: %r", payload[:200])
        return None
    if not isinstance(data, dict):
        logger.warning("Dropping telemetry payload that is not an object: %r", data)
        return None
    try:
        return TelemetryMessage.model_validate(data)
    except pydantic.ValidationError as e:
        logger.warning(
            "Dropping invalid telemetry payload (%d errors): %s",
            e.error_count(), e.errors(include_url=False)[:3],
        )
        return None


class TelemetryIngestor:
    """Single entry point for telemetry, real or simulated."""

    def __init__(self, state: TransitState, broadcaster: Broadcaster) -> None:
        self.state = state
        self.broadcaster = broadcaster
        self.accepted = 0
        self.rejected = 0

    async def handle_message(self, topic: str, payload: bytes | str) -> VehicleRecord | None:
        """Process one broker message. Malformed input is logged and dropped."""
        msg = parse_telemetry(payload)
        if msg is None:
            self.rejected += 1
            return None

        topic_id = topic_vehicle_id(topic)
        if topic_id and topic_id != msg.vehicle_id:
            logger.debug("Topic id %s differs from payload vehicle_id %s", topic_id, msg.vehicle_id)

        fields = msg.to_fields()
        fields["simulated"] = False
        try:
            record = await self.ingest(msg.vehicle_id, fields)
        except pydantic.ValidationError as e:
            self.rejected += 1
            logger.warning(
                "Dropping telemetry for %s that does not merge into its record: %s",
                msg.vehicle_id, e.errors(include_url=False)[:3],
            )
            return None
        logger.debug("MQTT %s -> %s", topic, record.vehicle_id)
        return record

    async def ingest(self, vehicle_id: str, fields: dict[str, Any]) -> VehicleRecord:
        """Merge fields into the store, refresh the derived route and next stop, broadcast."""
        record = self.state.vehicles.apply_telemetry(vehicle_id, fields)
        route_id = self.state.assignments.route_for_vehicle(vehicle_id)
        route = self.state.registry.get_route(route_id) if route_id else None
        next_stop = next_stop_info(record, route) if route is not None else None
        self.state.vehicles.set_route_progress(vehicle_id, route_id, next_stop)
        self.accepted += 1

        await self.broadcaster.publish(record.model_dump(mode="json"))
        return record
