"""Wiring of the tracker components around one shared TransitState."""

import asyncio
import logging
from dataclasses import dataclass

from transit_tracker.config import Settings
from transit_tracker.core.broadcaster import Broadcaster
from transit_tracker.core.ingest import TelemetryIngestor
from transit_tracker.core.mqtt_listener import MqttTelemetryListener
from transit_tracker.core.query_service import QueryService
from transit_tracker.core.road_router import RoadRouter
from transit_tracker.core.seed import NetworkConfig, load_network
from transit_tracker.core.simulator import Simulator
from transit_tracker.core.state import TransitState
from transit_tracker.core.trip_planner import TripPlanner

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    state: TransitState
    broadcaster: Broadcaster
    ingestor: TelemetryIngestor
    simulator: Simulator
    queries: QueryService
    router: RoadRouter
    planner: TripPlanner
    mqtt: MqttTelemetryListener | None = None

    def start_mqtt(self, loop: asyncio.AbstractEventLoop) -> None:
        if not self.settings.mqtt_url:
            logger.info("MQTT disabled (no mqtt_url)")
            return
        self.mqtt = MqttTelemetryListener(
            loop=loop,
            broker_url=self.settings.mqtt_url,
            topic=self.settings.mqtt_topic,
            on_message=self.ingestor.handle_message,
            client_id=self.settings.mqtt_client_id,
            reconnect_seconds=self.settings.mqtt_reconnect_seconds,
        )
        try:
            self.mqtt.start()
        except Exception:
            logger.exception("Failed to start MQTT listener - simulation only")
            self.mqtt = None

    def stop_mqtt(self) -> None:
        if self.mqtt is not None:
            self.mqtt.stop()
            self.mqtt = None


def build_services(settings: Settings, network: NetworkConfig | None = None) -> Services:
    if network is None:
        network = load_network(settings.routes_file)
    state = TransitState.from_seed(network.routes, network.vehicle_routes)
    broadcaster = Broadcaster(settings.redis_url)
    ingestor = TelemetryIngestor(state, broadcaster)
    router = RoadRouter(settings.osrm_base_url, timeout=settings.osrm_timeout_seconds)
    return Services(
        settings=settings,
        state=state,
        broadcaster=broadcaster,
        ingestor=ingestor,
        simulator=Simulator(
            state,
            ingestor,
            network.simulated_vehicles,
            tick_seconds=settings.simulation_tick_seconds,
            dwell_seconds=settings.simulation_dwell_seconds,
        ),
        queries=QueryService(state, walking_speed_kmh=settings.walking_speed_kmh),
        router=router,
        planner=TripPlanner(state, router),
    )
