"""Threaded paho-mqtt subscriber that hands telemetry to the asyncio loop."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlsplit

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)

DEFAULT_PORT = 1883
DEFAULT_TLS_PORT = 8883

MessageHandler = Callable[[str, bytes], Awaitable[Any]]


def parse_broker_url(url: str) -> tuple[str, int, bool]:
    """Split ``mqtt://host:port`` into (host, port, use_tls)."""
    value = url.strip()
    if not value:
        raise ValueError("Broker URL is empty")
    if "://" not in value:
        value = f"mqtt://{value}"
    parts = urlsplit(value)
    if not parts.hostname:
        raise ValueError(f"Broker URL has no host: {url}")
    tls = parts.scheme in ("mqtts", "ssl")
    port = parts.port or (DEFAULT_TLS_PORT if tls else DEFAULT_PORT)
    return parts.hostname, port, tls


class MqttTelemetryListener:
    """Subscribes to the telemetry topic and schedules each message on ``loop``.

    paho runs its network loop in a background thread and reconnects on a
    fixed delay whenever the broker connection drops.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        broker_url: str,
        topic: str,
        on_message: MessageHandler,
        client_id: str = "",
        reconnect_seconds: int = 5,
        keepalive: int = 60,
    ) -> None:
        self._loop = loop
        self._host, self._port, self._tls = parse_broker_url(broker_url)
        self._topic = topic
        self._on_message = on_message
        self._client_id = client_id
        self._reconnect_seconds = reconnect_seconds
        self._keepalive = keepalive
        self._client: mqtt.Client | None = None
        self.connected = False

    @property
    def is_running(self) -> bool:
        return self._client is not None

    def start(self) -> None:
        self.stop()
        client = mqtt.Client(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
        )
        client.enable_logger(logger)
        client.reconnect_delay_set(min_delay=self._reconnect_seconds, max_delay=self._reconnect_seconds)
        if self._tls:
            client.tls_set()

        client.on_connect = self._handle_connect
        client.on_message = self._handle_message
        client.on_disconnect = self._handle_disconnect

        logger.info("Connecting to MQTT broker %s:%d", self._host, self._port)
        # connect_async lets loop_start keep retrying if the broker is down at startup
        client.connect_async(self._host, self._port, keepalive=self._keepalive)
        client.loop_start()
        self._client = client

    def stop(self) -> None:
        client = self._client
        self._client = None
        self.connected = False
        if client is None:
            return
        try:
            client.disconnect()
        finally:
            client.loop_stop()
            logger.info("MQTT listener stopped")

    def _handle_connect(self, c: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any) -> None:
        if reason_code.is_failure:
            logger.warning("MQTT connect failed: %s", reason_code)
            return
        self.connected = True
        logger.info("Connected to MQTT broker, subscribing to %s", self._topic)
        c.subscribe(self._topic, qos=0)

    def _handle_disconnect(
        self, _c: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any,
    ) -> None:
        self.connected = False
        if self._client is not None:
            logger.warning(
                "MQTT disconnected (%s), retrying every %ds", reason_code, self._reconnect_seconds,
            )

    def _handle_message(self, _c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
        future = asyncio.run_coroutine_threadsafe(self._on_message(msg.topic, msg.payload), self._loop)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future: Any) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Telemetry handler failed", exc_info=exc)
