"""Fan-out of telemetry updates to WebSocket subscribers and Redis."""

import asyncio
import logging
from typing import Any

import orjson
import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

CHANNEL = "transit:telemetry"


class Broadcaster:
    """Pushes every accepted telemetry update to all connected observers."""

    def __init__(self, redis_url: str = "") -> None:
        self._redis_url = redis_url
        self._redis: aioredis.Redis | None = None
        self._subscribers: set[asyncio.Queue] = set()

    async def connect(self) -> None:
        if self._redis_url:
            self._redis = aioredis.from_url(self._redis_url, decode_responses=False)
            logger.info("Mirroring telemetry to Redis channel %s", CHANNEL)

    async def close(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    @staticmethod
    def encode(record: dict[str, Any]) -> bytes:
        return orjson.dumps({**record, "type": "telemetry"})

    async def publish(self, record: dict[str, Any]) -> None:
        """Publish one vehicle's full record as a ``telemetry`` envelope."""
        payload = self.encode(record)

        if self._redis:
            try:
                await self._redis.publish(CHANNEL, payload)
            except Exception:
                logger.exception("Failed to publish to Redis")

        dead = set()
        for q in self._subscribers:
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                dead.add(q)
        if dead:
            logger.warning("Dropping %d slow subscriber(s)", len(dead))
        self._subscribers -= dead

    def subscribe(self) -> asyncio.Queue:
        """Create a new subscriber queue for WebSocket fan-out."""
        q: asyncio.Queue = asyncio.Queue(maxsize=100)
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        self._subscribers.discard(q)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
