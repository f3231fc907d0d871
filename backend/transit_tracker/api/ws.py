"""WebSocket endpoint for real-time vehicle updates."""

import asyncio
import logging

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from transit_tracker.services import Services

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/vehicles")
async def vehicle_ws(websocket: WebSocket) -> None:
    """Stream every telemetry update, starting with a snapshot of all vehicles."""
    await websocket.accept()
    services: Services = websocket.app.state.services

    # Subscribe before the snapshot so updates published meanwhile are queued
    queue = services.broadcaster.subscribe()
    try:
        snapshot = {
            "type": "snapshot",
            "vehicles": [v.model_dump(mode="json") for v in services.queries.list_vehicles()],
        }
        await websocket.send_bytes(orjson.dumps(snapshot))

        while True:
            data = await queue.get()
            await websocket.send_bytes(data)
    except WebSocketDisconnect:
        pass
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.exception("WebSocket error")
    finally:
        services.broadcaster.unsubscribe(queue)
