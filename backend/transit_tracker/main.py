"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from transit_tracker.api import admin, routes, simulation, stops, trips, vehicles, ws
from transit_tracker.config import Settings, settings as default_settings
from transit_tracker.core.scheduler import create_scheduler
from transit_tracker.exceptions import TransitError
from transit_tracker.services import Services, build_services

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Build the application around one explicitly owned set of services."""
    settings = settings or default_settings
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown."""
        await services.broadcaster.connect()

        scheduler = create_scheduler()
        services.simulator.scheduler = scheduler
        scheduler.start()

        services.start_mqtt(asyncio.get_running_loop())
        if settings.simulation_autostart:
            services.simulator.start()

        logger.info(
            "Transit tracker started - %d routes, %d stops",
            len(services.state.registry.list_routes()), services.state.registry.stop_count,
        )

        yield

        # Shutdown
        services.simulator.stop()
        services.stop_mqtt()
        scheduler.shutdown(wait=False)
        await services.router.close()
        await services.broadcaster.close()
        logger.info("Transit tracker shut down")

    app = FastAPI(
        title="Transit Tracker",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TransitError)
    async def transit_error_handler(request: Request, exc: TransitError):
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(vehicles.router)
    app.include_router(routes.router)
    app.include_router(stops.router)
    app.include_router(admin.router)
    app.include_router(simulation.router)
    app.include_router(trips.router)
    app.include_router(ws.router)

    @app.get("/api/health")
    async def health():
        mqtt = services.mqtt
        return {
            "status": "ok",
            "mqtt": "connected" if mqtt and mqtt.connected else ("connecting" if mqtt else "disabled"),
            "simulation": "running" if services.simulator.running else "stopped",
            "vehicles": len(services.state.vehicles),
            "telemetry_accepted": services.ingestor.accepted,
            "telemetry_rejected": services.ingestor.rejected,
        }

    return app


logging.basicConfig(
    level=default_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)

app = create_app()
