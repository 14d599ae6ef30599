"""
FastAPI application factory.

* Registers routes for auth, vibes, rides, users and admin.
* Owns the ride simulator (and its timer registry) and the FCM client
  on ``app.state``; both are torn down via lifespan events.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vybgo.api.routes import admin, auth, rides, users, vibes
from vybgo.config import settings
from vybgo.infrastructure.database import async_session_factory
from vybgo.infrastructure.fcm import FCMService
from vybgo.infrastructure.repositories import SessionRideStore
from vybgo.workers.ride_simulator import RideSimulator
from vybgo.workers.scheduling import AsyncioScheduler
from vybgo.workers.timers import TimerRegistry

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


def build_simulator() -> RideSimulator:
    registry = TimerRegistry(AsyncioScheduler())
    return RideSimulator(SessionRideStore(async_session_factory), registry)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Drop pending simulation steps and close the FCM client on shutdown."""
    logger.info("VYBGO API starting")
    yield
    simulator: RideSimulator = app.state.simulator
    simulator.registry.cancel_everything()
    scheduler = simulator.registry.scheduler
    if isinstance(scheduler, AsyncioScheduler):
        await scheduler.drain()
    await app.state.fcm.aclose()
    logger.info("VYBGO API stopped")


def create_app(
    simulator: Optional[RideSimulator] = None,
    fcm: Optional[FCMService] = None,
) -> FastAPI:
    app = FastAPI(
        title="VYBGO API",
        description=(
            "Ride-hailing demo backend: accounts, vibe-tagged rides with a "
            "simulated driver lifecycle, and push notifications."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.simulator = simulator or build_simulator()
    app.state.fcm = fcm or FCMService(
        settings.fcm_server_api_key,
        endpoint=settings.fcm_endpoint,
        timeout=settings.fcm_timeout_seconds,
    )

    # Routers
    app.include_router(auth.router, prefix="/api")
    app.include_router(vibes.router, prefix="/api")
    app.include_router(rides.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    return app
