"""
Admin / observability endpoints
===============================

GET /api/admin/simulations -- rides that still hold simulation timers
GET /api/health            -- simple health check
"""

from fastapi import APIRouter, Depends

from vybgo.api.dependencies import get_simulator, require_admin
from vybgo.api.schemas import HealthResponse, SimulationResponse
from vybgo.workers.ride_simulator import RideSimulator

router = APIRouter(tags=["admin"])


@router.get(
    "/admin/simulations",
    response_model=list[SimulationResponse],
    summary="List rides with a running simulation",
    dependencies=[Depends(require_admin)],
)
async def list_simulations(simulator: RideSimulator = Depends(get_simulator)):
    registry = simulator.registry
    return [
        SimulationResponse(ride_id=ride_id, timers=registry.pending(ride_id))
        for ride_id in registry.active_rides()
    ]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
