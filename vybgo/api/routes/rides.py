"""
Ride endpoints
==============

GET   /api/rides                   -- the caller's ride history, newest first
POST  /api/rides                   -- book a ride (starts the lifecycle simulation)
GET   /api/rides/{ride_id}         -- one of the caller's rides
PATCH /api/rides/{ride_id}/status  -- set the status (driver-app hook)
POST  /api/rides/admin/test-push   -- send a test notification to the caller's device
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vybgo.api.dependencies import (
    get_current_user,
    get_current_user_id,
    get_db,
    get_fcm_service,
    get_simulator,
)
from vybgo.api.schemas import (
    PushResultResponse,
    PushTestRequest,
    RideCreateRequest,
    RideResponse,
    RideStatusUpdateRequest,
)
from vybgo.domain.enums import RideStatus
from vybgo.infrastructure.fcm import FCMService
from vybgo.infrastructure.models import UserModel
from vybgo.infrastructure.repositories import RideRepository
from vybgo.workers.ride_simulator import RideSimulator

router = APIRouter(prefix="/rides", tags=["rides"])


@router.get("", response_model=list[RideResponse], summary="Ride history")
async def list_rides(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await RideRepository(db).list_for_user(user_id)


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Create a ride",
    responses={201: {"description": "Ride created; status updates are simulated."}},
)
async def create_ride(
    body: RideCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    simulator: RideSimulator = Depends(get_simulator),
):
    ride = await RideRepository(db).create_ride(
        user_id=user_id,
        pickup=body.pickup,
        dropoff=body.dropoff,
        vibe=body.vibe,
    )
    # The first step fires seconds later, after this request's commit.
    simulator.start(ride.id)
    return ride


@router.get("/{ride_id}", response_model=RideResponse, summary="Get a ride")
async def get_ride(
    ride_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    ride = await RideRepository(db).get_for_user(ride_id, user_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")
    return ride


@router.patch(
    "/{ride_id}/status",
    response_model=RideResponse,
    summary="Update ride status",
    description=(
        "Sets the ride's status.  Rides that are COMPLETED or CANCELLED "
        "cannot change again.  Moving to a terminal status stops the "
        "ride's simulation."
    ),
)
async def update_ride_status(
    ride_id: str,
    body: RideStatusUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    simulator: RideSimulator = Depends(get_simulator),
):
    repo = RideRepository(db)
    ride = await repo.get_for_user(ride_id, user_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")

    current = RideStatus(ride.status)
    if current.is_terminal:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot change status of a {current.value} ride",
        )

    if body.status.is_terminal:
        simulator.stop(ride_id)
    return await repo.update_status(ride_id, body.status)


@router.post(
    "/admin/test-push",
    response_model=PushResultResponse,
    summary="Send a test push notification to the caller's device",
)
async def send_test_push(
    body: PushTestRequest,
    user: UserModel = Depends(get_current_user),
    fcm: FCMService = Depends(get_fcm_service),
):
    if not user.fcm_token:
        raise HTTPException(
            status_code=400,
            detail="No FCM token found for this user. Register device first.",
        )

    result = await fcm.send_ride_notification(
        user.fcm_token, body.ride_id, body.status, "Test Driver"
    )
    return PushResultResponse(
        message="Test push sent",
        result={
            "success": result.success,
            "message_id": result.message_id,
            "error": result.error,
        },
    )
