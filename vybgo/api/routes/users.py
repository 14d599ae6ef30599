"""
Device registration endpoints
=============================

POST   /api/users/fcm-token -- register the caller's push token
GET    /api/users/fcm-token -- read it back
DELETE /api/users/fcm-token -- forget it
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vybgo.api.dependencies import get_current_user_id, get_db
from vybgo.api.schemas import FcmTokenRequest, FcmTokenResponse, MessageResponse
from vybgo.infrastructure.repositories import UserRepository

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/fcm-token", response_model=MessageResponse, summary="Register FCM token")
async def set_fcm_token(
    body: FcmTokenRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if await UserRepository(db).set_fcm_token(user_id, body.token) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return MessageResponse(message="FCM token updated successfully")


@router.get("/fcm-token", response_model=FcmTokenResponse, summary="Get FCM token")
async def get_fcm_token(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return FcmTokenResponse(fcm_token=user.fcm_token)


@router.delete("/fcm-token", response_model=MessageResponse, summary="Clear FCM token")
async def clear_fcm_token(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if await UserRepository(db).set_fcm_token(user_id, None) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return MessageResponse(message="FCM token cleared successfully")
