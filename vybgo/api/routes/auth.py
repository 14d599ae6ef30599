"""
Auth endpoints
==============

POST /api/auth/register -- create an account and return a token
POST /api/auth/login    -- exchange credentials for a token
GET  /api/auth/whoami   -- the authenticated user
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vybgo.api.dependencies import get_current_user, get_db
from vybgo.api.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
    WhoAmIResponse,
)
from vybgo.infrastructure.models import UserModel
from vybgo.infrastructure.repositories import UserRepository
from vybgo.infrastructure.security import (
    create_access_token,
    hash_password,
    verify_password,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    summary="Register a new user",
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    repo = UserRepository(db)
    if await repo.get_by_email(body.email):
        raise HTTPException(status_code=400, detail="User already exists")

    user = await repo.create(
        UserModel(
            email=body.email,
            password_hash=hash_password(body.password),
            name=body.name,
            phone=body.phone,
        )
    )
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        token=create_access_token(user.id),
    )


@router.post("/login", response_model=AuthResponse, summary="Log in")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await UserRepository(db).get_by_email(body.email.strip())
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        token=create_access_token(user.id),
    )


@router.get("/whoami", response_model=WhoAmIResponse, summary="Current user")
async def whoami(user: UserModel = Depends(get_current_user)):
    return WhoAmIResponse(user=UserResponse.model_validate(user))
