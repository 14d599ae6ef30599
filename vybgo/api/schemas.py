"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from vybgo.domain.enums import RideStatus, VibeType

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\d\s\-+()]+$")
PASSWORD_SPECIALS = "!@#$%^&*"


# ── Requests ──────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _email_format(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_RE.match(v):
            raise ValueError("Invalid email format")
        return v

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str) -> str:
        problems = []
        if len(v) < 8:
            problems.append("Password must be at least 8 characters")
        if len(v.encode("utf-8")) > 72:
            problems.append("Password must be at most 72 bytes")
        if not re.search(r"[A-Z]", v):
            problems.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            problems.append("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", v):
            problems.append("Password must contain at least one number")
        if not any(c in PASSWORD_SPECIALS for c in v):
            problems.append(
                f"Password must contain at least one special character ({PASSWORD_SPECIALS})"
            )
        if problems:
            raise ValueError("; ".join(problems))
        return v

    @field_validator("name")
    @classmethod
    def _name_format(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if "<" in v or ">" in v:
            raise ValueError("Invalid name format")
        return v

    @field_validator("phone")
    @classmethod
    def _phone_format(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if not PHONE_RE.match(v) or not 10 <= len(v) <= 20:
            raise ValueError("Invalid phone format")
        return v


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RideCreateRequest(BaseModel):
    pickup: str = Field(..., min_length=1, max_length=255)
    dropoff: str = Field(..., min_length=1, max_length=255)
    vibe: VibeType


class RideStatusUpdateRequest(BaseModel):
    status: RideStatus


class FcmTokenRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=512)


class PushTestRequest(BaseModel):
    ride_id: str = "test-ride-123"
    status: str = "accepted"


# ── Responses ─────────────────────────────────────────────────────────


class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    token: str


class WhoAmIResponse(BaseModel):
    user: UserResponse


class RideResponse(BaseModel):
    id: str
    user_id: str
    pickup: str
    dropoff: str
    vibe: VibeType
    status: RideStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VibeResponse(BaseModel):
    id: VibeType
    name: str
    description: str
    color: str


class FcmTokenResponse(BaseModel):
    fcm_token: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class PushResultResponse(BaseModel):
    message: str
    result: dict[str, Any]


class SimulationResponse(BaseModel):
    ride_id: str
    timers: int


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "VYBGO API is running"
