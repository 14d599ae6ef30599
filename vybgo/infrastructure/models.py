"""
SQLAlchemy ORM models.

Tables
------
* ``users``  -- registered passengers (and admins)
* ``rides``  -- ride requests with their lifecycle status

Timestamps are set client-side so freshly flushed rows can be
serialised without a round-trip.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
)

from .database import Base
from vybgo.domain.enums import RideStatus, VibeType


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    fcm_token = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    pickup = Column(String(255), nullable=False)
    dropoff = Column(String(255), nullable=False)
    vibe = Column(Enum(VibeType), nullable=False)
    status = Column(Enum(RideStatus), default=RideStatus.PENDING, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("idx_rides_status", "status"),
        Index("idx_rides_user", "user_id"),
    )
