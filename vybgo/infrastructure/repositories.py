"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  ``SessionRideStore`` adapts the ride
repository to the store interface the lifecycle simulator consumes; it
opens its own short-lived session per call because simulator callbacks
run detached from any request.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import RideModel, UserModel
from vybgo.domain.entities import Ride, RideNotFoundError
from vybgo.domain.enums import RideStatus, VibeType


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_ride(
        self,
        *,
        user_id: str,
        pickup: str,
        dropoff: str,
        vibe: VibeType,
        status: RideStatus = RideStatus.PENDING,
    ) -> RideModel:
        ride = RideModel(
            user_id=user_id,
            pickup=pickup,
            dropoff=dropoff,
            vibe=vibe,
            status=status,
        )
        self.session.add(ride)
        await self.session.flush()
        return ride

    async def get_by_id(self, ride_id: str) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id)

    async def get_for_user(self, ride_id: str, user_id: str) -> Optional[RideModel]:
        result = await self.session.execute(
            select(RideModel).where(
                RideModel.id == ride_id, RideModel.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: str) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.user_id == user_id)
            .order_by(RideModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_status(self, ride_id: str, status: RideStatus) -> RideModel:
        ride = await self.get_by_id(ride_id)
        if ride is None:
            raise RideNotFoundError(ride_id)
        ride.status = status
        await self.session.flush()
        return ride


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[UserModel]:
        result = await self.session.execute(
            select(UserModel).order_by(UserModel.created_at)
        )
        return list(result.scalars().all())

    async def set_fcm_token(
        self, user_id: str, token: Optional[str]
    ) -> Optional[UserModel]:
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        user.fcm_token = token
        await self.session.flush()
        return user


def to_entity(model: RideModel) -> Ride:
    return Ride(
        id=model.id,
        user_id=model.user_id,
        pickup=model.pickup,
        dropoff=model.dropoff,
        vibe=VibeType(model.vibe),
        status=RideStatus(model.status),
        created_at=model.created_at,
    )


class SessionRideStore:
    """Ride store backed by the relational database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_by_id(self, ride_id: str) -> Optional[Ride]:
        async with self._session_factory() as session:
            ride = await RideRepository(session).get_by_id(ride_id)
            return to_entity(ride) if ride else None

    async def update_status(self, ride_id: str, status: RideStatus) -> Ride:
        async with self._session_factory() as session:
            try:
                ride = await RideRepository(session).update_status(ride_id, status)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            return to_entity(ride)
