"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) per test, so tests run
without PostgreSQL.  Simulated time is driven by ``ManualScheduler``:
nothing fires until a test advances the clock.
"""

from __future__ import annotations

import heapq
import itertools
import os
from typing import AsyncGenerator, Optional

# Must be set before vybgo.config is imported.
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from vybgo.config import settings
from vybgo.domain.entities import Ride, RideNotFoundError
from vybgo.domain.enums import RideStatus
from vybgo.infrastructure.database import Base
from vybgo.infrastructure.fcm import FCMService
from vybgo.infrastructure.repositories import SessionRideStore
from vybgo.workers.ride_simulator import RideSimulator
from vybgo.workers.timers import TimerRegistry

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


# ── Virtual time ──────────────────────────────────────────────────────


class ManualHandle:
    def __init__(self, due: float, action):
        self.due = due
        self.action = action
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Runs scheduled actions in deadline order as virtual time advances."""

    def __init__(self):
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay, action) -> ManualHandle:
        handle = ManualHandle(self.now + delay, action)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    @property
    def waiting(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled())

    async def advance(self, seconds: float) -> None:
        await self.advance_to(self.now + seconds)

    async def advance_to(self, target: float) -> None:
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self.now = due
            await handle.action()
        self.now = target


# ── In-memory ride store ──────────────────────────────────────────────


class InMemoryRideStore:
    """Dict-backed store that records every status write."""

    def __init__(self):
        self.rides: dict[str, Ride] = {}
        self.writes: list[tuple[float, str, RideStatus]] = []
        self.clock: Optional[ManualScheduler] = None
        self.fail_writes = False

    def add(self, ride_id: str, status: RideStatus = RideStatus.PENDING) -> Ride:
        ride = Ride(id=ride_id, user_id="u1", pickup="A", dropoff="B", status=status)
        self.rides[ride_id] = ride
        return ride

    async def find_by_id(self, ride_id: str) -> Optional[Ride]:
        return self.rides.get(ride_id)

    async def update_status(self, ride_id: str, status: RideStatus) -> Ride:
        if self.fail_writes:
            raise ConnectionError("database unavailable")
        ride = self.rides.get(ride_id)
        if ride is None:
            raise RideNotFoundError(ride_id)
        ride.status = status
        self.writes.append((self.clock.now if self.clock else 0.0, ride_id, status))
        return ride


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def registry(scheduler) -> TimerRegistry:
    return TimerRegistry(scheduler)


@pytest.fixture
def store(scheduler) -> InMemoryRideStore:
    s = InMemoryRideStore()
    s.clock = scheduler
    return s


@pytest.fixture
def simulator(store, registry) -> RideSimulator:
    return RideSimulator(
        store,
        registry,
        timeline=(
            (5, RideStatus.ACCEPTED),
            (15, RideStatus.IN_PROGRESS),
            (30, RideStatus.COMPLETED),
        ),
    )


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def app_simulator(session_factory, registry) -> RideSimulator:
    """Simulator wired to the test database and the manual scheduler."""
    return RideSimulator(SessionRideStore(session_factory), registry)


@pytest_asyncio.fixture
async def client(session_factory, app_simulator) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against the app, backed by SQLite and virtual time."""
    from vybgo.api.app import create_app
    from vybgo.api.dependencies import get_db

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fcm = FCMService(server_api_key="")
    app = create_app(simulator=app_simulator, fcm=fcm)
    app.dependency_overrides[get_db] = _test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await fcm.aclose()


STRONG_PASSWORD = "Sup3r$ecret"


async def register(
    client: AsyncClient, email: str = "rider@example.com", **extra
) -> dict:
    resp = await client.post(
        "/api/auth/register",
        json={"email": email, "password": STRONG_PASSWORD, "name": "Rider", **extra},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
