"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; configure the test environment first
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from collections.abc import AsyncGenerator
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.api.deps import get_clock
from app.booking.actor import ActorContext
from app.booking.repository import SQLAlchemyBookingRepository
from app.booking.schedule import ScheduleConfig
from app.core.security import create_access_token, hash_password
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.booking import Booking
from app.models.user import AdminUser
from app.schemas.booking import BookingCreate
from app.services.audit import AuditRecorder
from app.services.bookings import BookingService
from app.utils.time import FixedClock

# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Wednesday; the clinic opens on Fridays
TODAY = date(2030, 1, 2)
NEXT_FRIDAY = date(2030, 1, 4)
FOLLOWING_FRIDAY = date(2030, 1, 11)
LAST_FRIDAY = date(2029, 12, 28)
THURSDAY = date(2030, 1, 3)

ADMIN_PASSWORD = "adminpassword"


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def schedule_config() -> ScheduleConfig:
    """Default clinic schedule: Fridays 15:15-20:30, 40 minute slots, 3 chairs."""
    return ScheduleConfig()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def repository(async_session: AsyncSession) -> SQLAlchemyBookingRepository:
    return SQLAlchemyBookingRepository(async_session)


@pytest.fixture
def booking_service(
    async_session: AsyncSession,
    repository: SQLAlchemyBookingRepository,
    schedule_config: ScheduleConfig,
    clock: FixedClock,
) -> BookingService:
    """Booking service wired to the in-memory database."""
    return BookingService(
        repository=repository,
        config=schedule_config,
        clock=clock,
        audit=AuditRecorder(async_session),
    )


@pytest.fixture
def anonymous() -> ActorContext:
    return ActorContext.anonymous(ip_address="127.0.0.1", user_agent="pytest")


@pytest.fixture
async def admin_user(async_session: AsyncSession) -> AdminUser:
    """Create a test admin user."""
    user = AdminUser(
        username="admin",
        hashed_password=hash_password(ADMIN_PASSWORD),
        email="admin@medac.es",
        full_name="Admin User",
        is_active=True,
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
async def inactive_admin(async_session: AsyncSession) -> AdminUser:
    """Create a disabled admin account."""
    user = AdminUser(
        username="retired",
        hashed_password=hash_password("retiredpassword"),
        is_active=False,
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
def admin_actor(admin_user: AdminUser) -> ActorContext:
    return ActorContext.admin(admin_user.id, ip_address="127.0.0.1", user_agent="pytest")


def create_test_token(user: AdminUser) -> str:
    """Create a test JWT token for an admin."""
    return create_access_token(
        subject=str(user.id),
        additional_claims={
            "actor_type": "admin",
            "username": user.username,
        },
    )


@pytest.fixture
def admin_auth_headers(admin_user: AdminUser) -> dict[str, str]:
    """Create authorization headers for the admin user."""
    token = create_test_token(admin_user)
    return {"Authorization": f"Bearer {token}"}


def make_request(**overrides) -> BookingCreate:
    """Valid booking request for the next Friday, first slot, red chair."""
    data = {
        "booking_date": NEXT_FRIDAY.isoformat(),
        "slot_index": 0,
        "time_slot": "15:15",
        "chair": "rojo",
        "patient_name": "Lucia Garcia",
        "patient_email": "lucia@alu.medac.es",
    }
    data.update(overrides)
    return BookingCreate(**data)


async def add_booking(
    session: AsyncSession,
    booking_date: date = NEXT_FRIDAY,
    slot_index: int = 0,
    chair: str = "rojo",
    patient_email: str = "lucia@alu.medac.es",
    patient_name: str = "Lucia Garcia",
) -> Booking:
    """Insert a booking directly, bypassing the service rules."""
    labels = ["15:15", "15:55", "16:35", "17:15", "17:55", "18:35", "19:15"]
    booking = Booking(
        booking_date=booking_date,
        slot_index=slot_index,
        time_slot=labels[slot_index],
        chair=chair,
        patient_name=patient_name,
        patient_email=patient_email,
    )
    session.add(booking)
    await session.commit()
    await session.refresh(booking)
    return booking


@pytest.fixture
async def api_client(async_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, sharing the test session and a fixed clock.

    Runs in the test's event loop so the aiosqlite session is never used
    from another loop.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: FixedClock(TODAY)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
