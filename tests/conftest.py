"""Pytest configuration and fixtures."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from slotwise.core.models import Appointment, Base, Service, Staff
from slotwise.observability.logger import ActivityLogger
from slotwise.scheduling.locks import OwnerLockRegistry
from slotwise.scheduling.models import AppointmentStatus, AvailabilityStatus
from slotwise.scheduling.service import SchedulingService

OWNER = "owner-1"
OTHER_OWNER = "owner-2"

# Fixed "now": early morning of the day most tests book on.
NOW = datetime(2030, 1, 15, 6, 0, tzinfo=timezone.utc)
DAY = datetime(2030, 1, 15, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0, day: datetime = DAY) -> datetime:
    """An instant on the test day."""
    return day + timedelta(hours=hour, minutes=minute)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as sess:
        yield sess
        await sess.rollback()


# ---------------------------------------------------------------------------
# Scheduling service
# ---------------------------------------------------------------------------

@pytest.fixture
def locks():
    return OwnerLockRegistry()


@pytest.fixture
def activity():
    return ActivityLogger(log_dir=None, enabled=True)


@pytest.fixture
def scheduler(session, locks, activity):
    return SchedulingService(session, clock=lambda: NOW, locks=locks, activity=activity)


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------

async def make_service(
    session: AsyncSession,
    owner_id: str = OWNER,
    duration: int = 30,
    staff_type: str = "Doctor",
    name: str = "Consultation",
) -> Service:
    service = Service(owner_id=owner_id, name=name, duration_minutes=duration, staff_type=staff_type)
    session.add(service)
    await session.commit()
    return service


async def make_staff(
    session: AsyncSession,
    name: str,
    owner_id: str = OWNER,
    capacity: int = 5,
    service_type: str = "Doctor",
    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE,
) -> Staff:
    staff = Staff(
        owner_id=owner_id,
        name=name,
        service_type=service_type,
        daily_capacity=capacity,
        availability_status=status.value,
    )
    session.add(staff)
    await session.commit()
    return staff


async def book(
    session: AsyncSession,
    staff: Staff,
    service: Service,
    start: datetime,
    customer: str = "Existing",
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
) -> Appointment:
    """Insert an appointment row directly, bypassing the scheduler."""
    appt = Appointment(
        id=uuid.uuid4(),
        owner_id=staff.owner_id,
        customer_name=customer,
        service_id=service.id,
        staff_id=staff.id,
        start_time=start,
        end_time=start + timedelta(minutes=service.duration_minutes),
        status=status.value,
    )
    session.add(appt)
    await session.commit()
    return appt


async def waiting_positions(session: AsyncSession, owner_id: str = OWNER) -> list[tuple[int, datetime]]:
    """(queue_position, start) of every WAITING appointment, in rank order."""
    from slotwise.core.repository import AppointmentRepository

    rows = await AppointmentRepository(session).list_waiting(owner_id, by_rank=True)
    return [(row.queue_position, row.start_time) for row in rows]


async def enqueue(
    session: AsyncSession,
    service: Service,
    start: datetime,
    customer: str = "Queued",
    owner_id: str = OWNER,
) -> Appointment:
    """Insert a WAITING appointment and renumber the owner's queue."""
    from slotwise.core.repository import AppointmentRepository
    from slotwise.scheduling.waiting_queue import WaitingQueueManager

    appt = Appointment(
        owner_id=owner_id,
        customer_name=customer,
        service_id=service.id,
        staff_id=None,
        start_time=start,
        end_time=start + timedelta(minutes=service.duration_minutes),
        status=AppointmentStatus.WAITING.value,
    )
    session.add(appt)
    await session.flush()
    await WaitingQueueManager(AppointmentRepository(session)).renumber(owner_id)
    await session.commit()
    return appt


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

HEADERS = {"X-Owner-Id": OWNER}


@pytest_asyncio.fixture
async def client(engine):
    """AsyncClient bound to the full app using the test database."""
    from httpx import ASGITransport, AsyncClient

    from slotwise.api.app import create_app
    from slotwise.core.database import get_db

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db():
        async with factory() as sess:
            try:
                yield sess
                await sess.commit()
            except Exception:
                await sess.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers=HEADERS) as ac:
        yield ac
