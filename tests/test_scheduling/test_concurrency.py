"""Concurrent check-then-write races against a shared database file."""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from slotwise.core.models import Base
from slotwise.observability.logger import ActivityLogger
from slotwise.scheduling.errors import ConflictError
from slotwise.scheduling.locks import OwnerLockRegistry
from slotwise.scheduling.models import AppointmentStatus
from slotwise.scheduling.service import SchedulingService
from tests.conftest import NOW, OWNER, at, enqueue, make_service, make_staff, waiting_positions


@pytest_asyncio.fixture
async def factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def shared_locks():
    return OwnerLockRegistry()


async def _run_in_own_session(factory, locks, operation):
    async with factory() as session:
        service = SchedulingService(
            session,
            clock=lambda: NOW,
            locks=locks,
            activity=ActivityLogger(enabled=False),
        )
        return await operation(service)


async def test_concurrent_creates_never_double_book(factory, shared_locks):
    async with factory() as session:
        service = await make_service(session)
        staff = await make_staff(session, "Dr. Nabila", capacity=1)

    results = await asyncio.gather(*(
        _run_in_own_session(
            factory,
            shared_locks,
            lambda s, i=i: s.create(OWNER, f"c{i}", service.id, at(10), staff_id=staff.id),
        )
        for i in range(4)
    ))

    statuses = sorted(r.appointment.status.value for r in results)
    assert statuses.count(AppointmentStatus.SCHEDULED.value) == 1
    assert statuses.count(AppointmentStatus.WAITING.value) == 3

    async with factory() as session:
        positions = [p for p, _ in await waiting_positions(session)]
    assert positions == [1, 2, 3]


async def test_concurrent_assignments_respect_capacity(factory, shared_locks):
    async with factory() as session:
        service = await make_service(session)
        staff = await make_staff(session, "Dr. Nabila", capacity=1)
        for hour in (9, 10, 11):
            await enqueue(session, service, at(hour))

    outcomes = await asyncio.gather(
        *(
            _run_in_own_session(factory, shared_locks, lambda s: s.assign_from_queue(OWNER, staff.id))
            for _ in range(3)
        ),
        return_exceptions=True,
    )

    assigned = [o for o in outcomes if not isinstance(o, Exception)]
    failed = [o for o in outcomes if isinstance(o, Exception)]
    assert len(assigned) == 1
    assert all(isinstance(e, ConflictError) for e in failed)

    async with factory() as session:
        assert [p for p, _ in await waiting_positions(session)] == [1, 2]


async def test_concurrent_queueing_keeps_positions_contiguous(factory, shared_locks):
    async with factory() as session:
        service = await make_service(session)

    hours = [14, 9, 12, 10, 11, 13]
    await asyncio.gather(*(
        _run_in_own_session(factory, shared_locks, lambda s, h=h: s.create(OWNER, f"h{h}", service.id, at(h)))
        for h in hours
    ))

    async with factory() as session:
        positions = await waiting_positions(session)
    assert positions == [(i + 1, at(h)) for i, h in enumerate(sorted(hours))]
