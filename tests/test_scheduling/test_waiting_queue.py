"""Tests for waiting queue numbering."""

import pytest

from slotwise.core.repository import AppointmentRepository
from slotwise.scheduling.models import AppointmentStatus
from slotwise.scheduling.waiting_queue import WaitingQueueManager
from tests.conftest import OTHER_OWNER, OWNER, at, enqueue, make_service, waiting_positions


@pytest.fixture
def queue(session):
    return WaitingQueueManager(AppointmentRepository(session))


async def test_positions_follow_requested_start(session, queue):
    service = await make_service(session)
    await enqueue(session, service, at(11), "late")
    await enqueue(session, service, at(9), "early")
    await enqueue(session, service, at(10), "middle")

    positions = await waiting_positions(session)
    assert positions == [(1, at(9)), (2, at(10)), (3, at(11))]


async def test_equal_start_ranked_by_creation(session, queue):
    service = await make_service(session)
    first = await enqueue(session, service, at(9), "first")
    second = await enqueue(session, service, at(9), "second")

    assert first.queue_position == 1
    assert second.queue_position == 2


async def test_renumber_closes_gaps(session, queue):
    service = await make_service(session)
    a = await enqueue(session, service, at(9))
    b = await enqueue(session, service, at(10))
    c = await enqueue(session, service, at(11))

    await AppointmentRepository(session).update(
        b, status=AppointmentStatus.CANCELLED.value, queue_position=None
    )
    length = await queue.renumber(OWNER)

    assert length == 2
    assert (a.queue_position, c.queue_position) == (1, 2)


async def test_renumber_is_idempotent(session, queue):
    service = await make_service(session)
    for hour in (12, 9, 10):
        await enqueue(session, service, at(hour))

    await queue.renumber(OWNER)
    once = await waiting_positions(session)
    await queue.renumber(OWNER)
    twice = await waiting_positions(session)

    assert once == twice


async def test_owners_are_numbered_independently(session, queue):
    mine = await make_service(session)
    theirs = await make_service(session, owner_id=OTHER_OWNER)
    await enqueue(session, mine, at(9))
    await enqueue(session, theirs, at(8), owner_id=OTHER_OWNER)
    await enqueue(session, mine, at(10))

    assert [p for p, _ in await waiting_positions(session)] == [1, 2]
    assert [p for p, _ in await waiting_positions(session, OTHER_OWNER)] == [1]


async def test_list_waiting_embeds_service(session, queue):
    service = await make_service(session, name="Checkup")
    await enqueue(session, service, at(10))
    await enqueue(session, service, at(9))

    entries = await queue.list_waiting(OWNER)
    assert [e.queue_position for e in entries] == [1, 2]
    assert entries[0].service.name == "Checkup"
