"""DB-backed tests for the waiting queue endpoints."""

import uuid

from tests.conftest import at, book, enqueue, make_service, make_staff


async def test_waiting_list_in_queue_order(client, session):
    service = await make_service(session, name="Checkup", duration=20)
    await enqueue(session, service, at(11), "second")
    await enqueue(session, service, at(9), "first")

    response = await client.get("/api/v1/queue/waiting")
    assert response.status_code == 200
    entries = response.json()
    assert [e["customer_name"] for e in entries] == ["first", "second"]
    assert [e["queue_position"] for e in entries] == [1, 2]
    assert entries[0]["service"]["duration_minutes"] == 20


async def test_assign_from_queue(client, session):
    service = await make_service(session, duration=30)
    staff = await make_staff(session, "Dr. Nabila", capacity=2)
    await book(session, staff, service, at(9))
    first = await enqueue(session, service, at(8))
    await enqueue(session, service, at(9, 15))

    response = await client.post("/api/v1/queue/assign", json={"staff_id": str(staff.id)})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Assigned earliest eligible appointment"
    assert body["appointment"]["id"] == str(first.id)
    assert body["appointment"]["status"] == "SCHEDULED"

    remaining = (await client.get("/api/v1/queue/waiting")).json()
    assert [e["queue_position"] for e in remaining] == [1]


async def test_assign_conflicts(client, session):
    staff = await make_staff(session, "Dr. Nabila")

    empty = await client.post("/api/v1/queue/assign", json={"staff_id": str(staff.id)})
    assert empty.status_code == 409
    assert empty.json()["detail"] == "No eligible waiting appointment for this staff"

    missing = await client.post("/api/v1/queue/assign", json={"staff_id": str(uuid.uuid4())})
    assert missing.status_code == 404
