"""Administration of staff and services."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.models import Service, Staff
from slotwise.core.repository import AppointmentRepository, ServiceRepository, StaffRepository
from slotwise.core.schemas import ServiceCreate, ServiceUpdate, StaffCreate, StaffUpdate
from slotwise.scheduling.errors import ConflictError, NotFoundError
from slotwise.scheduling.locks import OwnerLockRegistry, get_lock_registry
from slotwise.scheduling.models import AppointmentStatus, AvailabilityStatus, StaffLoad
from slotwise.scheduling.timeutil import day_window, day_window_for_date, parse_day, utcnow
from slotwise.scheduling.waiting_queue import WaitingQueueManager

logger = logging.getLogger(__name__)


class DirectoryService:
    """CRUD for the staff and service records the scheduler reads.

    Writes hold the owner's scheduling lock so an edit never lands between
    an eligibility check and its commit.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
        locks: Optional[OwnerLockRegistry] = None,
    ):
        self.session = session
        self.clock = clock
        self.locks = locks or get_lock_registry()
        self.staff_repo = StaffRepository(session)
        self.service_repo = ServiceRepository(session)
        self.appointments = AppointmentRepository(session)
        self.queue = WaitingQueueManager(self.appointments)

    # --- Staff ---

    async def create_staff(self, owner_id: str, data: StaffCreate) -> Staff:
        async with self.locks.hold(owner_id):
            staff = await self.staff_repo.create(
                owner_id=owner_id,
                name=data.name,
                service_type=data.service_type,
                daily_capacity=data.daily_capacity,
                availability_status=AvailabilityStatus.AVAILABLE.value,
            )
            await self.session.commit()
        logger.info("Created staff %s (%s)", staff.id, staff.service_type)
        return staff

    async def list_staff(self, owner_id: str) -> Sequence[Staff]:
        return await self.staff_repo.list(owner_id, newest_first=True)

    async def get_staff(self, owner_id: str, staff_id: uuid.UUID) -> Staff:
        staff = await self.staff_repo.get(owner_id, staff_id)
        if staff is None:
            raise NotFoundError("Staff not found")
        return staff

    async def update_staff(self, owner_id: str, staff_id: uuid.UUID, data: StaffUpdate) -> Staff:
        changes = data.model_dump(exclude_unset=True)
        if "availability_status" in changes and changes["availability_status"] is not None:
            changes["availability_status"] = AvailabilityStatus(changes["availability_status"]).value

        async with self.locks.hold(owner_id):
            staff = await self.get_staff(owner_id, staff_id)
            await self.staff_repo.update(staff, **changes)
            await self.session.commit()
        logger.info("Updated staff %s: %s", staff.id, sorted(changes))
        return staff

    async def delete_staff(self, owner_id: str, staff_id: uuid.UUID) -> None:
        """Delete a staff member.

        Their SCHEDULED bookings go back to the waiting queue; finished and
        cancelled rows only lose the staff reference.
        """
        async with self.locks.hold(owner_id):
            staff = await self.get_staff(owner_id, staff_id)
            live = await self.appointments.list(
                owner_id, staff_id=staff.id, status=AppointmentStatus.SCHEDULED
            )
            for appt in live:
                await self.appointments.update(
                    appt, status=AppointmentStatus.WAITING.value, staff_id=None
                )
            await self.staff_repo.delete(staff)
            if live:
                await self.queue.renumber(owner_id)
            await self.session.commit()
        logger.info("Deleted staff %s, %d bookings requeued", staff_id, len(live))

    async def staff_daily_load(self, owner_id: str, day: Optional[str] = None) -> list[StaffLoad]:
        """Every staff member with their SCHEDULED load for a UTC day (today by default)."""
        window = day_window_for_date(parse_day(day)) if day else day_window(self.clock())
        loads = []
        for staff in await self.staff_repo.list(owner_id):
            current = await self.appointments.count_scheduled(owner_id, staff.id, window)
            loads.append(
                StaffLoad(
                    id=staff.id,
                    name=staff.name,
                    service_type=staff.service_type,
                    availability_status=staff.availability_status,
                    current_load=current,
                    daily_capacity=staff.daily_capacity,
                    available_slots=max(staff.daily_capacity - current, 0),
                    is_at_capacity=current >= staff.daily_capacity,
                )
            )
        return loads

    # --- Services ---

    async def create_service(self, owner_id: str, data: ServiceCreate) -> Service:
        service = await self.service_repo.create(
            owner_id=owner_id,
            name=data.name,
            duration_minutes=data.duration_minutes,
            staff_type=data.staff_type,
        )
        await self.session.commit()
        logger.info("Created service %s (%d min, %s)", service.id, service.duration_minutes, service.staff_type)
        return service

    async def list_services(self, owner_id: str) -> Sequence[Service]:
        return await self.service_repo.list(owner_id)

    async def get_service(self, owner_id: str, service_id: uuid.UUID) -> Service:
        service = await self.service_repo.get(owner_id, service_id)
        if service is None:
            raise NotFoundError("Service not found")
        return service

    async def update_service(self, owner_id: str, service_id: uuid.UUID, data: ServiceUpdate) -> Service:
        async with self.locks.hold(owner_id):
            service = await self.get_service(owner_id, service_id)
            await self.service_repo.update(service, **data.model_dump(exclude_unset=True))
            await self.session.commit()
        return service

    async def delete_service(self, owner_id: str, service_id: uuid.UUID) -> None:
        async with self.locks.hold(owner_id):
            service = await self.get_service(owner_id, service_id)
            references = await self.service_repo.count_references(service.id)
            if references:
                raise ConflictError(f"Service is used by {references} appointments")
            await self.service_repo.delete(service)
            await self.session.commit()
        logger.info("Deleted service %s", service_id)
