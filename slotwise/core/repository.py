"""Repositories for the scheduling schema.

``StaffRepository`` and ``ServiceRepository`` form the directory gateway the
scheduling engine reads from; ``AppointmentRepository`` is the only writer of
appointment rows. Every query is scoped by ``owner_id``.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from slotwise.core.models import ActivityLog, Appointment, Service, Staff
from slotwise.scheduling.models import AppointmentStatus, AvailabilityStatus


class StaffRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Staff:
        staff = Staff(**kwargs)
        self.session.add(staff)
        await self.session.flush()
        return staff

    async def get(self, owner_id: str, staff_id: uuid.UUID, for_update: bool = False) -> Optional[Staff]:
        stmt = select(Staff).where(Staff.id == staff_id, Staff.owner_id == owner_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        owner_id: str,
        service_type: Optional[str] = None,
        available_only: bool = False,
        newest_first: bool = False,
    ) -> Sequence[Staff]:
        stmt = select(Staff).where(Staff.owner_id == owner_id)
        if service_type is not None:
            stmt = stmt.where(Staff.service_type == service_type)
        if available_only:
            stmt = stmt.where(Staff.availability_status == AvailabilityStatus.AVAILABLE.value)
        if newest_first:
            stmt = stmt.order_by(Staff.created_at.desc(), Staff.id)
        else:
            stmt = stmt.order_by(Staff.name, Staff.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update(self, staff: Staff, **kwargs) -> Staff:
        for k, v in kwargs.items():
            if v is not None:
                setattr(staff, k, v)
        await self.session.flush()
        return staff

    async def delete(self, staff: Staff) -> None:
        # Remaining rows keep their status but lose the staff reference.
        await self.session.execute(
            update(Appointment)
            .where(Appointment.staff_id == staff.id)
            .values(staff_id=None)
        )
        await self.session.delete(staff)
        await self.session.flush()


class ServiceRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Service:
        service = Service(**kwargs)
        self.session.add(service)
        await self.session.flush()
        return service

    async def get(self, owner_id: str, service_id: uuid.UUID) -> Optional[Service]:
        result = await self.session.execute(
            select(Service).where(Service.id == service_id, Service.owner_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def list(self, owner_id: str, staff_type: Optional[str] = None) -> Sequence[Service]:
        stmt = select(Service).where(Service.owner_id == owner_id)
        if staff_type is not None:
            stmt = stmt.where(Service.staff_type == staff_type)
        stmt = stmt.order_by(Service.created_at.desc(), Service.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update(self, service: Service, **kwargs) -> Service:
        for k, v in kwargs.items():
            if v is not None:
                setattr(service, k, v)
        await self.session.flush()
        return service

    async def count_references(self, service_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Appointment).where(Appointment.service_id == service_id)
        )
        return result.scalar_one()

    async def delete(self, service: Service) -> None:
        await self.session.delete(service)
        await self.session.flush()


class AppointmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **kwargs) -> Appointment:
        appt = Appointment(**kwargs)
        self.session.add(appt)
        await self.session.flush()
        return appt

    async def get(
        self,
        owner_id: str,
        appointment_id: uuid.UUID,
        with_details: bool = False,
    ) -> Optional[Appointment]:
        stmt = select(Appointment).where(
            Appointment.id == appointment_id, Appointment.owner_id == owner_id
        )
        if with_details:
            stmt = stmt.options(selectinload(Appointment.staff), selectinload(Appointment.service))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        owner_id: str,
        window: Optional[tuple[datetime, datetime]] = None,
        staff_id: Optional[uuid.UUID] = None,
        status: Optional[AppointmentStatus] = None,
        with_details: bool = False,
    ) -> Sequence[Appointment]:
        stmt = select(Appointment).where(Appointment.owner_id == owner_id)
        if window is not None:
            stmt = stmt.where(Appointment.start_time >= window[0], Appointment.start_time < window[1])
        if staff_id is not None:
            stmt = stmt.where(Appointment.staff_id == staff_id)
        if status is not None:
            stmt = stmt.where(Appointment.status == status.value)
        if with_details:
            stmt = stmt.options(selectinload(Appointment.staff), selectinload(Appointment.service))
        stmt = stmt.order_by(Appointment.start_time, Appointment.created_at, Appointment.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_scheduled(
        self,
        owner_id: str,
        staff_id: uuid.UUID,
        window: tuple[datetime, datetime],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Count SCHEDULED bookings of a staff member starting inside *window*."""
        stmt = (
            select(func.count())
            .select_from(Appointment)
            .where(
                Appointment.owner_id == owner_id,
                Appointment.staff_id == staff_id,
                Appointment.status == AppointmentStatus.SCHEDULED.value,
                Appointment.start_time >= window[0],
                Appointment.start_time < window[1],
            )
        )
        if exclude_id is not None:
            stmt = stmt.where(Appointment.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def find_conflict(
        self,
        owner_id: str,
        staff_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> Optional[Appointment]:
        """First SCHEDULED booking of the staff member overlapping ``[start, end)``."""
        stmt = select(Appointment).where(
            Appointment.owner_id == owner_id,
            Appointment.staff_id == staff_id,
            Appointment.status == AppointmentStatus.SCHEDULED.value,
            Appointment.start_time < end,
            Appointment.end_time > start,
        )
        if exclude_id is not None:
            stmt = stmt.where(Appointment.id != exclude_id)
        result = await self.session.execute(stmt.order_by(Appointment.start_time).limit(1))
        return result.scalar_one_or_none()

    async def list_scheduled_for_staff(
        self,
        owner_id: str,
        staff_id: uuid.UUID,
        window: tuple[datetime, datetime],
    ) -> Sequence[Appointment]:
        """SCHEDULED bookings of the staff member touching *window*, by start."""
        stmt = (
            select(Appointment)
            .where(
                Appointment.owner_id == owner_id,
                Appointment.staff_id == staff_id,
                Appointment.status == AppointmentStatus.SCHEDULED.value,
                Appointment.start_time < window[1],
                Appointment.end_time > window[0],
            )
            .order_by(Appointment.start_time, Appointment.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_waiting(self, owner_id: str, by_rank: bool = False, with_service: bool = False) -> Sequence[Appointment]:
        """WAITING appointments of an owner.

        ``by_rank`` orders by (start, created_at), the order queue positions
        are derived from; otherwise by (queue_position, start) for display.
        """
        stmt = select(Appointment).where(
            Appointment.owner_id == owner_id,
            Appointment.status == AppointmentStatus.WAITING.value,
        )
        if by_rank:
            stmt = stmt.order_by(Appointment.start_time, Appointment.created_at, Appointment.id)
        else:
            stmt = stmt.order_by(
                Appointment.queue_position.is_(None),
                Appointment.queue_position,
                Appointment.start_time,
                Appointment.id,
            )
        if with_service:
            stmt = stmt.options(selectinload(Appointment.service))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update(self, appt: Appointment, **kwargs) -> Appointment:
        """Apply *kwargs* verbatim (``None`` clears a column)."""
        for k, v in kwargs.items():
            setattr(appt, k, v)
        await self.session.flush()
        return appt


class ActivityLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        owner_id: str,
        action: str,
        message: str,
        appointment_id: Optional[uuid.UUID] = None,
        staff_id: Optional[uuid.UUID] = None,
    ) -> ActivityLog:
        entry = ActivityLog(
            owner_id=owner_id,
            action=action,
            message=message,
            appointment_id=appointment_id,
            staff_id=staff_id,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_recent(self, owner_id: str, limit: int = 10) -> Sequence[ActivityLog]:
        stmt = (
            select(ActivityLog)
            .where(ActivityLog.owner_id == owner_id)
            .order_by(ActivityLog.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
