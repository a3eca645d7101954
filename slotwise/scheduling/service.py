"""Appointment lifecycle orchestration.

``SchedulingService`` composes the eligibility evaluator, the auto-assign
selector, the slot finder and the waiting queue into the create / update /
cancel / complete / no-show / queue-assign operations.

Every mutating operation runs inside :meth:`SchedulingService._unit_of_work`:
the owner's lock is held while the deciding reads, the writes and the commit
happen, so two requests for the same owner can never both pass an
eligibility check against the same stale state. Activity records are written
afterwards and can never undo a committed scheduling decision.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Callable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.models import Appointment, Service
from slotwise.core.repository import AppointmentRepository, ServiceRepository, StaffRepository
from slotwise.observability.events import ActivityAction
from slotwise.observability.logger import ActivityLogger, get_activity_logger
from slotwise.scheduling.eligibility import EligibilityEvaluator
from slotwise.scheduling.errors import BadRequestError, ConflictError, NotFoundError
from slotwise.scheduling.locks import OwnerLockRegistry, get_lock_registry
from slotwise.scheduling.models import (
    AppointmentPatch,
    AppointmentStatus,
    AppointmentView,
    AvailabilityStatus,
    SchedulingResult,
    StaffLoad,
)
from slotwise.scheduling.selector import AutoAssignSelector
from slotwise.scheduling.slots import SlotFinder
from slotwise.scheduling.timeutil import add_minutes, as_utc, day_window, day_window_for_date, parse_day, utcnow
from slotwise.scheduling.waiting_queue import WaitingQueueManager

logger = logging.getLogger(__name__)

MSG_SCHEDULED = "Appointment scheduled successfully"
MSG_QUEUED = "No staff available, added to waiting queue"
MSG_UPDATED = "Appointment updated successfully"
MSG_CANCELLED = "Appointment cancelled successfully"
MSG_COMPLETED = "Appointment completed successfully"
MSG_NO_SHOW = "Appointment marked as no-show successfully"
MSG_ASSIGNED = "Assigned earliest eligible appointment"
MSG_NO_QUEUE_MATCH = "No eligible waiting appointment for this staff"


class SchedulingService:
    """Appointment lifecycle controller for one database session."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
        locks: Optional[OwnerLockRegistry] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        self.session = session
        self.clock = clock
        self.locks = locks or get_lock_registry()
        self.activity = activity or get_activity_logger()

        self.staff_repo = StaffRepository(session)
        self.service_repo = ServiceRepository(session)
        self.appointments = AppointmentRepository(session)
        self.evaluator = EligibilityEvaluator(self.staff_repo, self.appointments)
        self.selector = AutoAssignSelector(self.staff_repo, self.evaluator)
        self.slot_finder = SlotFinder(self.appointments)
        self.queue = WaitingQueueManager(self.appointments)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _unit_of_work(self, owner_id: str) -> AsyncIterator[None]:
        async with self.locks.hold(owner_id):
            try:
                yield
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise

    async def _require_service(self, owner_id: str, service_id: uuid.UUID) -> Service:
        service = await self.service_repo.get(owner_id, service_id)
        if service is None:
            raise NotFoundError("Service not found")
        return service

    async def _require_appointment(self, owner_id: str, appointment_id: uuid.UUID) -> Appointment:
        appt = await self.appointments.get(owner_id, appointment_id)
        if appt is None:
            raise NotFoundError("Appointment not found")
        return appt

    async def _audit(
        self,
        action: ActivityAction,
        owner_id: str,
        message: str,
        appointment_id: Optional[uuid.UUID] = None,
        staff_id: Optional[uuid.UUID] = None,
    ) -> None:
        await self.activity.log(
            self.session,
            action,
            owner_id,
            message,
            appointment_id=appointment_id,
            staff_id=staff_id,
        )

    @staticmethod
    def _result(message: str, appt: Appointment) -> SchedulingResult:
        return SchedulingResult(message=message, appointment=AppointmentView.model_validate(appt))

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(
        self,
        owner_id: str,
        customer_name: str,
        service_id: uuid.UUID,
        start_time: datetime,
        staff_id: Optional[uuid.UUID] = None,
    ) -> SchedulingResult:
        """Book an appointment, or park it in the waiting queue.

        With an explicit ``staff_id`` that staff member alone is evaluated;
        otherwise the least-loaded eligible staff member is chosen. Either
        way exactly one appointment row is written.
        """
        start = as_utc(start_time)

        async with self._unit_of_work(owner_id):
            service = await self._require_service(owner_id, service_id)
            end = add_minutes(start, service.duration_minutes)

            if staff_id is not None:
                eligibility = await self.evaluator.evaluate(
                    staff_id, owner_id, service.staff_type, start, end
                )
            else:
                eligibility = await self.selector.select_least_loaded(
                    owner_id, service.staff_type, start, end
                )

            if eligibility is not None and eligibility.ok:
                appt = await self.appointments.create(
                    owner_id=owner_id,
                    customer_name=customer_name,
                    service_id=service.id,
                    staff_id=eligibility.staff_id,
                    start_time=start,
                    end_time=end,
                    status=AppointmentStatus.SCHEDULED.value,
                )
                action = ActivityAction.APPOINTMENT_SCHEDULED
                result = self._result(MSG_SCHEDULED, appt)
                logger.info(
                    "Scheduled %s with %s at %s", appt.id, eligibility.staff_name, start.isoformat()
                )
            else:
                appt = await self.appointments.create(
                    owner_id=owner_id,
                    customer_name=customer_name,
                    service_id=service.id,
                    staff_id=None,
                    start_time=start,
                    end_time=end,
                    status=AppointmentStatus.WAITING.value,
                )
                await self.queue.renumber(owner_id)
                action = ActivityAction.APPOINTMENT_QUEUED
                reason = eligibility.reason if eligibility is not None else None
                result = self._result(reason or MSG_QUEUED, appt)
                logger.info(
                    "Queued %s at position %s: %s", appt.id, appt.queue_position, reason or "no eligible staff"
                )

        await self._audit(
            action,
            owner_id,
            f'{result.message} for "{customer_name}".',
            appointment_id=result.appointment.id,
            staff_id=result.appointment.staff_id,
        )
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list(
        self,
        owner_id: str,
        day: Optional[str] = None,
        staff_id: Optional[uuid.UUID] = None,
        status: Optional[AppointmentStatus] = None,
        with_details: bool = False,
    ) -> Sequence:
        """Owner's appointments ordered by start.

        With ``with_details`` the ORM rows are returned with staff and service
        loaded; otherwise their public projection.
        """
        window = day_window_for_date(parse_day(day)) if day else None
        rows = await self.appointments.list(
            owner_id, window=window, staff_id=staff_id, status=status, with_details=with_details
        )
        if with_details:
            return rows
        return [AppointmentView.model_validate(row) for row in rows]

    async def get(self, owner_id: str, appointment_id: uuid.UUID) -> AppointmentView:
        return AppointmentView.model_validate(await self._require_appointment(owner_id, appointment_id))

    async def get_details(self, owner_id: str, appointment_id: uuid.UUID) -> Appointment:
        """Appointment with its staff and service loaded."""
        appt = await self.appointments.get(owner_id, appointment_id, with_details=True)
        if appt is None:
            raise NotFoundError("Appointment not found")
        return appt

    async def list_waiting(self, owner_id: str) -> Sequence[Appointment]:
        return await self.queue.list_waiting(owner_id)

    async def available_staff_with_load(
        self,
        owner_id: str,
        service_id: uuid.UUID,
        day: Optional[str] = None,
    ) -> list[StaffLoad]:
        """AVAILABLE staff able to perform the service, with their load for the day."""
        service = await self._require_service(owner_id, service_id)
        window = day_window_for_date(parse_day(day)) if day else day_window(self.clock())

        loads = []
        for staff in await self.staff_repo.list(
            owner_id, service_type=service.staff_type, available_only=True
        ):
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

    # ------------------------------------------------------------------
    # Update / cancel
    # ------------------------------------------------------------------

    async def update(
        self,
        owner_id: str,
        appointment_id: uuid.UUID,
        patch: AppointmentPatch,
    ) -> SchedulingResult:
        """Reschedule, reassign, rename or cancel an appointment.

        A patch status other than CANCELLED is not applied as such: the
        resulting status is SCHEDULED when a staff member is assigned and
        passes eligibility, WAITING when none is.
        """
        fields = patch.model_dump(exclude_unset=True)

        async with self._unit_of_work(owner_id):
            appt = await self._require_appointment(owner_id, appointment_id)
            current = AppointmentStatus(appt.status)
            if current.is_terminal:
                raise BadRequestError(f"Cannot update an appointment that is {current.value}")

            service = await self._require_service(owner_id, appt.service_id)
            start = as_utc(patch.start_time) if patch.start_time is not None else appt.start_time
            end = add_minutes(start, service.duration_minutes)
            customer_name = patch.customer_name or appt.customer_name
            staff_id = fields["staff_id"] if "staff_id" in fields else appt.staff_id
            was_waiting = current == AppointmentStatus.WAITING

            if patch.status == AppointmentStatus.CANCELLED:
                previous_staff = appt.staff_id
                await self.appointments.update(
                    appt,
                    customer_name=customer_name,
                    start_time=start,
                    end_time=end,
                    status=AppointmentStatus.CANCELLED.value,
                    staff_id=None,
                    queue_position=None,
                )
                if was_waiting:
                    await self.queue.renumber(owner_id)
                action = ActivityAction.APPOINTMENT_CANCELLED
                audit_staff = previous_staff
            else:
                if staff_id is None:
                    new_status = AppointmentStatus.WAITING
                else:
                    eligibility = await self.evaluator.evaluate(
                        staff_id,
                        owner_id,
                        service.staff_type,
                        start,
                        end,
                        exclude_appointment_id=appt.id,
                    )
                    if not eligibility.ok:
                        raise ConflictError(eligibility.reason)
                    new_status = AppointmentStatus.SCHEDULED

                await self.appointments.update(
                    appt,
                    customer_name=customer_name,
                    start_time=start,
                    end_time=end,
                    status=new_status.value,
                    staff_id=staff_id,
                    queue_position=appt.queue_position if new_status == AppointmentStatus.WAITING else None,
                )
                if new_status == AppointmentStatus.WAITING or was_waiting:
                    await self.queue.renumber(owner_id)
                action = ActivityAction.APPOINTMENT_UPDATED
                audit_staff = staff_id

            result = self._result(MSG_UPDATED, appt)
            logger.info("Updated %s: %s -> %s", appt.id, current.value, appt.status)

        await self._audit(
            action,
            owner_id,
            f'Appointment for "{customer_name}" is now {result.appointment.status.value}.',
            appointment_id=result.appointment.id,
            staff_id=audit_staff,
        )
        return result

    async def cancel(self, owner_id: str, appointment_id: uuid.UUID) -> SchedulingResult:
        async with self._unit_of_work(owner_id):
            appt = await self._require_appointment(owner_id, appointment_id)
            current = AppointmentStatus(appt.status)
            if current.is_terminal:
                raise BadRequestError(f"Cannot cancel an appointment that is {current.value}")

            had_position = appt.queue_position is not None
            previous_staff = appt.staff_id
            await self.appointments.update(
                appt,
                status=AppointmentStatus.CANCELLED.value,
                staff_id=None,
                queue_position=None,
            )
            if had_position:
                await self.queue.renumber(owner_id)
            result = self._result(MSG_CANCELLED, appt)
            logger.info("Cancelled %s (was %s)", appt.id, current.value)

        await self._audit(
            ActivityAction.APPOINTMENT_CANCELLED,
            owner_id,
            f'Appointment for "{result.appointment.customer_name}" cancelled.',
            appointment_id=result.appointment.id,
            staff_id=previous_staff,
        )
        return result

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    async def _close(
        self,
        owner_id: str,
        appointment_id: uuid.UUID,
        status: AppointmentStatus,
        label: str,
    ) -> Appointment:
        appt = await self._require_appointment(owner_id, appointment_id)
        if appt.status != AppointmentStatus.SCHEDULED.value:
            raise BadRequestError(f"Only scheduled appointments can be marked as {label}")
        await self.appointments.update(appt, status=status.value)
        logger.info("Appointment %s marked %s", appt.id, status.value)
        return appt

    async def complete(self, owner_id: str, appointment_id: uuid.UUID) -> SchedulingResult:
        async with self._unit_of_work(owner_id):
            appt = await self._close(owner_id, appointment_id, AppointmentStatus.COMPLETED, "completed")
            result = self._result(MSG_COMPLETED, appt)

        await self._audit(
            ActivityAction.APPOINTMENT_COMPLETED,
            owner_id,
            f'Appointment for "{result.appointment.customer_name}" completed.',
            appointment_id=result.appointment.id,
            staff_id=result.appointment.staff_id,
        )
        return result

    async def mark_no_show(self, owner_id: str, appointment_id: uuid.UUID) -> SchedulingResult:
        async with self._unit_of_work(owner_id):
            appt = await self._close(owner_id, appointment_id, AppointmentStatus.NO_SHOW, "no-show")
            result = self._result(MSG_NO_SHOW, appt)

        await self._audit(
            ActivityAction.APPOINTMENT_NO_SHOW,
            owner_id,
            f'Appointment for "{result.appointment.customer_name}" marked as no-show.',
            appointment_id=result.appointment.id,
            staff_id=result.appointment.staff_id,
        )
        return result

    # ------------------------------------------------------------------
    # Queue assignment
    # ------------------------------------------------------------------

    async def assign_from_queue(self, owner_id: str, staff_id: uuid.UUID) -> SchedulingResult:
        """Place the earliest queued appointment this staff member can take.

        Queue order wins over schedule fit: the first WAITING entry of the
        staff member's service type for which a slot exists is assigned.
        """
        async with self._unit_of_work(owner_id):
            staff = await self.staff_repo.get(owner_id, staff_id, for_update=True)
            if staff is None:
                raise NotFoundError("Staff not found")
            if staff.availability_status != AvailabilityStatus.AVAILABLE.value:
                raise ConflictError("Staff is not available")

            staff_name = staff.name
            now = self.clock()
            assigned: Optional[Appointment] = None
            for candidate in await self.queue.list_waiting(owner_id):
                service = candidate.service
                if service.staff_type != staff.service_type:
                    continue
                slot = await self.slot_finder.find_next_slot(
                    staff.id,
                    owner_id,
                    candidate.start_time,
                    service.duration_minutes,
                    staff.daily_capacity,
                    now,
                )
                if slot is None:
                    continue
                assigned = await self.appointments.update(
                    candidate,
                    status=AppointmentStatus.SCHEDULED.value,
                    staff_id=staff.id,
                    start_time=slot.start,
                    end_time=slot.end,
                    queue_position=None,
                )
                break

            if assigned is None:
                raise ConflictError(MSG_NO_QUEUE_MATCH)

            remaining = await self.queue.renumber(owner_id)
            result = self._result(MSG_ASSIGNED, assigned)
            logger.info(
                "Assigned %s to %s at %s (%d still waiting)",
                assigned.id, staff.name, assigned.start_time.isoformat(), remaining,
            )

        await self._audit(
            ActivityAction.QUEUE_ASSIGNED,
            owner_id,
            f'Appointment for "{result.appointment.customer_name}" auto-assigned to {staff_name}.',
            appointment_id=result.appointment.id,
            staff_id=result.appointment.staff_id,
        )
        return result
