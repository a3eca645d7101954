"""Staff eligibility checks for a requested time window."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from slotwise.core.repository import AppointmentRepository, StaffRepository
from slotwise.scheduling.models import AvailabilityStatus, Eligibility
from slotwise.scheduling.timeutil import day_window

logger = logging.getLogger(__name__)

STAFF_NOT_FOUND = "Staff not found"
STAFF_ON_LEAVE = "Staff is on leave"
TYPE_MISMATCH = "Staff service type mismatch"
TIME_CONFLICT = "This staff member already has an appointment at this time."


class EligibilityEvaluator:
    """Decides whether one staff member can take ``[start, end)``.

    Checks run in a fixed order and stop at the first failure: existence,
    availability, service type, daily capacity, overlap. Read-only.
    """

    def __init__(self, staff_repo: StaffRepository, appointment_repo: AppointmentRepository):
        self.staff_repo = staff_repo
        self.appointment_repo = appointment_repo

    async def evaluate(
        self,
        staff_id: uuid.UUID,
        owner_id: str,
        required_service_type: str,
        start: datetime,
        end: datetime,
        exclude_appointment_id: Optional[uuid.UUID] = None,
    ) -> Eligibility:
        staff = await self.staff_repo.get(owner_id, staff_id, for_update=True)
        if staff is None:
            return Eligibility.reject(STAFF_NOT_FOUND)

        if staff.availability_status != AvailabilityStatus.AVAILABLE.value:
            return Eligibility.reject(STAFF_ON_LEAVE)

        if staff.service_type != required_service_type:
            return Eligibility.reject(TYPE_MISMATCH)

        # The appointment being edited never counts against its own day.
        todays_count = await self.appointment_repo.count_scheduled(
            owner_id, staff.id, day_window(start), exclude_id=exclude_appointment_id
        )
        if todays_count >= staff.daily_capacity:
            logger.debug("Staff %s at capacity (%d/%d)", staff.id, todays_count, staff.daily_capacity)
            return Eligibility.reject(f"{staff.name} already has {todays_count} appointments today.")

        conflict = await self.appointment_repo.find_conflict(
            owner_id, staff.id, start, end, exclude_id=exclude_appointment_id
        )
        if conflict is not None:
            logger.debug("Staff %s overlaps appointment %s", staff.id, conflict.id)
            return Eligibility.reject(TIME_CONFLICT)

        return Eligibility(ok=True, todays_count=todays_count, staff_id=staff.id, staff_name=staff.name)
