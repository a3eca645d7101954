"""Next-available-slot search inside a staff member's UTC day."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Iterable, Optional

from slotwise.core.repository import AppointmentRepository
from slotwise.scheduling.models import TimeSlot
from slotwise.scheduling.timeutil import as_utc, day_window

logger = logging.getLogger(__name__)


def find_earliest_fit(
    bookings: Iterable[TimeSlot],
    candidate_start: datetime,
    duration: timedelta,
    day_end: datetime,
) -> Optional[TimeSlot]:
    """Greedy earliest-fit sweep over non-overlapping bookings sorted by start.

    Bookings that end at or before the candidate are skipped; a booking the
    candidate would run into pushes the candidate to that booking's end.
    The result never ends after *day_end*.
    """
    for booking in bookings:
        if candidate_start >= booking.end:
            continue
        candidate_end = candidate_start + duration
        if candidate_end <= booking.start:
            return TimeSlot(start=candidate_start, end=candidate_end)
        candidate_start = booking.end

    candidate_end = candidate_start + duration
    if candidate_end > day_end:
        return None
    return TimeSlot(start=candidate_start, end=candidate_end)


class SlotFinder:
    """Finds a staff member's first free interval on or after a given instant."""

    def __init__(self, appointment_repo: AppointmentRepository):
        self.appointment_repo = appointment_repo

    async def find_next_slot(
        self,
        staff_id: uuid.UUID,
        owner_id: str,
        earliest_start: datetime,
        duration_minutes: int,
        daily_capacity: int,
        now: datetime,
    ) -> Optional[TimeSlot]:
        candidate_start = max(as_utc(earliest_start), as_utc(now))
        day_start, day_end = day_window(candidate_start)
        candidate_start = max(candidate_start, day_start)

        booked_today = await self.appointment_repo.count_scheduled(
            owner_id, staff_id, (day_start, day_end)
        )
        if booked_today >= daily_capacity:
            logger.debug("Staff %s full on %s (%d/%d)", staff_id, day_start.date(), booked_today, daily_capacity)
            return None

        # Includes a booking that started the previous day and runs past midnight.
        rows = await self.appointment_repo.list_scheduled_for_staff(
            owner_id, staff_id, (day_start, day_end)
        )
        bookings = [TimeSlot(start=row.start_time, end=row.end_time) for row in rows]

        return find_earliest_fit(
            bookings, candidate_start, timedelta(minutes=duration_minutes), day_end
        )
