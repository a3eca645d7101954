"""Pydantic models for the scheduling engine."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AppointmentStatus(str, Enum):
    """Appointment lifecycle statuses."""

    SCHEDULED = "SCHEDULED"
    WAITING = "WAITING"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW}
)


class AvailabilityStatus(str, Enum):
    """Whether a staff member can take new bookings."""

    AVAILABLE = "AVAILABLE"
    ON_LEAVE = "ON_LEAVE"


class TimeSlot(BaseModel):
    """A contiguous ``[start, end)`` interval in a staff member's day."""

    start: datetime
    end: datetime


class Eligibility(BaseModel):
    """Outcome of checking one staff member against a requested window."""

    ok: bool
    reason: Optional[str] = None
    todays_count: int = 0
    staff_id: Optional[uuid.UUID] = None
    staff_name: Optional[str] = None

    @classmethod
    def reject(cls, reason: str) -> "Eligibility":
        return cls(ok=False, reason=reason)


class AppointmentView(BaseModel):
    """Public projection of an appointment."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_name: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    queue_position: Optional[int] = None
    staff_id: Optional[uuid.UUID] = None
    service_id: uuid.UUID


class SchedulingResult(BaseModel):
    """A mutated appointment plus a human-readable message."""

    message: str
    appointment: AppointmentView


class AppointmentPatch(BaseModel):
    """Partial update for an appointment.

    Only fields that were explicitly set are applied, so ``staff_id=None``
    clears the assignment while an omitted ``staff_id`` keeps it.
    """

    customer_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    start_time: Optional[datetime] = None
    staff_id: Optional[uuid.UUID] = None
    status: Optional[AppointmentStatus] = None


class StaffLoad(BaseModel):
    """A staff member's SCHEDULED load for one UTC day."""

    id: uuid.UUID
    name: str
    service_type: Optional[str] = None
    availability_status: Optional[AvailabilityStatus] = None
    current_load: int
    daily_capacity: int
    available_slots: int
    is_at_capacity: bool
