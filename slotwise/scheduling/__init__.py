"""Scheduling and waiting-queue engine."""

from slotwise.scheduling.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    SchedulingError,
)
from slotwise.scheduling.models import (
    AppointmentPatch,
    AppointmentStatus,
    AppointmentView,
    AvailabilityStatus,
    Eligibility,
    SchedulingResult,
    StaffLoad,
    TimeSlot,
)

__all__ = [
    "AppointmentPatch",
    "AppointmentStatus",
    "AppointmentView",
    "AvailabilityStatus",
    "BadRequestError",
    "ConflictError",
    "Eligibility",
    "NotFoundError",
    "SchedulingError",
    "SchedulingResult",
    "StaffLoad",
    "TimeSlot",
]
