"""Structured activity events emitted by scheduling operations."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ActivityAction(str, Enum):
    """Audit action tags."""

    APPOINTMENT_SCHEDULED = "APPOINTMENT_SCHEDULED"
    APPOINTMENT_QUEUED = "APPOINTMENT_QUEUED"
    APPOINTMENT_UPDATED = "APPOINTMENT_UPDATED"
    APPOINTMENT_CANCELLED = "APPOINTMENT_CANCELLED"
    APPOINTMENT_COMPLETED = "APPOINTMENT_COMPLETED"
    APPOINTMENT_NO_SHOW = "APPOINTMENT_NO_SHOW"
    QUEUE_ASSIGNED = "QUEUE_ASSIGNED"


class ActivityEvent(BaseModel):
    """One audit record: who, what, and which appointment/staff it touched."""

    action: ActivityAction
    owner_id: str
    message: str
    appointment_id: Optional[uuid.UUID] = None
    staff_id: Optional[uuid.UUID] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
