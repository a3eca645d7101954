"""Pydantic schemas for the HTTP API."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from slotwise.scheduling.models import AppointmentStatus, AvailabilityStatus


# --- Staff ---

class StaffCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    service_type: str = Field(min_length=1, max_length=100)
    daily_capacity: int = Field(ge=1, le=100)


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    service_type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    daily_capacity: Optional[int] = Field(default=None, ge=1, le=100)
    availability_status: Optional[AvailabilityStatus] = None


class StaffRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    service_type: str
    daily_capacity: int
    availability_status: AvailabilityStatus
    created_at: datetime
    updated_at: datetime


class StaffSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    service_type: str


# --- Service ---

class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    duration_minutes: int = Field(ge=5, le=480)
    staff_type: str = Field(min_length=1, max_length=100)


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    duration_minutes: Optional[int] = Field(default=None, ge=5, le=480)
    staff_type: Optional[str] = Field(default=None, min_length=1, max_length=100)


class ServiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    duration_minutes: int
    staff_type: str
    created_at: datetime
    updated_at: datetime


class ServiceSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    duration_minutes: int
    staff_type: str


# --- Appointment ---

class AppointmentCreate(BaseModel):
    customer_name: str = Field(min_length=1, max_length=200)
    service_id: uuid.UUID
    start_time: datetime
    staff_id: Optional[uuid.UUID] = None


class AppointmentDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_name: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    queue_position: Optional[int] = None
    staff_id: Optional[uuid.UUID] = None
    service_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    staff: Optional[StaffSummary] = None
    service: ServiceSummary


# --- Queue ---

class AssignFromQueue(BaseModel):
    staff_id: uuid.UUID


class WaitingEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_name: str
    start_time: datetime
    end_time: datetime
    queue_position: Optional[int] = None
    created_at: datetime
    service: ServiceSummary


# --- Activity ---

class ActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    action: str
    message: str
    appointment_id: Optional[uuid.UUID] = None
    staff_id: Optional[uuid.UUID] = None
    created_at: datetime
