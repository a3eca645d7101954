"""Appointment lifecycle API routes."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from slotwise.api.dependencies import get_owner_id, get_scheduling_service
from slotwise.core.schemas import AppointmentCreate, AppointmentDetail
from slotwise.scheduling.models import (
    AppointmentPatch,
    AppointmentStatus,
    AppointmentView,
    SchedulingResult,
    StaffLoad,
)
from slotwise.scheduling.service import SchedulingService

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=SchedulingResult, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Book with the given or least-loaded staff, or queue when nobody fits."""
    return await service.create(
        owner_id,
        customer_name=data.customer_name,
        service_id=data.service_id,
        start_time=data.start_time,
        staff_id=data.staff_id,
    )


@router.get("", response_model=list[AppointmentView])
async def list_appointments(
    date: Optional[str] = Query(None, description="UTC day, YYYY-MM-DD"),
    staff_id: Optional[uuid.UUID] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return await service.list(owner_id, day=date, staff_id=staff_id, status=status)


@router.get("/list/with-details", response_model=list[AppointmentDetail])
async def list_appointments_with_details(
    date: Optional[str] = Query(None, description="UTC day, YYYY-MM-DD"),
    staff_id: Optional[uuid.UUID] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Same filters as the plain listing, with staff and service embedded."""
    return await service.list(owner_id, day=date, staff_id=staff_id, status=status, with_details=True)


@router.get("/available-staff/{service_id}", response_model=list[StaffLoad])
async def available_staff(
    service_id: uuid.UUID,
    date: Optional[str] = Query(None, description="UTC day, YYYY-MM-DD (default today)"),
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return await service.available_staff_with_load(owner_id, service_id, day=date)


@router.get("/{appointment_id}", response_model=AppointmentView)
async def get_appointment(
    appointment_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return await service.get(owner_id, appointment_id)


@router.get("/{appointment_id}/details", response_model=AppointmentDetail)
async def get_appointment_details(
    appointment_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return await service.get_details(owner_id, appointment_id)


@router.patch("/{appointment_id}", response_model=SchedulingResult)
async def update_appointment(
    appointment_id: uuid.UUID,
    patch: AppointmentPatch,
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return await service.update(owner_id, appointment_id, patch)


@router.patch("/{appointment_id}/cancel", response_model=SchedulingResult)
async def cancel_appointment(
    appointment_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return await service.cancel(owner_id, appointment_id)


@router.patch("/{appointment_id}/complete", response_model=SchedulingResult)
async def complete_appointment(
    appointment_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return await service.complete(owner_id, appointment_id)


@router.patch("/{appointment_id}/no-show", response_model=SchedulingResult)
async def mark_no_show(
    appointment_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return await service.mark_no_show(owner_id, appointment_id)
