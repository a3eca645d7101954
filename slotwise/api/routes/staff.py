"""Staff administration API routes."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from slotwise.api.dependencies import get_directory_service, get_owner_id
from slotwise.core.schemas import StaffCreate, StaffRead, StaffUpdate
from slotwise.directory.service import DirectoryService
from slotwise.scheduling.models import StaffLoad

router = APIRouter(prefix="/staff", tags=["staff"])


@router.post("", response_model=StaffRead, status_code=201)
async def create_staff(
    data: StaffCreate,
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.create_staff(owner_id, data)


@router.get("", response_model=list[StaffRead])
async def list_staff(
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.list_staff(owner_id)


@router.get("/load", response_model=list[StaffLoad])
async def staff_daily_load(
    date: Optional[str] = Query(None, description="UTC day, YYYY-MM-DD (default today)"),
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.staff_daily_load(owner_id, day=date)


@router.get("/{staff_id}", response_model=StaffRead)
async def get_staff(
    staff_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.get_staff(owner_id, staff_id)


@router.patch("/{staff_id}", response_model=StaffRead)
async def update_staff(
    staff_id: uuid.UUID,
    data: StaffUpdate,
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.update_staff(owner_id, staff_id, data)


@router.delete("/{staff_id}", status_code=204)
async def delete_staff(
    staff_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    await directory.delete_staff(owner_id, staff_id)
    return Response(status_code=204)
