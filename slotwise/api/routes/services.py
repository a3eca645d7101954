"""Service catalogue API routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Response

from slotwise.api.dependencies import get_directory_service, get_owner_id
from slotwise.core.schemas import ServiceCreate, ServiceRead, ServiceUpdate
from slotwise.directory.service import DirectoryService

router = APIRouter(prefix="/services", tags=["services"])


@router.post("", response_model=ServiceRead, status_code=201)
async def create_service(
    data: ServiceCreate,
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.create_service(owner_id, data)


@router.get("", response_model=list[ServiceRead])
async def list_services(
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.list_services(owner_id)


@router.get("/{service_id}", response_model=ServiceRead)
async def get_service(
    service_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.get_service(owner_id, service_id)


@router.patch("/{service_id}", response_model=ServiceRead)
async def update_service(
    service_id: uuid.UUID,
    data: ServiceUpdate,
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    return await directory.update_service(owner_id, service_id, data)


@router.delete("/{service_id}", status_code=204)
async def delete_service(
    service_id: uuid.UUID,
    owner_id: str = Depends(get_owner_id),
    directory: DirectoryService = Depends(get_directory_service),
):
    await directory.delete_service(owner_id, service_id)
    return Response(status_code=204)
