"""Waiting queue API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from slotwise.api.dependencies import get_owner_id, get_scheduling_service
from slotwise.core.schemas import AssignFromQueue, WaitingEntry
from slotwise.scheduling.models import SchedulingResult
from slotwise.scheduling.service import SchedulingService

router = APIRouter(prefix="/queue", tags=["queue"])


@router.get("/waiting", response_model=list[WaitingEntry])
async def list_waiting(
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Waiting appointments in queue order."""
    return await service.list_waiting(owner_id)


@router.post("/assign", response_model=SchedulingResult)
async def assign_from_queue(
    data: AssignFromQueue,
    owner_id: str = Depends(get_owner_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Give the staff member the earliest queued appointment they can take."""
    return await service.assign_from_queue(owner_id, data.staff_id)
