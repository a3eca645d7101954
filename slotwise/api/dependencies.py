"""FastAPI dependencies: owner resolution and per-request services."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.database import get_db
from slotwise.directory.service import DirectoryService
from slotwise.scheduling.service import SchedulingService

OWNER_HEADER = "X-Owner-Id"


async def get_owner_id(
    x_owner_id: Optional[str] = Header(None, alias=OWNER_HEADER),
) -> str:
    """Owner scope of the request.

    Credentials are verified upstream; this layer only requires that the
    gateway forwarded an owner id.
    """
    owner_id = (x_owner_id or "").strip()
    if not owner_id:
        raise HTTPException(status_code=401, detail=f"Missing {OWNER_HEADER} header")
    if len(owner_id) > 64:
        raise HTTPException(status_code=400, detail=f"{OWNER_HEADER} is too long")
    return owner_id


async def get_scheduling_service(db: AsyncSession = Depends(get_db)) -> SchedulingService:
    return SchedulingService(db)


async def get_directory_service(db: AsyncSession = Depends(get_db)) -> DirectoryService:
    return DirectoryService(db)
