"""Dense queue numbering over an owner's WAITING appointments."""

from __future__ import annotations

import logging
from typing import Sequence

from slotwise.core.models import Appointment
from slotwise.core.repository import AppointmentRepository

logger = logging.getLogger(__name__)


class WaitingQueueManager:
    def __init__(self, appointment_repo: AppointmentRepository):
        self.appointment_repo = appointment_repo

    async def renumber(self, owner_id: str) -> int:
        """Rewrite queue positions as 1..N by (start, created_at); returns N.

        Callers must hold the owner's scheduling lock.
        """
        waiting = await self.appointment_repo.list_waiting(owner_id, by_rank=True)
        changed = 0
        for rank, appt in enumerate(waiting, start=1):
            if appt.queue_position != rank:
                appt.queue_position = rank
                changed += 1
        if changed:
            await self.appointment_repo.session.flush()
        logger.debug("Renumbered waiting queue for %s: %d entries, %d moved", owner_id, len(waiting), changed)
        return len(waiting)

    async def list_waiting(self, owner_id: str) -> Sequence[Appointment]:
        """WAITING appointments by (queue_position, start), with their service loaded."""
        return await self.appointment_repo.list_waiting(owner_id, with_service=True)
