"""Least-loaded staff selection."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from slotwise.core.repository import StaffRepository
from slotwise.scheduling.eligibility import EligibilityEvaluator
from slotwise.scheduling.models import Eligibility

logger = logging.getLogger(__name__)


class AutoAssignSelector:
    """Picks the eligible staff member with the fewest bookings that day.

    Candidates are enumerated by (name, id); on a tie the first staff
    encountered with the minimal count wins.
    """

    def __init__(self, staff_repo: StaffRepository, evaluator: EligibilityEvaluator):
        self.staff_repo = staff_repo
        self.evaluator = evaluator

    async def select_least_loaded(
        self,
        owner_id: str,
        required_service_type: str,
        start: datetime,
        end: datetime,
    ) -> Optional[Eligibility]:
        candidates = await self.staff_repo.list(
            owner_id, service_type=required_service_type, available_only=True
        )

        selected: Optional[Eligibility] = None
        for staff in candidates:
            eligibility = await self.evaluator.evaluate(
                staff.id, owner_id, required_service_type, start, end
            )
            if not eligibility.ok:
                continue
            if selected is None or eligibility.todays_count < selected.todays_count:
                selected = eligibility

        if selected is None:
            logger.debug(
                "No %r staff eligible for %s-%s (%d candidates)",
                required_service_type, start.isoformat(), end.isoformat(), len(candidates),
            )
        return selected
