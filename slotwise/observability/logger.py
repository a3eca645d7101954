"""Activity logger for scheduling audit records."""

import logging
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.repository import ActivityLogRepository
from slotwise.observability.events import ActivityAction, ActivityEvent

logger = logging.getLogger(__name__)


class ActivityLogger:
    """Fire-and-forget sink for activity events.

    Each event is stored in the ``activity_log`` table and, when a log
    directory is configured, appended to ``activity.jsonl``. Nothing raised
    while recording ever reaches the caller.
    """

    _instance: Optional["ActivityLogger"] = None

    def __init__(self, log_dir: Optional[Path] = None, enabled: bool = True):
        """Initialize activity logger.

        Args:
            log_dir: Directory for the JSONL file (None disables the file sink)
            enabled: Whether recording is enabled at all
        """
        self.enabled = enabled
        self.log_file: Optional[Path] = None
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = log_dir / "activity.jsonl"

        self._callbacks: list[Callable[[ActivityEvent], None]] = []

    @classmethod
    def get_instance(cls) -> "ActivityLogger":
        """Get or create singleton instance."""
        if cls._instance is None:
            from slotwise.config import get_settings

            settings = get_settings()
            log_dir = Path(settings.activity_log_dir) if settings.activity_log_dir else None
            cls._instance = cls(log_dir=log_dir, enabled=settings.activity_log_enabled)
        return cls._instance

    def add_callback(self, callback: Callable[[ActivityEvent], None]) -> None:
        """Add callback for real-time event monitoring."""
        self._callbacks.append(callback)

    async def record(self, session: AsyncSession, event: ActivityEvent) -> bool:
        """Persist *event*; returns False if it could not be stored."""
        if not self.enabled:
            return False

        try:
            await ActivityLogRepository(session).create(
                owner_id=event.owner_id,
                action=event.action.value,
                message=event.message,
                appointment_id=event.appointment_id,
                staff_id=event.staff_id,
            )
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning(f"Failed to store activity event {event.action.value}: {e}")
            return False

        self._write_file(event)

        for callback in self._callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Activity callback failed: {e}")

        return True

    async def log(
        self,
        session: AsyncSession,
        action: ActivityAction,
        owner_id: str,
        message: str,
        appointment_id=None,
        staff_id=None,
    ) -> bool:
        """Build and record an event in one call."""
        event = ActivityEvent(
            action=action,
            owner_id=owner_id,
            message=message,
            appointment_id=appointment_id,
            staff_id=staff_id,
        )
        return await self.record(session, event)

    def _write_file(self, event: ActivityEvent) -> None:
        if self.log_file is None:
            return
        try:
            with open(self.log_file, "a") as f:
                f.write(event.model_dump_json() + "\n")
        except Exception as e:
            logger.warning(f"Failed to write activity event: {e}")


def get_activity_logger() -> ActivityLogger:
    """Get the global activity logger instance."""
    return ActivityLogger.get_instance()
