"""Activity logging for scheduling operations."""

from slotwise.observability.events import ActivityAction, ActivityEvent
from slotwise.observability.logger import ActivityLogger, get_activity_logger

__all__ = [
    "ActivityAction",
    "ActivityEvent",
    "ActivityLogger",
    "get_activity_logger",
]
