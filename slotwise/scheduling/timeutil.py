"""UTC helpers shared by the scheduling engine and the persistence layer."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from slotwise.scheduling.errors import BadRequestError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_window(moment: datetime) -> tuple[datetime, datetime]:
    """Half-open ``[midnight, next midnight)`` UTC window containing *moment*."""
    moment = as_utc(moment)
    start = datetime.combine(moment.date(), time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def day_window_for_date(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def add_minutes(moment: datetime, minutes: int) -> datetime:
    return moment + timedelta(minutes=minutes)


def parse_day(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string, raising BadRequestError when malformed."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise BadRequestError("Invalid date format. Use YYYY-MM-DD")
