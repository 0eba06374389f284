"""
Clock abstraction and club calendar helpers.

Every time-tiered rule (late fees, cancellation tiers, deadlines) reads the
current instant from a ``Clock`` so tests can pin it. Calendar weeks start on
Sunday and are evaluated in the meeting location's timezone.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from clubdesk.core.config import settings


class Clock(Protocol):
    def now(self) -> datetime:
        """Return the current instant as a timezone-aware datetime."""
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        self._instant = as_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = as_utc(instant)

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


system_clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency; tests override it with a FixedClock."""
    return system_clock


def club_timezone(name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(name or settings.CLUB_TIMEZONE)


def as_utc(value: datetime) -> datetime:
    """Normalise to an aware UTC datetime.

    SQLite hands timestamps back naive; they were written as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz: ZoneInfo) -> datetime:
    return as_utc(value).astimezone(tz)


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_window(day: date) -> tuple[date, date]:
    """Half-open [Sunday, next Sunday) window containing ``day``."""
    start = week_start(day)
    return start, start + timedelta(days=7)


def parse_clock_time(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS``. Raises ValueError on anything else."""
    value = value.strip()
    parts = value.split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)
