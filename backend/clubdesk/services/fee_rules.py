"""
Fee and penalty rules.

Pure functions over plain values; no database access. Amounts are returned
as positive ``Decimal`` values and the ledger applies the sign.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

from clubdesk.core.clock import as_utc, parse_clock_time, to_local
from clubdesk.core.config import settings
from clubdesk.core.exceptions import DomainValidationError
from clubdesk.models.attendance_record import AttendanceStatus
from clubdesk.models.base import ZERO

ROOM_FEE = Decimal("5000.00")

LATE_GRACE = timedelta(minutes=10)
LATE_BASE_WINDOW = timedelta(minutes=20)
LATE_BLOCK = timedelta(minutes=10)
LATE_FEE_BASE = Decimal("5000.00")
LATE_FEE_STEP = Decimal("1000.00")
LATE_FEE_CAP = Decimal("10000.00")

FLIP_PENALTY_LATE_WEEK = Decimal("10000.00")
FLIP_PENALTY_MEETING_DAY = Decimal("25000.00")
ABSENT_WITH_YES_PENALTY = Decimal("10000.00")
PRESENTER_PENALTY = Decimal("5000.00")

FRIDAY = 4


@dataclass(frozen=True)
class CancellationPenalty:
    amount: Decimal
    issues_warning: bool

    @property
    def charged(self) -> bool:
        return self.amount > 0


def room_fee(status: AttendanceStatus) -> Decimal:
    """Room fee is charged to anyone who showed up, late or not."""
    if status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
        return ROOM_FEE
    return ZERO


def meeting_start_time(location_start: Optional[str] = None) -> time:
    """Start time of a meeting: the location's default, else the club default."""
    try:
        return parse_clock_time(location_start or settings.DEFAULT_MEETING_TIME)
    except ValueError as e:
        raise DomainValidationError(str(e)) from e


def late_fee(arrival_time: str, start: Optional[time] = None) -> Decimal:
    """
    Late fee for an arrival time given as ``HH:MM`` or ``HH:MM:SS``.

    Up to 10 minutes past the start is free, up to 20 minutes costs 5,000 and
    each started 10-minute block after that adds 1,000, capped at 10,000.
    """
    try:
        arrival = parse_clock_time(arrival_time)
    except (ValueError, AttributeError) as e:
        raise DomainValidationError(f"Invalid arrival time: {arrival_time!r}") from e

    start = start or meeting_start_time()
    anchor = date(2000, 1, 1)
    offset = datetime.combine(anchor, arrival) - datetime.combine(anchor, start)

    if offset <= LATE_GRACE:
        return ZERO
    if offset <= LATE_BASE_WINDOW:
        return LATE_FEE_BASE

    blocks = math.ceil((offset - LATE_BASE_WINDOW) / LATE_BLOCK)
    return min(LATE_FEE_BASE + LATE_FEE_STEP * blocks, LATE_FEE_CAP)


def flip_penalty(flipped_at: datetime, meeting_date: date, tz: ZoneInfo) -> CancellationPenalty:
    """
    Penalty for changing a YES vote to NO.

    Tiers follow the local calendar of the meeting's location: through
    Thursday of the meeting week is free, Friday and Saturday cost 10,000,
    the meeting day itself costs 25,000 and also earns a warning.
    """
    local_day = to_local(flipped_at, tz).date()
    friday = meeting_date - timedelta(days=(meeting_date.weekday() - FRIDAY) % 7)

    if local_day >= meeting_date:
        return CancellationPenalty(FLIP_PENALTY_MEETING_DAY, True)
    if local_day >= friday:
        return CancellationPenalty(FLIP_PENALTY_LATE_WEEK, False)
    return CancellationPenalty(ZERO, False)


def absence_penalty(status: AttendanceStatus, voted_yes: bool) -> CancellationPenalty:
    """Said YES and then did not come: flat penalty plus a warning."""
    if status == AttendanceStatus.ABSENT and voted_yes:
        return CancellationPenalty(ABSENT_WITH_YES_PENALTY, True)
    return CancellationPenalty(ZERO, False)


def presenter_penalty(
    topic_submitted_at: Optional[datetime],
    topic_deadline: datetime,
    now: datetime
) -> Decimal:
    """Flat penalty once the topic deadline has passed without a topic."""
    submitted = topic_submitted_at if topic_submitted_at is not None else now
    if as_utc(submitted) > as_utc(topic_deadline):
        return PRESENTER_PENALTY
    return ZERO
