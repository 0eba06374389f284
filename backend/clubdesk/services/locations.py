"""
Location service: venues and their local calendar settings.
"""
import logging
from datetime import date, time
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.relativedelta import relativedelta, weekday
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.clock import club_timezone, parse_clock_time
from clubdesk.core.exceptions import DomainValidationError, NotFoundError
from clubdesk.models.location import Location
from clubdesk.services import fee_rules

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "address", "timezone", "default_meeting_day", "default_meeting_time", "is_active")


def _validate(timezone_name: Optional[str], meeting_day: Optional[int], meeting_time: Optional[str]) -> None:
    if timezone_name is not None:
        try:
            ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise DomainValidationError(f"Unknown timezone: {timezone_name}") from e
    if meeting_day is not None and not 0 <= meeting_day <= 6:
        raise DomainValidationError("default_meeting_day must be between 0 (Sunday) and 6 (Saturday)")
    if meeting_time is not None:
        try:
            parse_clock_time(meeting_time)
        except ValueError as e:
            raise DomainValidationError(str(e)) from e


async def get_location(db: AsyncSession, location_id: str) -> Location:
    location = await db.get(Location, location_id)
    if not location:
        raise NotFoundError("Location not found")
    return location


async def list_locations(db: AsyncSession, include_inactive: bool = False) -> list[Location]:
    query = select(Location)
    if not include_inactive:
        query = query.where(Location.is_active == True)  # noqa: E712
    result = await db.execute(query.order_by(Location.name))
    return list(result.scalars().all())


async def create_location(db: AsyncSession, **data) -> Location:
    _validate(data.get("timezone"), data.get("default_meeting_day"), data.get("default_meeting_time"))
    location = Location(**data)
    db.add(location)
    await db.flush()
    logger.info("Created location %s (%s)", location.name, location.id)
    return location


async def update_location(db: AsyncSession, location_id: str, **changes) -> Location:
    location = await get_location(db, location_id)
    _validate(changes.get("timezone"), changes.get("default_meeting_day"), changes.get("default_meeting_time"))
    for field, value in changes.items():
        if field in UPDATABLE_FIELDS and value is not None:
            setattr(location, field, value)
    await db.flush()
    return location


async def deactivate_location(db: AsyncSession, location_id: str) -> Location:
    location = await get_location(db, location_id)
    location.is_active = False
    await db.flush()
    logger.info("Deactivated location %s", location_id)
    return location


async def location_timezone(db: AsyncSession, location_id: Optional[str]) -> ZoneInfo:
    """Timezone of the location, or the club default when there is none."""
    if location_id:
        location = await db.get(Location, location_id)
        if location:
            return club_timezone(location.timezone)
    return club_timezone()


async def location_start_time(db: AsyncSession, location_id: Optional[str]) -> time:
    """Meeting start time used for late fees."""
    if location_id:
        location = await db.get(Location, location_id)
        if location:
            return fee_rules.meeting_start_time(location.default_meeting_time)
    return fee_rules.meeting_start_time()


def next_meeting_date(location: Location, today: date) -> date:
    """The location's meeting day on or after ``today``."""
    # dateutil counts Monday=0, locations count Sunday=0
    return today + relativedelta(weekday=weekday((location.default_meeting_day + 6) % 7))
