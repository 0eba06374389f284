"""
Meeting topic service.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.exceptions import DomainValidationError
from clubdesk.models.meeting_topic import MeetingTopic

logger = logging.getLogger(__name__)


async def create_topic(
    db: AsyncSession,
    meeting_date: date,
    title: str,
    description: Optional[str] = None,
    created_by_id: Optional[str] = None,
) -> MeetingTopic:
    if not title or not title.strip():
        raise DomainValidationError("Topic title is required")

    topic = MeetingTopic(
        meeting_date=meeting_date,
        title=title.strip(),
        description=description,
        created_by_id=created_by_id
    )
    db.add(topic)
    await db.flush()
    logger.info("Topic %s announced for %s", topic.id, meeting_date)
    return topic


async def list_topics(db: AsyncSession) -> list[MeetingTopic]:
    """Newest meeting first."""
    result = await db.execute(
        select(MeetingTopic).order_by(MeetingTopic.meeting_date.desc(), MeetingTopic.created.desc())
    )
    return list(result.scalars().all())


async def topic_for_date(db: AsyncSession, meeting_date: date) -> Optional[MeetingTopic]:
    """The most recently announced topic for that day, if any."""
    result = await db.execute(
        select(MeetingTopic)
        .where(MeetingTopic.meeting_date == meeting_date)
        .order_by(MeetingTopic.created.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
