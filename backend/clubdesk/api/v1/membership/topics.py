"""
Meeting topic endpoints.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member
from clubdesk.schemas.meeting_topic import MeetingTopicCreate, MeetingTopicResponse
from clubdesk.services import topics as topic_service

router = APIRouter()


@router.get("/topics", response_model=list[MeetingTopicResponse])
async def list_topics(
    meeting_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    if meeting_date is not None:
        topic = await topic_service.topic_for_date(db, meeting_date)
        return [MeetingTopicResponse.model_validate(topic)] if topic else []
    topics = await topic_service.list_topics(db)
    return [MeetingTopicResponse.model_validate(t) for t in topics]


@router.post("/topics", response_model=MeetingTopicResponse, status_code=status.HTTP_201_CREATED)
async def create_topic(
    topic_data: MeetingTopicCreate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    topic = await topic_service.create_topic(db, created_by_id=admin.id, **topic_data.model_dump())
    return MeetingTopicResponse.model_validate(topic)
