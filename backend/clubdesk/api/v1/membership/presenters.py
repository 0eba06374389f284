"""
Presenter endpoints.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member
from clubdesk.schemas.presenter import (
    PresenterCreate, PresenterResponse, TopicSubmit, MaterialSubmit
)
from clubdesk.services import presenters as presenter_service

router = APIRouter()


@router.get("/presenters", response_model=list[PresenterResponse])
async def list_presenters(
    meeting_date: Optional[date] = Query(None),
    member_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    presenters = await presenter_service.list_presenters(db, meeting_date=meeting_date, member_id=member_id)
    return [PresenterResponse.model_validate(p) for p in presenters]


@router.post("/presenters", response_model=PresenterResponse, status_code=status.HTTP_201_CREATED)
async def assign_presenter(
    presenter_data: PresenterCreate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    presenter = await presenter_service.assign_presenter(
        db, assigned_by_id=admin.id, **presenter_data.model_dump()
    )
    return PresenterResponse.model_validate(presenter)


@router.post("/presenters/{presenter_id}/topic", response_model=PresenterResponse)
async def submit_topic(
    presenter_id: str,
    topic: TopicSubmit,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_member: Member = Depends(get_current_member)
):
    """Submit the topic; after the deadline this is a late submission and is charged."""
    presenter = await presenter_service.submit_topic(
        db, presenter_id, current_member, topic.topic_title, topic.topic_description, clock.now()
    )
    return PresenterResponse.model_validate(presenter)


@router.post("/presenters/{presenter_id}/material", response_model=PresenterResponse)
async def submit_material(
    presenter_id: str,
    material: MaterialSubmit,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_member: Member = Depends(get_current_member)
):
    presenter = await presenter_service.submit_material(
        db, presenter_id, current_member, material.material_url, clock.now()
    )
    return PresenterResponse.model_validate(presenter)
