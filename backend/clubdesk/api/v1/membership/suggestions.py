"""
Suggestion endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member
from clubdesk.models.suggestion import SuggestionStatus
from clubdesk.schemas.suggestion import SuggestionCreate, SuggestionStatusUpdate, SuggestionResponse
from clubdesk.services import suggestions as suggestion_service

router = APIRouter()


@router.get("/suggestions", response_model=list[SuggestionResponse])
async def list_suggestions(
    status_filter: Optional[SuggestionStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    suggestions = await suggestion_service.list_suggestions(db, status=status_filter)
    return [SuggestionResponse.model_validate(s) for s in suggestions]


@router.post("/suggestions", response_model=SuggestionResponse, status_code=status.HTTP_201_CREATED)
async def create_suggestion(
    suggestion_data: SuggestionCreate,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    suggestion = await suggestion_service.create_suggestion(
        db, current_member.id, **suggestion_data.model_dump()
    )
    return SuggestionResponse.model_validate(suggestion)


@router.patch("/suggestions/{suggestion_id}/status", response_model=SuggestionResponse)
async def update_suggestion_status(
    suggestion_id: str,
    data: SuggestionStatusUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    suggestion = await suggestion_service.set_status(
        db, suggestion_id, data.status, admin.id, clock.now()
    )
    return SuggestionResponse.model_validate(suggestion)
