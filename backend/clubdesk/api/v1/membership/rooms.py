"""
Room assignment endpoints.
"""
import random
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member
from clubdesk.schemas.room_assignment import (
    RoomAssignmentCreate, RoomAssignmentResponse, RoomGenerateRequest
)
from clubdesk.services import rooms as room_service

router = APIRouter()


@router.get("/rooms", response_model=list[RoomAssignmentResponse])
async def list_rooms(
    meeting_date: Optional[date] = Query(None),
    location_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    assignments = await room_service.list_room_assignments(
        db, meeting_date=meeting_date, location_id=location_id
    )
    return [RoomAssignmentResponse.model_validate(a) for a in assignments]


@router.post("/rooms", response_model=RoomAssignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_data: RoomAssignmentCreate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    assignment = await room_service.create_room_assignment(
        db, created_by_id=admin.id, **room_data.model_dump()
    )
    return RoomAssignmentResponse.model_validate(assignment)


@router.post("/rooms/generate", response_model=list[RoomAssignmentResponse], status_code=status.HTTP_201_CREATED)
async def generate_rooms(
    request: RoomGenerateRequest,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    """Split the meeting's participants into rooms, avoiding repeat pairings."""
    rng = random.Random(request.seed) if request.seed is not None else None
    assignments = await room_service.generate_room_assignments(
        db,
        meeting_date=request.meeting_date,
        location_id=request.location_id,
        room_count=request.room_count,
        member_ids=request.member_ids,
        created_by_id=admin.id,
        rng=rng
    )
    return [RoomAssignmentResponse.model_validate(a) for a in assignments]


@router.get("/rooms/{assignment_id}", response_model=RoomAssignmentResponse)
async def get_room(
    assignment_id: str,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    assignment = await room_service.get_room_assignment(db, assignment_id)
    return RoomAssignmentResponse.model_validate(assignment)
