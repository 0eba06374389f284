"""
Attendance record endpoints.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member
from clubdesk.schemas.attendance import (
    AttendanceRecordResponse, DirectAttendanceCreate, EntryOutcomeResponse
)
from clubdesk.services import attendance_workflow

router = APIRouter()


@router.get("/records", response_model=list[AttendanceRecordResponse])
async def list_records(
    member_id: Optional[str] = Query(None),
    meeting_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    if not current_member.is_admin:
        member_id = current_member.id
    records = await attendance_workflow.list_attendance(db, member_id=member_id, meeting_date=meeting_date)
    return [AttendanceRecordResponse.model_validate(r) for r in records]


@router.post("/records", response_model=EntryOutcomeResponse, status_code=status.HTTP_201_CREATED)
async def record_attendance(
    data: DirectAttendanceCreate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    """Direct admin entry; fees are applied the same way as for approved sheets."""
    outcome = await attendance_workflow.record_attendance(
        db,
        data.member_id,
        data.meeting_date,
        data.status,
        admin.id,
        arrival_time=data.arrival_time,
        notes=data.notes,
        location_id=data.location_id
    )
    return EntryOutcomeResponse(
        member_id=outcome.member_id,
        status=outcome.status,
        attendance_record_id=outcome.attendance_record_id,
        transaction_ids=outcome.transaction_ids,
        errors=outcome.errors,
    )
