"""
Leader attendance sheet endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member
from clubdesk.models.pending_attendance import PendingStatus
from clubdesk.schemas.attendance import (
    ApprovalReportResponse,
    EntryOutcomeResponse,
    PendingAttendanceCreate,
    PendingAttendanceResponse,
    PendingAttendanceUpdate,
    RejectRequest,
)
from clubdesk.services import attendance_workflow
from clubdesk.services.attendance_workflow import ApprovalReport

router = APIRouter()


def report_to_response(report: ApprovalReport) -> ApprovalReportResponse:
    """Convert an ApprovalReport to its response schema."""
    return ApprovalReportResponse(
        pending_id=report.pending_id,
        status=report.status,
        records_created=report.records_created,
        transactions_created=report.transactions_created,
        errors=report.errors,
        outcomes=[
            EntryOutcomeResponse(
                member_id=o.member_id,
                status=o.status,
                attendance_record_id=o.attendance_record_id,
                transaction_ids=o.transaction_ids,
                errors=o.errors,
            )
            for o in report.outcomes
        ],
    )


@router.get("/pending", response_model=list[PendingAttendanceResponse])
async def list_pending(
    status_filter: Optional[PendingStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    """Admins see every sheet; leaders see their own."""
    leader_id = None if current_member.is_admin else current_member.id
    pending = await attendance_workflow.list_pending(db, status=status_filter, leader_id=leader_id)
    return [PendingAttendanceResponse.model_validate(p) for p in pending]


@router.post("/pending", response_model=PendingAttendanceResponse, status_code=status.HTTP_201_CREATED)
async def submit_pending(
    sheet: PendingAttendanceCreate,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    pending = await attendance_workflow.create_pending(
        db, sheet.room_assignment_id, current_member, sheet.entries
    )
    return PendingAttendanceResponse.model_validate(pending)


@router.put("/pending/{pending_id}", response_model=PendingAttendanceResponse)
async def update_pending(
    pending_id: str,
    sheet: PendingAttendanceUpdate,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    pending = await attendance_workflow.update_pending(db, pending_id, current_member.id, sheet.entries)
    return PendingAttendanceResponse.model_validate(pending)


@router.delete("/pending/{pending_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pending(
    pending_id: str,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    await attendance_workflow.delete_pending(db, pending_id, current_member.id)


@router.post("/pending/{pending_id}/approve", response_model=ApprovalReportResponse)
async def approve_pending(
    pending_id: str,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    """
    Approve a sheet: record attendance and apply fees for every member.

    Individual fee failures do not block the approval; they are listed in
    the report's ``errors`` and kept on the sheet.
    """
    report = await attendance_workflow.approve_pending(db, pending_id, admin.id, clock.now())
    return report_to_response(report)


@router.post("/pending/{pending_id}/reject", response_model=PendingAttendanceResponse)
async def reject_pending(
    pending_id: str,
    rejection: RejectRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    pending = await attendance_workflow.reject_pending(
        db, pending_id, admin.id, rejection.reason, clock.now()
    )
    return PendingAttendanceResponse.model_validate(pending)
