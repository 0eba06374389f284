"""
Member endpoints for the membership module.
"""
from math import ceil
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member, MemberStatus
from clubdesk.schemas.attendance import AttendanceRecordResponse
from clubdesk.schemas.member import (
    MemberCreate, MemberUpdate, MemberResponse, MemberCreatedResponse, MemberListResponse
)
from clubdesk.services import attendance_workflow, members as member_service, warning_engine

router = APIRouter()


@router.get("/members", response_model=MemberListResponse)
async def list_members(
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=500),
    status_filter: Optional[MemberStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    members, total_items = await member_service.list_members(
        db, status=status_filter, search=search, page=page, per_page=perPage
    )
    return MemberListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=[MemberResponse.model_validate(m) for m in members]
    )


@router.post("/members", response_model=MemberCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    member_data: MemberCreate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    """
    Create a new member. Requires admin.

    When no password is given the generated one is returned in this
    response only.
    """
    data = member_data.model_dump()
    member, initial_password = await member_service.create_member(db, **data)
    return MemberCreatedResponse(
        member=MemberResponse.model_validate(member),
        initial_password=initial_password
    )


@router.get("/members/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    member = await member_service.get_member(db, member_id)
    return MemberResponse.model_validate(member)


@router.patch("/members/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: str,
    member_data: MemberUpdate,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    """Admins edit any roster field; members edit their own profile."""
    changes = member_data.model_dump(exclude_unset=True)
    member = await member_service.update_member(db, member_id, changes, current_member)
    return MemberResponse.model_validate(member)


@router.post("/members/{member_id}/restore", response_model=MemberResponse)
async def restore_member(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    """Resolve all open warnings and reactivate a suspended member."""
    member = await warning_engine.restore_member(db, member_id, admin.id, clock.now())
    return MemberResponse.model_validate(member)


@router.get("/members/{member_id}/attendance", response_model=list[AttendanceRecordResponse])
async def member_attendance(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    await member_service.get_member(db, member_id)
    records = await attendance_workflow.list_attendance(db, member_id=member_id)
    return [AttendanceRecordResponse.model_validate(r) for r in records]
