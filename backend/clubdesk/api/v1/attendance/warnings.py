"""
Warning endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member
from clubdesk.schemas.warning import WarningCreate, WarningResponse
from clubdesk.services import members as member_service, warning_engine

router = APIRouter()


@router.get("/warnings", response_model=list[WarningResponse])
async def list_warnings(
    member_id: Optional[str] = Query(None),
    unresolved_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    if not current_member.is_admin:
        member_id = current_member.id
    warnings = await warning_engine.list_warnings(db, member_id=member_id, unresolved_only=unresolved_only)
    return [WarningResponse.model_validate(w) for w in warnings]


@router.post("/warnings", response_model=WarningResponse, status_code=status.HTTP_201_CREATED)
async def issue_warning(
    data: WarningCreate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    """Issue a manual warning; the third open warning suspends the member."""
    await member_service.get_member(db, data.member_id)
    warning = await warning_engine.issue_warning(
        db, data.member_id, data.warning_type, data.reason, issued_by_id=admin.id
    )
    return WarningResponse.model_validate(warning)


@router.post("/warnings/{warning_id}/resolve", response_model=WarningResponse)
async def resolve_warning(
    warning_id: str,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    warning = await warning_engine.resolve_warning(db, warning_id, admin.id, clock.now())
    return WarningResponse.model_validate(warning)
