"""
Manual triggers for the scheduled sweeps.

The scheduler runs these on its own; the endpoints let an admin run one
immediately. Both paths share the same per-sweep locks.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import require_admin
from clubdesk.models.member import Member
from clubdesk.schemas.dashboard import PresenterSweepResult, VoteSweepResult, WarningResetResult
from clubdesk.services import sweeps

router = APIRouter(prefix="/sweeps")


@router.post("/vote-deadlines", response_model=VoteSweepResult)
async def run_vote_deadlines(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    summary = await sweeps.run_vote_deadline_sweep(db, clock.now())
    return VoteSweepResult(closed_votes=len(summary), non_voters=summary)


@router.post("/warning-reset", response_model=WarningResetResult)
async def run_warning_reset(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    resolved = await sweeps.run_warning_reset(db, clock.now())
    return WarningResetResult(resolved=resolved)


@router.post("/presenter-deadlines", response_model=PresenterSweepResult)
async def run_presenter_deadlines(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    charged = await sweeps.run_presenter_deadline_sweep(db, clock.now())
    return PresenterSweepResult(charged=charged)
