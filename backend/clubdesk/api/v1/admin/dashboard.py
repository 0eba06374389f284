"""
Dashboard endpoints.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import require_admin
from clubdesk.models.member import Member
from clubdesk.schemas.dashboard import DashboardStats
from clubdesk.services import dashboard as dashboard_service

router = APIRouter()


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    return DashboardStats(**await dashboard_service.get_stats(db, clock.now()))


@router.get("/scheduler")
async def scheduler_status(
    request: Request,
    admin: Member = Depends(require_admin)
):
    """Jobs and last runs of the background scheduler, if it is enabled."""
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        return {"running": False, "jobs": [], "last_runs": {}}
    return scheduler.get_status()
