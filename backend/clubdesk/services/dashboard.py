"""
Dashboard statistics for admins.
"""
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.clock import club_timezone, to_local
from clubdesk.models.attendance_record import AttendanceRecord, AttendanceStatus
from clubdesk.models.member import Member, MemberStatus
from clubdesk.models.vote import Vote, VoteStatus
from clubdesk.models.warning import MemberWarning

ABSENCE_ALERT_STREAK = 3


async def get_stats(db: AsyncSession, now: datetime) -> dict:
    today = to_local(now, club_timezone()).date()
    week_ago = today - timedelta(days=7)

    active_members = (await db.execute(
        select(func.count(Member.id)).where(Member.status == MemberStatus.ACTIVE)
    )).scalar() or 0

    suspended_members = (await db.execute(
        select(func.count(Member.id)).where(Member.status == MemberStatus.SUSPENDED)
    )).scalar() or 0

    result = await db.execute(
        select(AttendanceRecord.status).where(
            AttendanceRecord.meeting_date >= week_ago,
            AttendanceRecord.meeting_date <= today
        )
    )
    recent = list(result.scalars().all())
    if recent:
        present = sum(1 for s in recent if s == AttendanceStatus.PRESENT)
        weekly_rate = (Decimal(present) * 100 / Decimal(len(recent))).quantize(Decimal("0.01"))
    else:
        weekly_rate = Decimal("0.00")

    active_votes = (await db.execute(
        select(func.count(Vote.id)).where(Vote.status == VoteStatus.ACTIVE)
    )).scalar() or 0

    absence_alerts = (await db.execute(
        select(func.count(Member.id)).where(
            Member.consecutive_absences >= ABSENCE_ALERT_STREAK
        )
    )).scalar() or 0

    open_warnings = (await db.execute(
        select(func.count(MemberWarning.id)).where(MemberWarning.is_resolved == False)  # noqa: E712
    )).scalar() or 0

    return {
        "active_members": active_members,
        "suspended_members": suspended_members,
        "weekly_attendance_rate": weekly_rate,
        "active_votes": active_votes,
        "members_with_absence_streak": absence_alerts,
        "open_warnings": open_warnings,
    }
