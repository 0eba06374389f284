"""
Warning and suspension engine.

Warnings accumulate per member; the third unresolved warning suspends the
member. Resolving warnings later never reactivates anyone: only
``restore_member`` (or an admin status edit) brings a member back.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.exceptions import IllegalTransitionError, NotFoundError
from clubdesk.models.member import Member, MemberStatus, MembershipLevel
from clubdesk.models.warning import MemberWarning, WarningType

logger = logging.getLogger(__name__)

LOW_BALANCE_THRESHOLD = Decimal("15000.00")
SUSPENSION_WARNING_COUNT = 3

SUB_LEAD_ABSENCE_THRESHOLD = 6
ABSENCE_THRESHOLDS = {
    MembershipLevel.HONOR_IV: 8,
    MembershipLevel.HONOR_III: 7,
    MembershipLevel.HONOR_II: 6,
    MembershipLevel.HONOR_I: 5,
}


async def _get_member(db: AsyncSession, member_id: str) -> Member:
    result = await db.execute(
        select(Member)
        .where(Member.id == member_id)
        .execution_options(populate_existing=True)
    )
    member = result.scalar_one_or_none()
    if not member:
        raise NotFoundError(f"Member {member_id} not found")
    return member


async def count_unresolved(db: AsyncSession, member_id: str) -> int:
    result = await db.execute(
        select(func.count(MemberWarning.id)).where(
            MemberWarning.member_id == member_id,
            MemberWarning.is_resolved == False  # noqa: E712
        )
    )
    return result.scalar() or 0


async def list_warnings(
    db: AsyncSession,
    member_id: Optional[str] = None,
    unresolved_only: bool = False,
) -> list[MemberWarning]:
    query = select(MemberWarning)
    if member_id:
        query = query.where(MemberWarning.member_id == member_id)
    if unresolved_only:
        query = query.where(MemberWarning.is_resolved == False)  # noqa: E712
    result = await db.execute(query.order_by(MemberWarning.created.desc()))
    return list(result.scalars().all())


async def issue_warning(
    db: AsyncSession,
    member_id: str,
    warning_type: WarningType,
    reason: str,
    issued_by_id: Optional[str] = None,
) -> MemberWarning:
    """Create a warning and run the suspension check."""
    warning = MemberWarning(
        member_id=member_id,
        warning_type=warning_type,
        reason=reason,
        issued_by_id=issued_by_id,
        is_resolved=False
    )
    db.add(warning)
    await db.flush()

    logger.info("Issued %s warning to member %s: %s", warning_type.value, member_id, reason)

    await check_and_suspend_member(db, member_id)
    return warning


async def check_low_balance_and_warn(
    db: AsyncSession,
    member_id: str,
    new_balance: Decimal,
) -> Optional[MemberWarning]:
    """Warn once while the balance sits at or below the threshold."""
    if new_balance > LOW_BALANCE_THRESHOLD:
        return None

    result = await db.execute(
        select(MemberWarning.id).where(
            MemberWarning.member_id == member_id,
            MemberWarning.warning_type == WarningType.LOW_BALANCE,
            MemberWarning.is_resolved == False  # noqa: E712
        ).limit(1)
    )
    if result.scalar_one_or_none():
        return None

    return await issue_warning(
        db,
        member_id,
        WarningType.LOW_BALANCE,
        f"Deposit balance {new_balance} is at or below {LOW_BALANCE_THRESHOLD}"
    )


async def _suspend(db: AsyncSession, member: Member, reason: str) -> None:
    if member.status == MemberStatus.SUSPENDED:
        return
    if not member.can_transition_to(MemberStatus.SUSPENDED):
        raise IllegalTransitionError(
            f"Cannot suspend member in status {member.status.value}"
        )
    member.status = MemberStatus.SUSPENDED
    member.status_reason = reason
    await db.flush()
    logger.info("Suspended member %s: %s", member.id, reason)


async def check_and_suspend_member(db: AsyncSession, member_id: str) -> bool:
    """Suspend the member when unresolved warnings reach the limit."""
    unresolved = await count_unresolved(db, member_id)
    if unresolved < SUSPENSION_WARNING_COUNT:
        return False

    member = await _get_member(db, member_id)
    await _suspend(db, member, f"Suspended after {unresolved} unresolved warnings")
    return True


def absence_threshold(member: Member) -> Optional[int]:
    """Consecutive absences that trigger suspension; None means never."""
    if member.is_lead:
        return None
    if member.is_sub_lead:
        return SUB_LEAD_ABSENCE_THRESHOLD
    return ABSENCE_THRESHOLDS.get(member.membership_level, ABSENCE_THRESHOLDS[MembershipLevel.HONOR_I])


async def update_consecutive_absences(
    db: AsyncSession,
    member_id: str,
    is_present: bool,
    meeting_date: Optional[date] = None,
) -> Member:
    member = await _get_member(db, member_id)

    if is_present:
        member.consecutive_absences = 0
        if meeting_date:
            member.last_attendance_date = meeting_date
        await db.flush()
        return member

    member.consecutive_absences += 1
    streak = member.consecutive_absences
    await db.flush()

    threshold = absence_threshold(member)
    if threshold is not None and streak >= threshold:
        await _suspend(db, member, f"Suspended after {streak} consecutive absences")

    return member


async def resolve_warning(
    db: AsyncSession,
    warning_id: str,
    admin_id: str,
    now: datetime,
) -> MemberWarning:
    warning = await db.get(MemberWarning, warning_id)
    if not warning:
        raise NotFoundError("Warning not found")
    if not warning.is_resolved:
        warning.is_resolved = True
        warning.resolved_by_id = admin_id
        warning.resolved_at = now
        await db.flush()
        logger.info("Warning %s resolved by %s", warning_id, admin_id)
    return warning


async def restore_member(
    db: AsyncSession,
    member_id: str,
    admin_id: str,
    now: datetime,
) -> Member:
    """Resolve every open warning of the member and set them ACTIVE again."""
    async with db.begin_nested():
        member = await _get_member(db, member_id)
        if member.status != MemberStatus.ACTIVE and not member.can_transition_to(MemberStatus.ACTIVE):
            raise IllegalTransitionError(
                f"Cannot restore member in status {member.status.value}"
            )

        result = await db.execute(
            update(MemberWarning)
            .where(
                MemberWarning.member_id == member_id,
                MemberWarning.is_resolved == False  # noqa: E712
            )
            .values(is_resolved=True, resolved_by_id=admin_id, resolved_at=now)
            .execution_options(synchronize_session="fetch")
        )

        member.status = MemberStatus.ACTIVE
        member.status_reason = None
        member.consecutive_absences = 0
        await db.flush()

    logger.info(
        "Member %s restored by %s (%d warnings resolved)",
        member_id, admin_id, result.rowcount
    )
    return member


async def reset_all_warnings(db: AsyncSession, now: datetime) -> int:
    """Resolve every open warning system-wide. Member statuses are untouched."""
    result = await db.execute(
        update(MemberWarning)
        .where(MemberWarning.is_resolved == False)  # noqa: E712
        .values(is_resolved=True, resolved_at=now)
        .execution_options(synchronize_session="fetch")
    )
    await db.flush()
    count = result.rowcount or 0
    logger.info("Semi-annual reset resolved %d warnings", count)
    return count
