"""
Member roster service.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.exceptions import (
    DomainValidationError,
    IllegalTransitionError,
    NotFoundError,
    PermissionDeniedError,
    PolicyViolationError,
)
from clubdesk.core.security import check_password, generate_initial_password, hash_password
from clubdesk.models.attendance_record import AttendanceRecord, AttendanceStatus
from clubdesk.models.member import Member, MemberRole, MemberStatus, MembershipLevel

logger = logging.getLogger(__name__)

# Fields a member may edit on their own profile
PROFILE_FIELDS = ("korean_name", "english_name", "email", "phone_number", "industry")
ADMIN_FIELDS = PROFILE_FIELDS + (
    "membership_level", "role", "status", "status_reason", "is_lead", "is_sub_lead"
)


async def get_member(db: AsyncSession, member_id: str) -> Member:
    member = await db.get(Member, member_id)
    if not member:
        raise NotFoundError("Member not found")
    return member


async def get_by_username(db: AsyncSession, username: str) -> Optional[Member]:
    result = await db.execute(select(Member).where(Member.username == username))
    return result.scalar_one_or_none()


async def authenticate(db: AsyncSession, username: str, password: str) -> Optional[Member]:
    member = await get_by_username(db, username)
    if not member or not check_password(password, member.password_hash):
        return None
    return member


async def create_member(
    db: AsyncSession,
    username: str,
    password: Optional[str] = None,
    membership_level: MembershipLevel = MembershipLevel.HONOR_I,
    role: MemberRole = MemberRole.MEMBER,
    **profile,
) -> tuple[Member, Optional[str]]:
    """
    Add a member to the roster.

    Without an explicit password a random one is generated; it is returned
    exactly once so the admin can hand it over, and the member must change it.
    """
    username = (username or "").strip()
    if not username:
        raise DomainValidationError("Username is required")
    if await get_by_username(db, username):
        raise PolicyViolationError(f"Username {username} is already taken")

    initial_password = None
    if not password:
        initial_password = generate_initial_password()
        password = initial_password

    member = Member(
        username=username,
        password_hash=hash_password(password),
        membership_level=membership_level,
        role=role,
        status=MemberStatus.ACTIVE,
        must_change_password=initial_password is not None,
        **{k: v for k, v in profile.items() if k in ADMIN_FIELDS}
    )
    db.add(member)
    await db.flush()

    logger.info("Created member %s (%s)", username, member.id)
    return member, initial_password


async def list_members(
    db: AsyncSession,
    status: Optional[MemberStatus] = None,
    search: Optional[str] = None,
    page: int = 1,
    per_page: int = 30,
) -> tuple[list[Member], int]:
    query = select(Member)
    if status:
        query = query.where(Member.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Member.username.ilike(pattern),
            Member.korean_name.ilike(pattern),
            Member.english_name.ilike(pattern),
            Member.email.ilike(pattern)
        ))

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    query = query.order_by(Member.username.asc()).offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def update_member(
    db: AsyncSession,
    member_id: str,
    changes: dict,
    actor: Member,
) -> Member:
    """Admins may edit any roster field; members only their own profile."""
    member = await get_member(db, member_id)

    if actor.is_admin:
        allowed = ADMIN_FIELDS
    elif actor.id == member_id:
        allowed = PROFILE_FIELDS
    else:
        raise PermissionDeniedError("Not allowed to edit this member")

    forbidden = [field for field in changes if field not in allowed]
    if forbidden:
        raise PermissionDeniedError(f"Not allowed to change: {', '.join(sorted(forbidden))}")

    new_status = changes.pop("status", None)
    if new_status is not None and new_status != member.status:
        if not member.can_transition_to(new_status):
            raise IllegalTransitionError(
                f"Cannot change status from {member.status.value} to {new_status.value}"
            )
        member.status = new_status
        if new_status == MemberStatus.ACTIVE:
            member.status_reason = None
        logger.info("Member %s status set to %s by %s", member_id, new_status.value, actor.id)

    for field, value in changes.items():
        setattr(member, field, value)

    await db.flush()
    return member


async def change_password(
    db: AsyncSession,
    member: Member,
    current_password: str,
    new_password: str,
) -> None:
    if not check_password(current_password, member.password_hash):
        raise PermissionDeniedError("Current password is incorrect")
    if len(new_password) < 8:
        raise DomainValidationError("Password must be at least 8 characters")
    member.password_hash = hash_password(new_password)
    member.must_change_password = False
    await db.flush()


async def recalculate_attendance_rate(db: AsyncSession, member_id: str) -> Decimal:
    """PRESENT records over all records, as a percentage with two decimals."""
    result = await db.execute(
        select(AttendanceRecord.status).where(AttendanceRecord.member_id == member_id)
    )
    statuses = list(result.scalars().all())

    if statuses:
        present = sum(1 for s in statuses if s == AttendanceStatus.PRESENT)
        rate = (Decimal(present) * 100 / Decimal(len(statuses))).quantize(Decimal("0.01"))
    else:
        rate = Decimal("0.00")

    member = await get_member(db, member_id)
    member.attendance_rate = rate
    await db.flush()
    return rate
