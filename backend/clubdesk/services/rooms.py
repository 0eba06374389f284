"""
Room assignment service.
"""
import logging
import random
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.config import settings
from clubdesk.core.exceptions import DomainValidationError, NotFoundError, PolicyViolationError
from clubdesk.models.member import Member, MemberStatus
from clubdesk.models.room_assignment import RoomAssignment
from clubdesk.models.vote import Vote, VoteChoice, VoteResponse
from clubdesk.services.room_allocator import allocate_rooms, count_pairs

logger = logging.getLogger(__name__)


async def get_room_assignment(db: AsyncSession, assignment_id: str) -> RoomAssignment:
    assignment = await db.get(RoomAssignment, assignment_id)
    if not assignment:
        raise NotFoundError("Room assignment not found")
    return assignment


async def list_room_assignments(
    db: AsyncSession,
    meeting_date: Optional[date] = None,
    location_id: Optional[str] = None,
    leader_id: Optional[str] = None,
) -> list[RoomAssignment]:
    query = select(RoomAssignment)
    if meeting_date:
        query = query.where(RoomAssignment.meeting_date == meeting_date)
    if location_id:
        query = query.where(RoomAssignment.location_id == location_id)
    if leader_id:
        query = query.where(RoomAssignment.leader_id == leader_id)
    result = await db.execute(
        query.order_by(RoomAssignment.meeting_date.desc(), RoomAssignment.room_number)
    )
    return list(result.scalars().all())


async def _ensure_members(db: AsyncSession, member_ids: list[str]) -> None:
    if not member_ids:
        return
    result = await db.execute(select(Member.id).where(Member.id.in_(member_ids)))
    found = set(result.scalars().all())
    missing = [m for m in member_ids if m not in found]
    if missing:
        raise DomainValidationError(f"Unknown members: {', '.join(missing)}")


async def create_room_assignment(
    db: AsyncSession,
    meeting_date: date,
    room_number: int,
    member_ids: list[str],
    leader_id: Optional[str] = None,
    room_name: Optional[str] = None,
    location_id: Optional[str] = None,
    created_by_id: Optional[str] = None,
) -> RoomAssignment:
    member_ids = list(dict.fromkeys(member_ids))
    if leader_id and leader_id not in member_ids:
        member_ids.insert(0, leader_id)
    if not member_ids:
        raise DomainValidationError("A room needs at least one member")
    await _ensure_members(db, member_ids)

    assignment = RoomAssignment(
        meeting_date=meeting_date,
        location_id=location_id,
        room_number=room_number,
        room_name=room_name or f"Room {room_number}",
        leader_id=leader_id,
        member_ids=member_ids,
        created_by_id=created_by_id
    )
    db.add(assignment)
    await db.flush()
    return assignment


async def recent_pair_counts(db: AsyncSession, before: date, weeks: Optional[int] = None):
    """Co-assignment counts from the rooms of the last few weeks."""
    weeks = weeks if weeks is not None else settings.ROOM_HISTORY_WEEKS
    result = await db.execute(
        select(RoomAssignment.member_ids).where(
            RoomAssignment.meeting_date < before,
            RoomAssignment.meeting_date >= before - timedelta(weeks=weeks)
        )
    )
    return count_pairs(result.scalars().all())


async def yes_voters(db: AsyncSession, meeting_date: date, location_id: Optional[str] = None) -> list[Member]:
    """ACTIVE members who answered YES for the meeting."""
    query = (
        select(Member)
        .join(VoteResponse, VoteResponse.member_id == Member.id)
        .join(Vote, Vote.id == VoteResponse.vote_id)
        .where(
            Vote.meeting_date == meeting_date,
            VoteResponse.response == VoteChoice.YES,
            Member.status == MemberStatus.ACTIVE
        )
    )
    if location_id:
        query = query.where(Vote.location_id == location_id)
    result = await db.execute(query.order_by(Member.username))
    return list(dict.fromkeys(result.scalars().all()))


async def generate_room_assignments(
    db: AsyncSession,
    meeting_date: date,
    location_id: Optional[str] = None,
    room_count: Optional[int] = None,
    member_ids: Optional[list[str]] = None,
    created_by_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> list[RoomAssignment]:
    """
    Build all rooms for a meeting.

    Participants default to the YES voters; room count defaults to the number
    of leads among them.
    """
    existing = await list_room_assignments(db, meeting_date=meeting_date, location_id=location_id)
    if existing:
        raise PolicyViolationError(f"Rooms for {meeting_date.isoformat()} already exist")

    if member_ids is None:
        participants = await yes_voters(db, meeting_date, location_id)
    else:
        await _ensure_members(db, member_ids)
        result = await db.execute(
            select(Member).where(Member.id.in_(member_ids)).order_by(Member.username)
        )
        participants = list(result.scalars().all())

    if not participants:
        raise PolicyViolationError("No participants to assign")

    leader_ids = [m.id for m in participants if m.is_lead]
    rooms_needed = room_count or max(1, len(leader_ids))
    if rooms_needed < 1:
        raise DomainValidationError("room_count must be at least 1")

    pair_counts = await recent_pair_counts(db, meeting_date)
    allocation = allocate_rooms(
        [m.id for m in participants],
        leader_ids,
        rooms_needed,
        pair_counts,
        rng
    )

    assignments = []
    for room in allocation:
        if not room.member_ids:
            continue
        assignment = RoomAssignment(
            meeting_date=meeting_date,
            location_id=location_id,
            room_number=room.room_number,
            room_name=f"Room {room.room_number}",
            leader_id=room.leader_id,
            member_ids=room.member_ids,
            created_by_id=created_by_id
        )
        db.add(assignment)
        assignments.append(assignment)
    await db.flush()

    logger.info(
        "Generated %d rooms for %s with %d participants",
        len(assignments), meeting_date, len(participants)
    )
    return assignments
