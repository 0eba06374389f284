"""
Vote lifecycle and the one-location-per-week policy.

Votes go ACTIVE -> CLOSED and never back. A member may answer several votes
in one Sunday-start week only if they all belong to the same location.
Changing a YES to NO carries the tiered cancellation penalty.
"""
import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.clock import as_utc, club_timezone, to_local, week_window
from clubdesk.core.exceptions import (
    DomainValidationError,
    IllegalTransitionError,
    NotFoundError,
    PolicyViolationError,
)
from clubdesk.models.financial_transaction import FinancialTransaction, TransactionType
from clubdesk.models.member import Member
from clubdesk.models.vote import Vote, VoteChoice, VoteResponse, VoteStatus
from clubdesk.models.warning import WarningType
from clubdesk.services import fee_rules, ledger, warning_engine
from clubdesk.services.locations import get_location, location_timezone, next_meeting_date

logger = logging.getLogger(__name__)


async def get_vote(db: AsyncSession, vote_id: str) -> Vote:
    result = await db.execute(
        select(Vote).where(Vote.id == vote_id).execution_options(populate_existing=True)
    )
    vote = result.scalar_one_or_none()
    if not vote:
        raise NotFoundError("Vote not found")
    return vote


async def create_vote(
    db: AsyncSession,
    title: str,
    meeting_date: Optional[date],
    deadline: datetime,
    location_id: Optional[str] = None,
    description: Optional[str] = None,
    created_by_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Vote:
    """
    Open a vote.

    Without ``meeting_date`` the vote is for the location's next meeting day
    on or after ``now`` (local date), so both a location and ``now`` are needed.
    """
    if not title or not title.strip():
        raise DomainValidationError("Vote title is required")
    location = await get_location(db, location_id) if location_id else None

    if meeting_date is None:
        if location is None or now is None:
            raise DomainValidationError("meeting_date is required when no location is given")
        today = to_local(now, club_timezone(location.timezone)).date()
        meeting_date = next_meeting_date(location, today)

    vote = Vote(
        title=title.strip(),
        description=description,
        location_id=location_id,
        meeting_date=meeting_date,
        deadline=as_utc(deadline),
        status=VoteStatus.ACTIVE,
        created_by_id=created_by_id
    )
    db.add(vote)
    await db.flush()
    logger.info("Created vote %s for %s (deadline %s)", vote.id, meeting_date, vote.deadline)
    return vote


async def list_votes(
    db: AsyncSession,
    status: Optional[VoteStatus] = None,
    location_id: Optional[str] = None,
) -> list[Vote]:
    query = select(Vote)
    if status:
        query = query.where(Vote.status == status)
    if location_id:
        query = query.where(Vote.location_id == location_id)
    result = await db.execute(query.order_by(Vote.meeting_date.desc(), Vote.created.desc()))
    return list(result.scalars().all())


async def list_responses(db: AsyncSession, vote_id: str) -> list[VoteResponse]:
    await get_vote(db, vote_id)
    result = await db.execute(
        select(VoteResponse)
        .where(VoteResponse.vote_id == vote_id)
        .order_by(VoteResponse.created)
    )
    return list(result.scalars().all())


async def list_member_responses(db: AsyncSession, member_id: str) -> list[tuple[VoteResponse, Vote]]:
    """A member's voting history, newest meeting first."""
    result = await db.execute(
        select(VoteResponse, Vote)
        .join(Vote, Vote.id == VoteResponse.vote_id)
        .where(VoteResponse.member_id == member_id)
        .order_by(Vote.meeting_date.desc())
    )
    return [(response, vote) for response, vote in result.all()]


async def responses_for_meeting(
    db: AsyncSession,
    member_id: str,
    meeting_date: date,
) -> list[VoteResponse]:
    """The member's responses to any vote for the given meeting date."""
    result = await db.execute(
        select(VoteResponse)
        .join(Vote, Vote.id == VoteResponse.vote_id)
        .where(
            VoteResponse.member_id == member_id,
            Vote.meeting_date == meeting_date
        )
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def close_vote(db: AsyncSession, vote_id: str, now: datetime) -> Vote:
    vote = await get_vote(db, vote_id)
    if not vote.can_transition_to(VoteStatus.CLOSED):
        raise IllegalTransitionError(f"Vote is already {vote.status.value}")
    vote.status = VoteStatus.CLOSED
    vote.closed_at = as_utc(now)
    await db.flush()
    logger.info("Closed vote %s", vote_id)
    return vote


async def _check_weekly_location(db: AsyncSession, vote: Vote, member_id: str) -> None:
    start, end = week_window(vote.meeting_date)
    result = await db.execute(
        select(Vote.id, Vote.location_id)
        .join(VoteResponse, VoteResponse.vote_id == Vote.id)
        .where(
            VoteResponse.member_id == member_id,
            Vote.meeting_date >= start,
            Vote.meeting_date < end,
            Vote.id != vote.id
        )
    )
    for other_vote_id, other_location_id in result.all():
        if other_location_id != vote.location_id:
            raise PolicyViolationError(
                "Already responded to a vote for a different location in the week of "
                f"{start.isoformat()}"
            )


async def respond(
    db: AsyncSession,
    vote_id: str,
    member_id: str,
    choice: VoteChoice,
    now: datetime,
) -> tuple[VoteResponse, Optional[FinancialTransaction]]:
    """
    Record or change a member's answer.

    A first answer needs an ACTIVE vote before its deadline and must pass the
    weekly location check. Later answers are updates; they stay possible until
    the end of the meeting day, and a YES -> NO change is charged by how close
    to the meeting it happens. Returns the response and the penalty
    transaction, if one was posted.
    """
    vote = await get_vote(db, vote_id)
    member = await db.get(Member, member_id)
    if not member:
        raise NotFoundError("Member not found")

    result = await db.execute(
        select(VoteResponse)
        .where(
            VoteResponse.vote_id == vote_id,
            VoteResponse.member_id == member_id
        )
        .execution_options(populate_existing=True)
    )
    existing = result.scalar_one_or_none()

    if existing is None:
        if vote.status != VoteStatus.ACTIVE:
            raise PolicyViolationError("Vote is closed")
        if as_utc(now) > as_utc(vote.deadline):
            raise PolicyViolationError("Vote deadline has passed")
        await _check_weekly_location(db, vote, member_id)

        response = VoteResponse(
            vote_id=vote_id,
            member_id=member_id,
            response=choice
        )
        db.add(response)
        await db.flush()
        logger.info("Member %s answered %s on vote %s", member_id, choice.value, vote_id)
        return response, None

    tz = await location_timezone(db, vote.location_id)
    if to_local(now, tz).date() > vote.meeting_date:
        raise PolicyViolationError("The meeting has already been held")

    previous = existing.response
    if previous == choice:
        return existing, None

    response_id = existing.id
    penalty_txn = None

    async with db.begin_nested():
        existing.response = choice
        await db.flush()

        if previous == VoteChoice.YES and choice == VoteChoice.NO:
            penalty = fee_rules.flip_penalty(now, vote.meeting_date, tz)
            if penalty.charged:
                penalty_txn = await ledger.debit(
                    db,
                    member_id,
                    penalty.amount,
                    TransactionType.CANCELLATION_PENALTY,
                    f"Cancelled attendance for {vote.meeting_date.isoformat()}",
                    related_vote_id=vote_id
                )
                response = await db.get(VoteResponse, response_id)
                response.cancellation_penalty = response.cancellation_penalty + penalty.amount
                await db.flush()
            if penalty.issues_warning:
                await warning_engine.issue_warning(
                    db,
                    member_id,
                    WarningType.CANCELLATION_PENALTY,
                    f"Cancelled on the meeting day ({vote.meeting_date.isoformat()})"
                )

    response = await db.get(VoteResponse, response_id)
    logger.info(
        "Member %s changed vote %s from %s to %s",
        member_id, vote_id, previous.value, choice.value
    )
    return response, penalty_txn
