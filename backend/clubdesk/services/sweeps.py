"""
Scheduled sweeps.

Each sweep is run-to-completion and safe to fire twice: a per-sweep lock
serializes overlapping runs in one process, and the work itself is guarded by
state (CLOSED votes and charged presenters are skipped).
"""
import asyncio
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.clock import as_utc, week_window
from clubdesk.models.member import Member, MemberStatus
from clubdesk.models.presenter import PresenterAssignment, PresenterStatus
from clubdesk.models.vote import Vote, VoteResponse, VoteStatus
from clubdesk.models.warning import WarningType
from clubdesk.services import presenters, votes, warning_engine

logger = logging.getLogger(__name__)

_vote_deadline_lock = asyncio.Lock()
_warning_reset_lock = asyncio.Lock()
_presenter_deadline_lock = asyncio.Lock()


async def run_vote_deadline_sweep(db: AsyncSession, now: datetime) -> dict[str, int]:
    """
    Close every ACTIVE vote past its deadline.

    Every ACTIVE member who answered no vote for that meeting week gets an
    ABSENCE_WARNING first.
    Returns the number of non-voters per closed vote.
    """
    async with _vote_deadline_lock:
        result = await db.execute(
            select(Vote.id)
            .where(
                Vote.status == VoteStatus.ACTIVE,
                Vote.deadline < as_utc(now)
            )
            .order_by(Vote.deadline)
        )
        vote_ids = list(result.scalars().all())

        summary: dict[str, int] = {}
        for vote_id in vote_ids:
            vote = await votes.get_vote(db, vote_id)
            if vote.status != VoteStatus.ACTIVE:
                continue

            # an answer to any vote that week counts; the weekly location
            # rule may have kept the member from answering this one
            start, end = week_window(vote.meeting_date)
            responded = (
                select(VoteResponse.member_id)
                .join(Vote, Vote.id == VoteResponse.vote_id)
                .where(
                    Vote.meeting_date >= start,
                    Vote.meeting_date < end
                )
            )
            result = await db.execute(
                select(Member.id)
                .where(
                    Member.status == MemberStatus.ACTIVE,
                    Member.id.not_in(responded)
                )
                .order_by(Member.username)
            )
            non_voters = list(result.scalars().all())

            for member_id in non_voters:
                await warning_engine.issue_warning(
                    db,
                    member_id,
                    WarningType.ABSENCE_WARNING,
                    f"No response to vote '{vote.title}' for {vote.meeting_date.isoformat()}"
                )

            await votes.close_vote(db, vote_id, now)
            summary[vote_id] = len(non_voters)
            logger.info("Vote %s closed by sweep, %d non-voters warned", vote_id, len(non_voters))

        return summary


async def run_warning_reset(db: AsyncSession, now: datetime) -> int:
    """Semi-annual bulk resolution of all open warnings."""
    async with _warning_reset_lock:
        return await warning_engine.reset_all_warnings(db, now)


async def run_presenter_deadline_sweep(db: AsyncSession, now: datetime) -> list[str]:
    """Charge every presenter whose topic deadline passed with nothing submitted."""
    async with _presenter_deadline_lock:
        result = await db.execute(
            select(PresenterAssignment.id).where(
                PresenterAssignment.status == PresenterStatus.NOT_SUBMITTED,
                PresenterAssignment.penalty_applied == False,  # noqa: E712
                PresenterAssignment.topic_deadline < as_utc(now)
            )
        )
        charged = []
        for presenter_id in result.scalars().all():
            presenter = await presenters.get_presenter(db, presenter_id)
            if await presenters.apply_late_topic_penalty(db, presenter, now):
                charged.append(presenter_id)

        if charged:
            logger.info("Presenter sweep charged %d late topics", len(charged))
        return charged
