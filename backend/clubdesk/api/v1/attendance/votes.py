"""
Attendance vote endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.base import ZERO
from clubdesk.models.member import Member
from clubdesk.models.vote import VoteStatus
from clubdesk.schemas.vote import (
    VoteCreate, VoteDetail, VoteAnswerCreate, VoteAnswerResponse, VoteAnswerResult, VoteHistoryItem
)
from clubdesk.services import votes as vote_service

router = APIRouter()


@router.get("/votes", response_model=list[VoteDetail])
async def list_votes(
    status_filter: Optional[VoteStatus] = Query(None, alias="status"),
    location_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    votes = await vote_service.list_votes(db, status=status_filter, location_id=location_id)
    return [VoteDetail.model_validate(v) for v in votes]


@router.post("/votes", response_model=VoteDetail, status_code=status.HTTP_201_CREATED)
async def create_vote(
    vote_data: VoteCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    """Open a vote. Without a meeting date, the location's next meeting day is used."""
    vote = await vote_service.create_vote(
        db, created_by_id=admin.id, now=clock.now(), **vote_data.model_dump()
    )
    return VoteDetail.model_validate(vote)


@router.get("/votes/history", response_model=list[VoteHistoryItem])
async def my_vote_history(
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    rows = await vote_service.list_member_responses(db, current_member.id)
    return [
        VoteHistoryItem(
            vote=VoteDetail.model_validate(vote),
            answer=VoteAnswerResponse.model_validate(response)
        )
        for response, vote in rows
    ]


@router.get("/votes/{vote_id}", response_model=VoteDetail)
async def get_vote(
    vote_id: str,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    return VoteDetail.model_validate(await vote_service.get_vote(db, vote_id))


@router.get("/votes/{vote_id}/responses", response_model=list[VoteAnswerResponse])
async def list_vote_responses(
    vote_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    responses = await vote_service.list_responses(db, vote_id)
    return [VoteAnswerResponse.model_validate(r) for r in responses]


@router.put("/votes/{vote_id}/response", response_model=VoteAnswerResult)
async def respond_to_vote(
    vote_id: str,
    answer: VoteAnswerCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_member: Member = Depends(get_current_member)
):
    """
    Answer a vote, or change an earlier answer.

    Changing YES to NO close to the meeting is charged; the result carries
    the penalty amount and transaction.
    """
    response, penalty_txn = await vote_service.respond(
        db, vote_id, current_member.id, answer.response, clock.now()
    )
    return VoteAnswerResult(
        answer=VoteAnswerResponse.model_validate(response),
        penalty_amount=-penalty_txn.amount if penalty_txn else ZERO,
        penalty_transaction_id=penalty_txn.id if penalty_txn else None
    )


@router.post("/votes/{vote_id}/close", response_model=VoteDetail)
async def close_vote(
    vote_id: str,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    vote = await vote_service.close_vote(db, vote_id, clock.now())
    return VoteDetail.model_validate(vote)
