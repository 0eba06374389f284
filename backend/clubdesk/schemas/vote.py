"""
Vote schemas.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from clubdesk.models.vote import VoteChoice, VoteStatus


class VoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    location_id: Optional[str] = None
    meeting_date: Optional[date] = None
    deadline: datetime


class VoteDetail(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    location_id: Optional[str] = None
    meeting_date: date
    deadline: datetime
    status: VoteStatus
    closed_at: Optional[datetime] = None
    created_by_id: Optional[str] = None
    created: datetime

    class Config:
        from_attributes = True


class VoteAnswerCreate(BaseModel):
    response: VoteChoice


class VoteAnswerResponse(BaseModel):
    id: str
    vote_id: str
    member_id: str
    response: VoteChoice
    cancellation_penalty: Decimal = Decimal("0.00")
    updated: datetime

    class Config:
        from_attributes = True


class VoteAnswerResult(BaseModel):
    """Outcome of answering: the stored answer plus any penalty charged."""
    answer: VoteAnswerResponse
    penalty_amount: Decimal = Decimal("0.00")
    penalty_transaction_id: Optional[str] = None


class VoteHistoryItem(BaseModel):
    vote: VoteDetail
    answer: VoteAnswerResponse
