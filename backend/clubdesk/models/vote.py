"""
Attendance vote models.

A vote asks members whether they will attend one meeting at one location.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, Date, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel, Money, ZERO


class VoteStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class VoteChoice(str, Enum):
    YES = "YES"
    NO = "NO"


# CLOSED is terminal
VALID_VOTE_TRANSITIONS = {
    VoteStatus.ACTIVE: [VoteStatus.CLOSED],
    VoteStatus.CLOSED: [],
}


class Vote(BaseModel):
    """Weekly attendance vote for one location and meeting date."""
    __tablename__ = "votes"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    location_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    # Local calendar date of the meeting at the vote's location
    meeting_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    status: Mapped[VoteStatus] = mapped_column(
        SQLEnum(
            VoteStatus,
            name="votestatus",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=VoteStatus.ACTIVE,
        nullable=False,
        index=True
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )

    def can_transition_to(self, new_status: VoteStatus) -> bool:
        return new_status in VALID_VOTE_TRANSITIONS.get(self.status, [])

    def __repr__(self) -> str:
        return f"<Vote {self.title} {self.meeting_date} ({self.status.value})>"


class VoteResponse(BaseModel):
    """One member's answer to one vote."""
    __tablename__ = "vote_responses"
    __table_args__ = (
        UniqueConstraint("vote_id", "member_id", name="uq_vote_responses_vote_member"),
    )

    vote_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("votes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    response: Mapped[VoteChoice] = mapped_column(
        SQLEnum(
            VoteChoice,
            name="votechoice",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False
    )
    # Total charged for YES -> NO flips on this response
    cancellation_penalty: Mapped[Decimal] = mapped_column(Money, default=ZERO, nullable=False)

    def __repr__(self) -> str:
        return f"<VoteResponse vote={self.vote_id} member={self.member_id} {self.response.value}>"
