"""
Presenter assignment model.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, Boolean, Date, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel, Money, ZERO


class PresenterStatus(str, Enum):
    NOT_SUBMITTED = "NOT_SUBMITTED"
    TOPIC_SUBMITTED = "TOPIC_SUBMITTED"
    LATE_SUBMISSION = "LATE_SUBMISSION"
    MATERIAL_SUBMITTED = "MATERIAL_SUBMITTED"


VALID_PRESENTER_TRANSITIONS = {
    PresenterStatus.NOT_SUBMITTED: [
        PresenterStatus.TOPIC_SUBMITTED,
        PresenterStatus.LATE_SUBMISSION
    ],
    PresenterStatus.TOPIC_SUBMITTED: [PresenterStatus.MATERIAL_SUBMITTED],
    PresenterStatus.LATE_SUBMISSION: [PresenterStatus.MATERIAL_SUBMITTED],
    PresenterStatus.MATERIAL_SUBMITTED: [],
}


class PresenterAssignment(BaseModel):
    """A member scheduled to present a topic at one meeting."""
    __tablename__ = "presenter_assignments"

    member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    meeting_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    location_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True
    )

    topic_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    topic_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    material_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    topic_deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    material_deadline: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    topic_submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    material_submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    status: Mapped[PresenterStatus] = mapped_column(
        SQLEnum(
            PresenterStatus,
            name="presenterstatus",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=PresenterStatus.NOT_SUBMITTED,
        nullable=False,
        index=True
    )
    penalty_applied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    penalty_amount: Mapped[Decimal] = mapped_column(Money, default=ZERO, nullable=False)

    assigned_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )

    def can_transition_to(self, new_status: PresenterStatus) -> bool:
        return new_status in VALID_PRESENTER_TRANSITIONS.get(self.status, [])

    def __repr__(self) -> str:
        return f"<PresenterAssignment {self.member_id} {self.meeting_date} ({self.status.value})>"
