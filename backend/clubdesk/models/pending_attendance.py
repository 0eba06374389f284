"""
Pending attendance batch submitted by a room leader.
"""
from typing import Optional
from datetime import date, datetime
from enum import Enum
from sqlalchemy import String, Text, Date, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel


class PendingStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


VALID_PENDING_TRANSITIONS = {
    PendingStatus.PENDING: [PendingStatus.APPROVED, PendingStatus.REJECTED],
    PendingStatus.APPROVED: [],
    PendingStatus.REJECTED: [],
}


class PendingAttendanceRecord(BaseModel):
    """
    A leader's attendance sheet for one room, awaiting admin review.

    ``entries`` holds ``{"member_id", "status", "arrival_time", "notes"}``
    dicts, one per member assigned to the room.
    """
    __tablename__ = "pending_attendance_records"

    room_assignment_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("room_assignments.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    leader_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    meeting_date: Mapped[date] = mapped_column(Date, nullable=False)
    entries: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    status: Mapped[PendingStatus] = mapped_column(
        SQLEnum(
            PendingStatus,
            name="pendingstatus",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=PendingStatus.PENDING,
        nullable=False,
        index=True
    )
    reviewed_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Side effects that failed during approval
    approval_errors: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    def can_transition_to(self, new_status: PendingStatus) -> bool:
        return new_status in VALID_PENDING_TRANSITIONS.get(self.status, [])

    def __repr__(self) -> str:
        return f"<PendingAttendanceRecord {self.id} {self.meeting_date} ({self.status.value})>"
