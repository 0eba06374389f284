"""
Attendance record model.
"""
from typing import Optional
from datetime import date
from enum import Enum
from sqlalchemy import String, Text, Date, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    NO_SHOW = "NO_SHOW"


class AttendanceRecord(BaseModel):
    """
    Final attendance outcome of one member for one meeting.

    Records are immutable once created; fees and counters are derived from them.
    """
    __tablename__ = "attendance_records"

    member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    meeting_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[AttendanceStatus] = mapped_column(
        SQLEnum(
            AttendanceStatus,
            name="attendancestatus",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False
    )
    # Local "HH:MM" or "HH:MM:SS"
    arrival_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    location_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True
    )
    recorded_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )
    pending_record_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("pending_attendance_records.id", ondelete="SET NULL"),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<AttendanceRecord {self.member_id} {self.meeting_date} {self.status.value}>"
