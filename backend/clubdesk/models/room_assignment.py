"""
Room assignment model.
"""
from typing import Optional
from datetime import date
from sqlalchemy import String, Integer, Date, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel


class RoomAssignment(BaseModel):
    """Members placed in one discussion room for one meeting."""
    __tablename__ = "room_assignments"

    meeting_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    location_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True
    )
    room_number: Mapped[int] = mapped_column(Integer, nullable=False)
    room_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    leader_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )
    # Member ids, leader included
    member_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    created_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<RoomAssignment {self.meeting_date} room={self.room_number}>"
