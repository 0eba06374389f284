"""
Meeting topic model.
"""
from typing import Optional
from datetime import date
from sqlalchemy import String, Text, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel


class MeetingTopic(BaseModel):
    """The discussion topic an admin announces for a meeting day."""
    __tablename__ = "meeting_topics"

    meeting_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<MeetingTopic {self.meeting_date} {self.title}>"
