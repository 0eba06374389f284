"""
Member suggestion model.
"""
from typing import Optional
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel


class SuggestionStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"


VALID_SUGGESTION_TRANSITIONS = {
    SuggestionStatus.PENDING: [SuggestionStatus.REVIEWED],
    SuggestionStatus.REVIEWED: [],
}


class Suggestion(BaseModel):
    """Feedback a member leaves for the organisers."""
    __tablename__ = "suggestions"

    member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    status: Mapped[SuggestionStatus] = mapped_column(
        SQLEnum(
            SuggestionStatus,
            name="suggestionstatus",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=SuggestionStatus.PENDING,
        nullable=False,
        index=True
    )
    reviewed_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def can_transition_to(self, new_status: SuggestionStatus) -> bool:
        return new_status in VALID_SUGGESTION_TRANSITIONS.get(self.status, [])

    def __repr__(self) -> str:
        return f"<Suggestion {self.title} ({self.status.value})>"
