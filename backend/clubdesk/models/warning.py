"""
Member warning model.
"""
from typing import Optional
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel


class WarningType(str, Enum):
    LOW_BALANCE = "LOW_BALANCE"
    CANCELLATION_PENALTY = "CANCELLATION_PENALTY"
    LATE_PENALTY = "LATE_PENALTY"
    ABSENCE_WARNING = "ABSENCE_WARNING"
    OTHER = "OTHER"


class MemberWarning(BaseModel):
    """Warning against a member; three unresolved warnings suspend the member."""
    __tablename__ = "warnings"

    member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    warning_type: Mapped[WarningType] = mapped_column(
        SQLEnum(
            WarningType,
            name="warningtype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)

    issued_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    resolved_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<MemberWarning {self.warning_type.value} member={self.member_id} resolved={self.is_resolved}>"
