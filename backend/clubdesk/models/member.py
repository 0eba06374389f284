"""
Member model.

Members are never deleted; they move between ACTIVE, INACTIVE and SUSPENDED.
"""
from typing import Optional
from datetime import date
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Integer, Boolean, Date, Text, Numeric, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel


class MemberStatus(str, Enum):
    """Status of a club member."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class MemberRole(str, Enum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class MembershipLevel(str, Enum):
    """Four-level honor scale, I lowest to IV highest."""
    HONOR_I = "HONOR_I"
    HONOR_II = "HONOR_II"
    HONOR_III = "HONOR_III"
    HONOR_IV = "HONOR_IV"


class Industry(str, Enum):
    FINANCE = "FINANCE"
    IT = "IT"
    MANUFACTURING = "MANUFACTURING"
    HEALTHCARE = "HEALTHCARE"
    EDUCATION = "EDUCATION"
    CONSULTING = "CONSULTING"
    OTHER = "OTHER"


VALID_STATUS_TRANSITIONS = {
    MemberStatus.ACTIVE: [MemberStatus.INACTIVE, MemberStatus.SUSPENDED],
    MemberStatus.INACTIVE: [MemberStatus.ACTIVE, MemberStatus.SUSPENDED],
    MemberStatus.SUSPENDED: [MemberStatus.ACTIVE, MemberStatus.INACTIVE],
}


class Member(BaseModel):
    """Club member: roster entry, login identity and rule-engine counters."""
    __tablename__ = "members"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    korean_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    english_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    industry: Mapped[Optional[Industry]] = mapped_column(
        SQLEnum(
            Industry,
            name="industry",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=True
    )

    membership_level: Mapped[MembershipLevel] = mapped_column(
        SQLEnum(
            MembershipLevel,
            name="membershiplevel",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=MembershipLevel.HONOR_I,
        nullable=False
    )
    role: Mapped[MemberRole] = mapped_column(
        SQLEnum(
            MemberRole,
            name="memberrole",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=MemberRole.MEMBER,
        nullable=False
    )
    status: Mapped[MemberStatus] = mapped_column(
        SQLEnum(
            MemberStatus,
            name="memberstatus",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=MemberStatus.ACTIVE,
        nullable=False,
        index=True
    )
    status_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Attendance counters maintained by the rule engine
    consecutive_absences: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_attendance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    attendance_rate: Mapped[Decimal] = mapped_column(
        Numeric(precision=5, scale=2), default=Decimal("0.00"), nullable=False
    )

    # Room leadership (lead is exempt from absence suspension, sub-lead is lenient)
    is_lead: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_sub_lead: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    must_change_password: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.english_name or self.korean_name or self.username

    def can_transition_to(self, new_status: MemberStatus) -> bool:
        """Check if transition to new_status is valid."""
        return new_status in VALID_STATUS_TRANSITIONS.get(self.status, [])

    def __repr__(self) -> str:
        return f"<Member {self.username} ({self.status.value})>"
