"""
Member schemas.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from clubdesk.models.member import Industry, MemberRole, MemberStatus, MembershipLevel


class MemberCreate(BaseModel):
    """Create a member. Without a password a random one is generated."""
    username: str = Field(..., min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=8)
    korean_name: Optional[str] = Field(None, max_length=100)
    english_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    industry: Optional[Industry] = None
    membership_level: MembershipLevel = MembershipLevel.HONOR_I
    role: MemberRole = MemberRole.MEMBER
    is_lead: bool = False
    is_sub_lead: bool = False


class MemberUpdate(BaseModel):
    korean_name: Optional[str] = Field(None, max_length=100)
    english_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    industry: Optional[Industry] = None
    # Admin-only fields
    membership_level: Optional[MembershipLevel] = None
    role: Optional[MemberRole] = None
    status: Optional[MemberStatus] = None
    status_reason: Optional[str] = None
    is_lead: Optional[bool] = None
    is_sub_lead: Optional[bool] = None


class MemberResponse(BaseModel):
    id: str
    username: str
    korean_name: Optional[str] = None
    english_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    industry: Optional[Industry] = None
    membership_level: MembershipLevel
    role: MemberRole
    status: MemberStatus
    status_reason: Optional[str] = None
    consecutive_absences: int = 0
    last_attendance_date: Optional[date] = None
    attendance_rate: Decimal = Decimal("0.00")
    is_lead: bool = False
    is_sub_lead: bool = False
    must_change_password: bool = False
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class MemberCreatedResponse(BaseModel):
    member: MemberResponse
    initial_password: Optional[str] = None


class MemberListResponse(BaseModel):
    """Paginated list of members."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[MemberResponse]
