"""
Attendance schemas: leader sheets, approval reports and records.
"""
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, Field

from clubdesk.models.attendance_record import AttendanceStatus
from clubdesk.models.pending_attendance import PendingStatus


class AttendanceEntry(BaseModel):
    member_id: str
    status: AttendanceStatus
    arrival_time: Optional[str] = Field(None, max_length=8)
    notes: Optional[str] = None


class PendingAttendanceCreate(BaseModel):
    room_assignment_id: str
    entries: list[AttendanceEntry]


class PendingAttendanceUpdate(BaseModel):
    entries: list[AttendanceEntry]


class PendingAttendanceResponse(BaseModel):
    id: str
    room_assignment_id: str
    leader_id: str
    meeting_date: date
    entries: list[AttendanceEntry]
    status: PendingStatus
    reviewed_by_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    approval_errors: Optional[list[dict]] = None
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class EntryOutcomeResponse(BaseModel):
    member_id: str
    status: str
    attendance_record_id: Optional[str] = None
    transaction_ids: list[str] = []
    errors: list[dict] = []


class ApprovalReportResponse(BaseModel):
    pending_id: Optional[str] = None
    status: PendingStatus
    records_created: int
    transactions_created: int
    errors: list[dict] = []
    outcomes: list[EntryOutcomeResponse] = []


class DirectAttendanceCreate(BaseModel):
    """Admin records one member's attendance without a leader sheet."""
    member_id: str
    meeting_date: date
    status: AttendanceStatus
    arrival_time: Optional[str] = Field(None, max_length=8)
    notes: Optional[str] = None
    location_id: Optional[str] = None


class AttendanceRecordResponse(BaseModel):
    id: str
    member_id: str
    meeting_date: date
    status: AttendanceStatus
    arrival_time: Optional[str] = None
    notes: Optional[str] = None
    location_id: Optional[str] = None
    recorded_by_id: Optional[str] = None
    pending_record_id: Optional[str] = None
    created: datetime

    class Config:
        from_attributes = True
