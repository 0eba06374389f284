"""
SQLAlchemy models for ClubDesk.

ClubDesk modules:
- Membership: Members, locations, room assignments, presenters,
  meeting topics, suggestions
- Finance: Accounts, ledger transactions
- Attendance: Votes, pending batches, attendance records, warnings
"""
# Membership module
from clubdesk.models.member import (
    Member, MemberStatus, MemberRole, MembershipLevel, Industry
)
from clubdesk.models.location import Location
from clubdesk.models.room_assignment import RoomAssignment
from clubdesk.models.presenter import PresenterAssignment, PresenterStatus
from clubdesk.models.meeting_topic import MeetingTopic
from clubdesk.models.suggestion import Suggestion, SuggestionStatus

# Finance module
from clubdesk.models.financial_account import FinancialAccount
from clubdesk.models.financial_transaction import FinancialTransaction, TransactionType

# Attendance module
from clubdesk.models.vote import Vote, VoteResponse, VoteStatus, VoteChoice
from clubdesk.models.attendance_record import AttendanceRecord, AttendanceStatus
from clubdesk.models.pending_attendance import PendingAttendanceRecord, PendingStatus
from clubdesk.models.warning import MemberWarning, WarningType

__all__ = [
    "Member", "MemberStatus", "MemberRole", "MembershipLevel", "Industry",
    "Location",
    "RoomAssignment",
    "PresenterAssignment", "PresenterStatus",
    "MeetingTopic",
    "Suggestion", "SuggestionStatus",
    "FinancialAccount",
    "FinancialTransaction", "TransactionType",
    "Vote", "VoteResponse", "VoteStatus", "VoteChoice",
    "AttendanceRecord", "AttendanceStatus",
    "PendingAttendanceRecord", "PendingStatus",
    "MemberWarning", "WarningType",
]
