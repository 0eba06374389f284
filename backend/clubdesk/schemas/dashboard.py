"""
Dashboard and admin sweep schemas.
"""
from decimal import Decimal
from pydantic import BaseModel


class DashboardStats(BaseModel):
    active_members: int
    suspended_members: int
    weekly_attendance_rate: Decimal
    active_votes: int
    members_with_absence_streak: int
    open_warnings: int


class VoteSweepResult(BaseModel):
    closed_votes: int
    non_voters: dict[str, int]


class WarningResetResult(BaseModel):
    resolved: int


class PresenterSweepResult(BaseModel):
    charged: list[str]
