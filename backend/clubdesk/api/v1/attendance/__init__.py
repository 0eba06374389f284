"""
Attendance module: votes, leader sheets, records and warnings.
"""
from fastapi import APIRouter

from clubdesk.api.v1.attendance import votes, pending, records, warnings

attendance_router = APIRouter(prefix="/attendance", tags=["attendance"])

attendance_router.include_router(votes.router)
attendance_router.include_router(pending.router)
attendance_router.include_router(records.router)
attendance_router.include_router(warnings.router)
