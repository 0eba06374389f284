"""
Room assignment schemas.
"""
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, Field


class RoomAssignmentCreate(BaseModel):
    meeting_date: date
    room_number: int = Field(..., ge=1)
    room_name: Optional[str] = Field(None, max_length=100)
    location_id: Optional[str] = None
    leader_id: Optional[str] = None
    member_ids: list[str] = []


class RoomGenerateRequest(BaseModel):
    """Generate every room of a meeting with the pairing-avoidance allocator."""
    meeting_date: date
    location_id: Optional[str] = None
    room_count: Optional[int] = Field(None, ge=1)
    member_ids: Optional[list[str]] = None
    seed: Optional[int] = None


class RoomAssignmentResponse(BaseModel):
    id: str
    meeting_date: date
    location_id: Optional[str] = None
    room_number: int
    room_name: Optional[str] = None
    leader_id: Optional[str] = None
    member_ids: list[str]
    created_by_id: Optional[str] = None
    created: datetime

    class Config:
        from_attributes = True
