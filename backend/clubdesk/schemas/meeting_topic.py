"""
Meeting topic schemas.
"""
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, Field


class MeetingTopicCreate(BaseModel):
    meeting_date: date
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class MeetingTopicResponse(BaseModel):
    id: str
    meeting_date: date
    title: str
    description: Optional[str] = None
    created_by_id: Optional[str] = None
    created: datetime

    class Config:
        from_attributes = True
