"""
Location schemas.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = None
    timezone: str = Field("Asia/Seoul", max_length=64)
    default_meeting_day: int = Field(0, ge=0, le=6)
    default_meeting_time: str = Field("10:00", max_length=8)


class LocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = None
    timezone: Optional[str] = Field(None, max_length=64)
    default_meeting_day: Optional[int] = Field(None, ge=0, le=6)
    default_meeting_time: Optional[str] = Field(None, max_length=8)
    is_active: Optional[bool] = None


class LocationResponse(BaseModel):
    id: str
    name: str
    address: Optional[str] = None
    timezone: str
    default_meeting_day: int
    default_meeting_time: str
    is_active: bool
    created: datetime

    class Config:
        from_attributes = True
