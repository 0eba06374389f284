"""
Suggestion schemas.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from clubdesk.models.suggestion import SuggestionStatus


class SuggestionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    image_url: Optional[str] = Field(None, max_length=500)


class SuggestionStatusUpdate(BaseModel):
    status: SuggestionStatus


class SuggestionResponse(BaseModel):
    id: str
    member_id: str
    title: str
    content: str
    image_url: Optional[str] = None
    status: SuggestionStatus
    reviewed_by_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created: datetime

    class Config:
        from_attributes = True
