"""
Presenter schemas.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from clubdesk.models.presenter import PresenterStatus


class PresenterCreate(BaseModel):
    member_id: str
    meeting_date: date
    topic_deadline: datetime
    material_deadline: Optional[datetime] = None
    location_id: Optional[str] = None


class TopicSubmit(BaseModel):
    topic_title: str = Field(..., min_length=1, max_length=255)
    topic_description: Optional[str] = None


class MaterialSubmit(BaseModel):
    material_url: str = Field(..., min_length=1, max_length=500)


class PresenterResponse(BaseModel):
    id: str
    member_id: str
    meeting_date: date
    location_id: Optional[str] = None
    topic_title: Optional[str] = None
    topic_description: Optional[str] = None
    material_url: Optional[str] = None
    topic_deadline: datetime
    material_deadline: Optional[datetime] = None
    topic_submitted_at: Optional[datetime] = None
    material_submitted_at: Optional[datetime] = None
    status: PresenterStatus
    penalty_applied: bool = False
    penalty_amount: Decimal = Decimal("0.00")

    class Config:
        from_attributes = True
