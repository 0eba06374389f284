"""
Warning schemas.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from clubdesk.models.warning import WarningType


class WarningCreate(BaseModel):
    member_id: str
    warning_type: WarningType = WarningType.OTHER
    reason: str = Field(..., min_length=1)


class WarningResponse(BaseModel):
    id: str
    member_id: str
    warning_type: WarningType
    reason: str
    issued_by_id: Optional[str] = None
    is_resolved: bool
    resolved_by_id: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created: datetime

    class Config:
        from_attributes = True
