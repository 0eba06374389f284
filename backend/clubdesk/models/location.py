"""
Meeting location model.
"""
from typing import Optional
from sqlalchemy import String, Integer, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.models.base import BaseModel


class Location(BaseModel):
    """A venue with its own timezone and default weekly slot."""
    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), default="Asia/Seoul", nullable=False)

    # 0 = Sunday .. 6 = Saturday
    default_meeting_day: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    default_meeting_time: Mapped[str] = mapped_column(String(8), default="10:00", nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Location {self.name}>"
