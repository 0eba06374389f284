"""
Shared columns and column types for ClubDesk tables.
"""
import secrets
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from clubdesk.db.base import Base

ID_LENGTH = 15

# Won amounts, kept with two decimals so sums stay exact.
Money = Numeric(precision=12, scale=2, asdecimal=True)
ZERO = Decimal("0.00")


def new_id() -> str:
    return secrets.token_hex(8)[:ID_LENGTH]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    """String primary key plus ``created`` and ``updated`` stamps (UTC)."""
    __abstract__ = True

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now, nullable=False
    )
