"""
Financial account model.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, Boolean, Integer, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from clubdesk.models.base import BaseModel, Money, ZERO

if TYPE_CHECKING:
    from clubdesk.models.financial_transaction import FinancialTransaction


class FinancialAccount(BaseModel):
    """
    Deposit account, exactly one per member.

    ``deposit_balance`` is a cache: it must always equal the sum of the
    account's transaction amounts. Only the ledger service writes it.
    """
    __tablename__ = "financial_accounts"

    member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False
    )

    deposit_balance: Mapped[Decimal] = mapped_column(Money, default=ZERO, nullable=False)
    annual_fee_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    annual_fee_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_deposit_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Sequence counter for transactions appended to this account
    transaction_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    transactions: Mapped[list["FinancialTransaction"]] = relationship(
        "FinancialTransaction",
        back_populates="account",
        order_by="FinancialTransaction.sequence"
    )

    def __repr__(self) -> str:
        return f"<FinancialAccount member={self.member_id} balance={self.deposit_balance}>"
