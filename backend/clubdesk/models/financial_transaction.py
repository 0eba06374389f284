"""
Financial transaction (ledger entry) model.
"""
from typing import Optional, TYPE_CHECKING
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Integer, Text, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from clubdesk.models.base import BaseModel, Money

if TYPE_CHECKING:
    from clubdesk.models.financial_account import FinancialAccount


class TransactionType(str, Enum):
    ANNUAL_FEE = "ANNUAL_FEE"
    DEPOSIT = "DEPOSIT"
    ROOM_FEE = "ROOM_FEE"
    LATE_FEE = "LATE_FEE"
    CANCELLATION_PENALTY = "CANCELLATION_PENALTY"
    PRESENTER_PENALTY = "PRESENTER_PENALTY"
    REFUND = "REFUND"
    ADJUSTMENT = "ADJUSTMENT"


class FinancialTransaction(BaseModel):
    """
    Immutable ledger entry.

    ``amount`` is signed (positive = credit, negative = debit) and
    ``balance_after`` equals the previous entry's ``balance_after`` plus
    ``amount``; ``sequence`` orders entries within one account.
    """
    __tablename__ = "financial_transactions"
    __table_args__ = (
        UniqueConstraint("account_id", "sequence", name="uq_financial_transactions_account_sequence"),
    )

    member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    account_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("financial_accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    transaction_type: Mapped[TransactionType] = mapped_column(
        SQLEnum(
            TransactionType,
            name="transactiontype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False,
        index=True
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Money, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # What caused the entry
    related_attendance_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("attendance_records.id", ondelete="SET NULL"),
        nullable=True
    )
    related_vote_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("votes.id", ondelete="SET NULL"),
        nullable=True
    )
    processed_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True
    )

    account: Mapped["FinancialAccount"] = relationship(
        "FinancialAccount",
        back_populates="transactions"
    )

    def __repr__(self) -> str:
        return f"<FinancialTransaction {self.transaction_type.value} {self.amount} -> {self.balance_after}>"
