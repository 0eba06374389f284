"""
Pydantic schemas for the finance module.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from clubdesk.models.financial_transaction import TransactionType


class AccountResponse(BaseModel):
    """Deposit account with its owner."""
    id: str
    member_id: str
    username: Optional[str] = None
    display_name: Optional[str] = None
    deposit_balance: Decimal
    annual_fee_paid: bool = False
    annual_fee_date: Optional[datetime] = None
    last_deposit_date: Optional[datetime] = None
    transaction_count: int = 0


class TransactionResponse(BaseModel):
    id: str
    member_id: str
    account_id: str
    sequence: int
    transaction_type: TransactionType
    amount: Decimal
    balance_after: Decimal
    description: Optional[str] = None
    related_attendance_id: Optional[str] = None
    related_vote_id: Optional[str] = None
    processed_by_id: Optional[str] = None
    created: datetime

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    """Paginated list of transactions."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[TransactionResponse]


class DepositCreate(BaseModel):
    member_id: str
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = None


class ManualTransactionCreate(BaseModel):
    """Admin posting: REFUND/ADJUSTMENT/ANNUAL_FEE etc."""
    member_id: str
    transaction_type: TransactionType
    amount: Decimal = Field(..., gt=0)
    direction: str = Field("debit", pattern="^(credit|debit)$")
    description: Optional[str] = None


class AnnualFeeUpdate(BaseModel):
    paid: bool


class LedgerVerification(BaseModel):
    member_id: str
    cached_balance: Decimal
    replayed_balance: Decimal
    transaction_count: int
    consistent: bool
