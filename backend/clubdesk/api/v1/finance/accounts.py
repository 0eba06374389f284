"""
Deposit account endpoints for the finance module.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.clock import Clock, get_clock
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.financial_account import FinancialAccount
from clubdesk.models.member import Member
from clubdesk.schemas.finance import (
    AccountResponse, AnnualFeeUpdate, DepositCreate, LedgerVerification, TransactionResponse
)
from clubdesk.services import ledger

router = APIRouter()


def account_to_response(account: FinancialAccount, member: Member) -> AccountResponse:
    """Convert FinancialAccount model to AccountResponse schema."""
    return AccountResponse(
        id=account.id,
        member_id=account.member_id,
        username=member.username,
        display_name=member.display_name,
        deposit_balance=account.deposit_balance,
        annual_fee_paid=account.annual_fee_paid,
        annual_fee_date=account.annual_fee_date,
        last_deposit_date=account.last_deposit_date,
        transaction_count=account.transaction_count,
    )


@router.get("/accounts", response_model=list[AccountResponse])
async def list_accounts(
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    rows = await ledger.list_accounts(db)
    return [account_to_response(account, member) for account, member in rows]


@router.get("/accounts/me", response_model=AccountResponse)
async def my_account(
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    account = await ledger.get_or_create_account(db, current_member.id)
    return account_to_response(account, current_member)


@router.get("/accounts/{member_id}", response_model=AccountResponse)
async def get_account(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    if member_id != current_member.id and not current_member.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this account"
        )
    member = await db.get(Member, member_id)
    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    account = await ledger.get_or_create_account(db, member_id)
    return account_to_response(account, member)


@router.post("/deposits", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def record_deposit(
    deposit: DepositCreate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    txn = await ledger.record_deposit(
        db,
        deposit.member_id,
        deposit.amount,
        clock.now(),
        processed_by_id=admin.id,
        description=deposit.description
    )
    return TransactionResponse.model_validate(txn)


@router.put("/accounts/{member_id}/annual-fee", response_model=AccountResponse)
async def set_annual_fee(
    member_id: str,
    update: AnnualFeeUpdate,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: Member = Depends(require_admin)
):
    member = await db.get(Member, member_id)
    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    account = await ledger.set_annual_fee_paid(db, member_id, update.paid, clock.now())
    return account_to_response(account, member)


@router.get("/accounts/{member_id}/verify", response_model=LedgerVerification)
async def verify_account(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    """Replay the ledger and compare it with the cached balance."""
    return LedgerVerification(**await ledger.verify_account(db, member_id))
