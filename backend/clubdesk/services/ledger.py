"""
Ledger service.

Append-only transaction log per member plus the cached running balance on
``FinancialAccount``. Every posting locks the account row inside a SAVEPOINT
so the balance update and the transaction append land together or not at all.
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.core.exceptions import DomainValidationError, InvariantViolationError, NotFoundError
from clubdesk.models.base import ZERO
from clubdesk.models.financial_account import FinancialAccount
from clubdesk.models.financial_transaction import FinancialTransaction, TransactionType
from clubdesk.models.member import Member
from clubdesk.services import warning_engine

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_amount(value: Any) -> Decimal:
    """
    Coerce a caller-supplied amount to a strictly positive Decimal.

    Accepts int, Decimal and numeric strings. Booleans, non-numeric input and
    NaN/infinity are validation errors; zero and negatives are caller bugs.
    """
    if isinstance(value, bool):
        raise DomainValidationError("Amount must be a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise DomainValidationError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise DomainValidationError(f"Invalid amount: {value!r}")

    amount = amount.quantize(CENT)
    if amount <= 0:
        raise InvariantViolationError(f"Ledger amount must be positive, got {amount}")
    return amount


async def get_account(db: AsyncSession, member_id: str) -> Optional[FinancialAccount]:
    result = await db.execute(
        select(FinancialAccount).where(FinancialAccount.member_id == member_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_account(db: AsyncSession, member_id: str) -> FinancialAccount:
    """Return the member's account, creating it on first use."""
    account = await get_account(db, member_id)
    if account:
        return account

    member = await db.get(Member, member_id)
    if not member:
        raise NotFoundError(f"Member {member_id} not found")

    try:
        async with db.begin_nested():
            account = FinancialAccount(
                member_id=member_id,
                deposit_balance=ZERO,
                transaction_count=0
            )
            db.add(account)
            await db.flush()
    except IntegrityError as e:
        raise InvariantViolationError(
            f"Financial account for member {member_id} already exists"
        ) from e

    logger.info("Opened financial account for member %s", member_id)
    return account


async def _post(
    db: AsyncSession,
    member_id: str,
    signed_amount: Decimal,
    transaction_type: TransactionType,
    description: Optional[str],
    related_attendance_id: Optional[str] = None,
    related_vote_id: Optional[str] = None,
    processed_by_id: Optional[str] = None,
) -> FinancialTransaction:
    account = await get_or_create_account(db, member_id)
    account_id = account.id

    async with db.begin_nested():
        result = await db.execute(
            select(FinancialAccount)
            .where(FinancialAccount.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        account = result.scalar_one()

        new_balance = (account.deposit_balance + signed_amount).quantize(CENT)
        account.transaction_count += 1
        account.deposit_balance = new_balance

        txn = FinancialTransaction(
            member_id=member_id,
            account_id=account_id,
            sequence=account.transaction_count,
            transaction_type=transaction_type,
            amount=signed_amount,
            balance_after=new_balance,
            description=description,
            related_attendance_id=related_attendance_id,
            related_vote_id=related_vote_id,
            processed_by_id=processed_by_id
        )
        db.add(txn)
        await db.flush()

    logger.info(
        "Posted %s %s to member %s (balance %s)",
        transaction_type.value, signed_amount, member_id, new_balance
    )

    await warning_engine.check_low_balance_and_warn(db, member_id, new_balance)
    return txn


async def credit(
    db: AsyncSession,
    member_id: str,
    amount: Any,
    transaction_type: TransactionType,
    description: Optional[str] = None,
    **context: Optional[str],
) -> FinancialTransaction:
    """Add ``amount`` to the member's balance."""
    return await _post(db, member_id, to_amount(amount), transaction_type, description, **context)


async def debit(
    db: AsyncSession,
    member_id: str,
    amount: Any,
    transaction_type: TransactionType,
    description: Optional[str] = None,
    **context: Optional[str],
) -> FinancialTransaction:
    """Subtract ``amount`` from the member's balance. The balance may go negative."""
    return await _post(db, member_id, -to_amount(amount), transaction_type, description, **context)


async def get_balance(db: AsyncSession, member_id: str) -> Decimal:
    account = await get_account(db, member_id)
    return account.deposit_balance if account else ZERO


async def history(db: AsyncSession, member_id: str) -> list[FinancialTransaction]:
    """All of a member's transactions, oldest first."""
    result = await db.execute(
        select(FinancialTransaction)
        .where(FinancialTransaction.member_id == member_id)
        .order_by(FinancialTransaction.sequence)
    )
    return list(result.scalars().all())


async def replay_balance(db: AsyncSession, member_id: str) -> Decimal:
    """Recompute the balance from zero by summing every signed amount."""
    balance = ZERO
    for txn in await history(db, member_id):
        balance += txn.amount
    return balance.quantize(CENT)


async def verify_account(db: AsyncSession, member_id: str) -> dict:
    """Compare the cached balance with the replayed one and check the chain."""
    transactions = await history(db, member_id)
    cached = await get_balance(db, member_id)

    running = ZERO
    chain_ok = True
    for txn in transactions:
        running = (running + txn.amount).quantize(CENT)
        if txn.balance_after != running:
            chain_ok = False

    return {
        "member_id": member_id,
        "cached_balance": cached,
        "replayed_balance": running,
        "transaction_count": len(transactions),
        "consistent": chain_ok and cached == running,
    }


async def record_deposit(
    db: AsyncSession,
    member_id: str,
    amount: Any,
    now: datetime,
    processed_by_id: Optional[str] = None,
    description: Optional[str] = None,
) -> FinancialTransaction:
    """Credit a deposit and stamp the account's last deposit date."""
    txn = await credit(
        db,
        member_id,
        amount,
        TransactionType.DEPOSIT,
        description or "Deposit",
        processed_by_id=processed_by_id
    )
    account = await get_or_create_account(db, member_id)
    account.last_deposit_date = now
    await db.flush()
    return txn


async def set_annual_fee_paid(
    db: AsyncSession,
    member_id: str,
    paid: bool,
    now: datetime,
) -> FinancialAccount:
    """Toggle the annual fee flag; the date is cleared when unpaid."""
    account = await get_or_create_account(db, member_id)
    account.annual_fee_paid = paid
    account.annual_fee_date = now if paid else None
    await db.flush()
    logger.info("Annual fee for member %s marked %s", member_id, "paid" if paid else "unpaid")
    return account


async def list_accounts(db: AsyncSession) -> list[tuple[FinancialAccount, Member]]:
    result = await db.execute(
        select(FinancialAccount, Member)
        .join(Member, Member.id == FinancialAccount.member_id)
        .order_by(Member.username)
    )
    return [(account, member) for account, member in result.all()]


async def list_transactions(
    db: AsyncSession,
    member_id: Optional[str] = None,
    transaction_type: Optional[TransactionType] = None,
    page: int = 1,
    per_page: int = 50,
) -> tuple[list[FinancialTransaction], int]:
    """Newest-first page of transactions with the total count."""
    query = select(FinancialTransaction)
    if member_id:
        query = query.where(FinancialTransaction.member_id == member_id)
    if transaction_type:
        query = query.where(FinancialTransaction.transaction_type == transaction_type)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    query = query.order_by(
        FinancialTransaction.created.desc(),
        FinancialTransaction.sequence.desc()
    ).offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(query)
    return list(result.scalars().all()), total
