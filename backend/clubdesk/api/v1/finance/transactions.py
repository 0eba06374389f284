"""
Ledger transaction endpoints.
"""
from math import ceil
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.financial_transaction import TransactionType
from clubdesk.models.member import Member
from clubdesk.schemas.finance import (
    ManualTransactionCreate, TransactionListResponse, TransactionResponse
)
from clubdesk.services import ledger

router = APIRouter()


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=500),
    member_id: Optional[str] = Query(None),
    transaction_type: Optional[TransactionType] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    """Admins see every transaction; members only their own."""
    if not current_member.is_admin:
        member_id = current_member.id

    items, total_items = await ledger.list_transactions(
        db, member_id=member_id, transaction_type=transaction_type, page=page, per_page=perPage
    )
    return TransactionListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=ceil(total_items / perPage) if total_items > 0 else 1,
        items=[TransactionResponse.model_validate(t) for t in items]
    )


@router.post("/transactions", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    data: ManualTransactionCreate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    """Manual posting by an admin, e.g. a refund or an adjustment."""
    post = ledger.credit if data.direction == "credit" else ledger.debit
    txn = await post(
        db,
        data.member_id,
        data.amount,
        data.transaction_type,
        data.description,
        processed_by_id=admin.id
    )
    return TransactionResponse.model_validate(txn)
