"""
Finance module: deposit accounts and the ledger.
"""
from fastapi import APIRouter

from clubdesk.api.v1.finance import accounts, transactions

finance_router = APIRouter(prefix="/finance", tags=["finance"])

finance_router.include_router(accounts.router)
finance_router.include_router(transactions.router)
