"""
Admin module: sweeps and dashboard.
"""
from fastapi import APIRouter

from clubdesk.api.v1.admin import sweeps, dashboard

admin_router = APIRouter(prefix="/admin", tags=["admin"])

admin_router.include_router(sweeps.router)
admin_router.include_router(dashboard.router)
