"""
ClubDesk FastAPI Application - Main entry point.

ClubDesk runs a weekly in-person English-speaking club:

- Membership: Members, locations, room assignments, presenters, topics, suggestions
- Finance: Deposit accounts and the fee/penalty ledger
- Attendance: Weekly votes, leader attendance sheets, warnings
- Admin: Scheduled sweeps and dashboard

All endpoints live under /api/v1/{module}/.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from clubdesk.core.config import settings
from clubdesk.core.exceptions import ClubError
from clubdesk.core.logging_config import configure_logging
from clubdesk.db.base import init_db
from clubdesk.schemas.common import HealthResponse

from clubdesk.api.v1 import auth
from clubdesk.api.v1.membership import membership_router
from clubdesk.api.v1.finance import finance_router
from clubdesk.api.v1.attendance import attendance_router
from clubdesk.api.v1.admin import admin_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, then run the sweep scheduler for the life of the process."""
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.APP_ENV)
    await init_db()

    app.state.scheduler = None
    if settings.SCHEDULER_ENABLED:
        from clubdesk.scheduler import ClubScheduler

        scheduler = ClubScheduler()
        scheduler.start()
        app.state.scheduler = scheduler

    yield

    if app.state.scheduler is not None:
        app.state.scheduler.stop()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="""
ClubDesk - club membership, attendance and deposit ledger.

## Modules

- **Membership**: Members, locations, rooms, presenters, topics, suggestions
- **Finance**: Deposit accounts, transactions, annual fee
- **Attendance**: Votes, leader sheets and approval, warnings
- **Admin**: Sweeps and dashboard
    """,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="ClubDesk is up.")


# ============================================================================
# V1 API ENDPOINTS
# ============================================================================

# Auth - /api/v1/auth/*
app.include_router(auth.router, prefix=settings.API_V1_PREFIX)

# Membership module - /api/v1/membership/*
app.include_router(membership_router, prefix=settings.API_V1_PREFIX)

# Finance module - /api/v1/finance/*
app.include_router(finance_router, prefix=settings.API_V1_PREFIX)

# Attendance module - /api/v1/attendance/*
# Includes: votes, pending sheets, records, warnings
app.include_router(attendance_router, prefix=settings.API_V1_PREFIX)

# Admin module - /api/v1/admin/*
app.include_router(admin_router, prefix=settings.API_V1_PREFIX)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(ClubError)
async def club_error_handler(request: Request, exc: ClubError):
    """Render rule-engine errors with their own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything unexpected becomes a 500; details only in DEBUG."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)}
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clubdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
