"""
Background scheduler for the club sweeps.
"""
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clubdesk.core.clock import Clock, club_timezone, system_clock
from clubdesk.core.config import settings
from clubdesk.db.base import async_session_maker
from clubdesk.services import sweeps

logger = logging.getLogger(__name__)


class ClubScheduler:
    """Runs the vote deadline, presenter deadline and warning reset sweeps."""

    def __init__(
        self,
        session_factory: async_sessionmaker = async_session_maker,
        clock: Clock = system_clock,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.scheduler = AsyncIOScheduler(timezone=club_timezone())
        self._running: set[str] = set()
        self.last_runs: dict[str, datetime] = {}

    def setup(self) -> None:
        tz = club_timezone()

        self.scheduler.add_job(
            self.run_vote_deadlines,
            CronTrigger.from_crontab(settings.VOTE_DEADLINE_CRON, timezone=tz),
            id="vote_deadline_sweep",
            name="Vote Deadline Sweep",
            replace_existing=True
        )
        logger.info("Vote deadline sweep scheduled (%s)", settings.VOTE_DEADLINE_CRON)

        self.scheduler.add_job(
            self.run_warning_reset,
            CronTrigger.from_crontab(settings.WARNING_RESET_CRON, timezone=tz),
            id="warning_reset",
            name="Semi-annual Warning Reset",
            replace_existing=True
        )
        logger.info("Warning reset scheduled (%s)", settings.WARNING_RESET_CRON)

        self.scheduler.add_job(
            self.run_presenter_deadlines,
            IntervalTrigger(minutes=settings.PRESENTER_DEADLINE_INTERVAL_MINUTES),
            id="presenter_deadline_sweep",
            name="Presenter Deadline Sweep",
            replace_existing=True
        )
        logger.info(
            "Presenter deadline sweep scheduled every %d minutes",
            settings.PRESENTER_DEADLINE_INTERVAL_MINUTES
        )

    async def _run(self, name: str, sweep: Callable[[AsyncSession, datetime], Awaitable]) -> Optional[object]:
        if name in self._running:
            logger.warning("%s is already running, skipping", name)
            return None

        self._running.add(name)
        logger.info("=== %s started ===", name)
        try:
            async with self.session_factory() as session:
                try:
                    result = await sweep(session, self.clock.now())
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
            self.last_runs[name] = self.clock.now()
            logger.info("%s finished: %s", name, result)
            return result
        except Exception:
            logger.exception("%s failed", name)
            return None
        finally:
            self._running.discard(name)

    async def run_vote_deadlines(self):
        return await self._run("vote_deadline_sweep", sweeps.run_vote_deadline_sweep)

    async def run_warning_reset(self):
        return await self._run("warning_reset", sweeps.run_warning_reset)

    async def run_presenter_deadlines(self):
        return await self._run("presenter_deadline_sweep", sweeps.run_presenter_deadline_sweep)

    def start(self) -> None:
        self.setup()
        self.scheduler.start()
        logger.info("Scheduler started")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    def get_status(self) -> dict:
        jobs = []
        for job in self.scheduler.get_jobs():
            # jobs added before start() have no next_run_time yet
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
            })
        return {
            "running": self.scheduler.running,
            "jobs": jobs,
            "last_runs": {k: v.isoformat() for k, v in self.last_runs.items()},
        }
