"""
GitHub Resync Scheduler
=======================

APScheduler wrapper that periodically re-polls the linked repository and
keeps a record of the most recent run.

Disabled when ``GITHUB_RESYNC_INTERVAL`` is 0 (serverless deployments).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ticketbuddy.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Returns the mirrored counts, or None when no repository is linked.
ResyncJob = Callable[[], Awaitable[Optional[Dict[str, int]]]]


@dataclass
class ResyncRun:
    """Outcome of one resync pass."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    counts: Optional[Dict[str, int]] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.finished_at is not None and self.error is None

    @property
    def skipped(self) -> bool:
        return self.succeeded and self.counts is None


class ResyncScheduler:
    """
    Runs the mirror resync on a fixed interval.

    Each pass goes through :meth:`run_once`, which never raises; failures are
    logged and kept on :attr:`last_run` until the next pass.
    """

    JOB_ID = "github_resync"

    def __init__(self, interval_seconds: int):
        self.interval_seconds = interval_seconds
        self.last_run: Optional[ResyncRun] = None
        self.run_count = 0
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._job: Optional[ResyncJob] = None

    async def start(self, job: ResyncJob) -> None:
        if self.is_running:
            logger.warning("Resync scheduler already running")
            return

        self._job = job
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_once,
            "interval",
            seconds=self.interval_seconds,
            id=self.JOB_ID,
            name="GitHub Mirror Resync",
            misfire_grace_time=self.interval_seconds,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        self._scheduler.start()

        logger.info("Resync scheduler started", extra={"interval_seconds": self.interval_seconds})

    async def run_once(self) -> ResyncRun:
        """Run one resync pass now and record its outcome."""
        if self._job is None:
            raise RuntimeError("resync scheduler has no job; call start() first")

        run = ResyncRun(started_at=datetime.now(timezone.utc))
        try:
            run.counts = await self._job()
        except Exception as e:
            run.error = str(e) or type(e).__name__
            logger.error("GitHub resync failed", exc_info=True)
        run.finished_at = datetime.now(timezone.utc)

        self.last_run = run
        self.run_count += 1

        if run.skipped:
            logger.debug("Resync skipped, no repository linked")
        return run

    async def stop(self) -> None:
        if self._scheduler is None:
            return

        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Resync scheduler stopped", extra={"runs": self.run_count})

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None
