"""
Background scheduler service for periodic jobs.

Runs the call ring-timeout sweep. Uses APScheduler for in-process scheduling
without external dependencies.
"""

from __future__ import annotations

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from chatcore.core.config import get_settings
from chatcore.core.logger import logger
from chatcore.services.call_service import CallService


class BackgroundScheduler:
    """
    Background scheduler for periodic jobs.

    Features:
    - Ends calls that keep ringing past CALL_RING_TIMEOUT_SECONDS
    """

    def __init__(self, call_service: CallService):
        self._call_service = call_service
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    async def start(self):
        """Start the scheduler."""
        settings = get_settings()

        # Only run scheduler in non-test environments
        if settings.ENVIRONMENT == "test":
            logger.info("Background scheduler disabled in test environment")
            return
        if settings.CALL_RING_TIMEOUT_SECONDS <= 0:
            logger.info("Call ring timeout disabled; background scheduler not started")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._run_call_expiry,
            IntervalTrigger(seconds=settings.CALL_SWEEP_INTERVAL_SECONDS),
            id="call_ring_timeout",
            name="Call Ring Timeout Sweep",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(
            "Background scheduler started:\n"
            f"  - Call ring timeout sweep: every {settings.CALL_SWEEP_INTERVAL_SECONDS}s "
            f"(timeout {settings.CALL_RING_TIMEOUT_SECONDS}s)"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Background scheduler stopped")

    async def _run_call_expiry(self):
        try:
            await self._call_service.expire_unanswered()
        except Exception as e:
            logger.error(f"Call ring timeout sweep failed: {e}")


# Global scheduler instance
_scheduler: Optional[BackgroundScheduler] = None


async def get_background_scheduler() -> BackgroundScheduler:
    """Get the global background scheduler instance."""
    global _scheduler
    if _scheduler is None:
        from chatcore.api.deps import get_call_service

        _scheduler = BackgroundScheduler(call_service=get_call_service())
    return _scheduler


async def start_background_scheduler():
    """Start the global background scheduler."""
    scheduler = await get_background_scheduler()
    await scheduler.start()


async def stop_background_scheduler():
    """Stop the global background scheduler."""
    global _scheduler
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
