"""Background scheduler for the missed-step expiry sweep."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from apscheduler.schedulers.background import BackgroundScheduler as APScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .services.completions import mark_overdue_as_missed

if TYPE_CHECKING:
    from .context import AppContext

logger = logging.getLogger("glowtrack.scheduler")

SWEEP_JOB_ID = "missed_step_sweep"


class BackgroundScheduler:
    """Runs the periodic sweep that marks expired pending steps as missed."""

    def __init__(self, ctx: AppContext):
        """Initialize the scheduler with app context.

        Args:
            ctx: Application context with repositories, config and clock
        """
        self.ctx = ctx
        self.scheduler: Optional[APScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = APScheduler(timezone="UTC")
        minutes = self.ctx.config.MISSED_SWEEP_MINUTES
        self.scheduler.add_job(
            func=self.run_sweep,
            trigger=IntervalTrigger(minutes=minutes),
            id=SWEEP_JOB_ID,
            name="Missed Step Sweep",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.start()
        logger.info("Background scheduler started", extra={"sweep_minutes": minutes})

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    def run_sweep(self) -> int:
        """Mark every subscriber's expired pending steps as missed.

        Failures are logged and reported as zero so the job keeps its schedule.
        """
        try:
            return mark_overdue_as_missed(self.ctx.completion_repo, self.ctx.now())
        except Exception as exc:
            logger.error(f"Missed-step sweep failed: {exc}", exc_info=True)
            return 0


def create_scheduler(ctx: AppContext, *, auto_start: bool = False) -> BackgroundScheduler:
    """Create and optionally start a background scheduler."""
    scheduler = BackgroundScheduler(ctx)
    if auto_start:
        scheduler.start()
    return scheduler
