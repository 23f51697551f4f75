"""APScheduler job definitions and scheduler management.

Initializes a BackgroundScheduler running the orphan CV sweep on an
IntervalTrigger, with start/shutdown/status helpers for the FastAPI
lifespan.  ``CV_SWEEP_INTERVAL_MINUTES = 0`` leaves the scheduler stopped.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import Settings, settings
from app.db.records import RecordStore
from app.services.cv_sweep import sweep_orphan_cvs
from app.storage.cv_store import CvStore

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "orphan_cv_sweep"

# Module-level scheduler instance (singleton)
scheduler = BackgroundScheduler()


def start_scheduler(
    records: RecordStore,
    cvs: CvStore,
    config: Settings = settings,
) -> bool:
    """Register the sweep job and start the scheduler.

    Returns False without starting anything when the sweep is disabled.
    """
    interval = config.CV_SWEEP_INTERVAL_MINUTES
    if interval <= 0:
        logger.info("scheduler_disabled")
        return False

    scheduler.add_job(
        sweep_orphan_cvs,
        IntervalTrigger(minutes=interval),
        kwargs={
            "records": records,
            "cvs": cvs,
            "min_age_seconds": config.CV_SWEEP_MIN_AGE_MINUTES * 60,
        },
        id=SWEEP_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("scheduler_started", extra={"interval_minutes": interval})
    return True


def shutdown_scheduler() -> None:
    """Shutdown the scheduler if it is running."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")


def is_scheduler_running() -> bool:
    """Check if the scheduler is currently running."""
    return scheduler.running
