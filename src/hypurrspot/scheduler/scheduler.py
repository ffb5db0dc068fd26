"""APScheduler singleton for HypurrSpot.

The AsyncIOScheduler runs the token sync job on the application's event
loop, so sync passes share the loop with the API and with the RateBudget
reset tick.

Usage:
    from hypurrspot.scheduler.scheduler import start_scheduler, shutdown_scheduler

    # In app lifespan startup
    await start_scheduler()

    # In app lifespan shutdown
    await shutdown_scheduler()
"""

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

log = structlog.get_logger(__name__)

# Never run two instances of a job at once; fold missed runs into one
JOB_DEFAULTS = {
    "max_instances": 1,
    "coalesce": True,
    "misfire_grace_time": 30,
}

_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the scheduler singleton (not started)."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(job_defaults=JOB_DEFAULTS, timezone="UTC")
        log.debug("scheduler_created")
    return _scheduler


def is_scheduler_running() -> bool:
    """True if the singleton exists and has been started."""
    return _scheduler is not None and _scheduler.running


async def start_scheduler() -> None:
    """Start the scheduler.

    Safe to call multiple times - will only start if not running.
    """
    scheduler = get_scheduler()
    if not scheduler.running:
        scheduler.start()
        log.info("scheduler_started")


async def shutdown_scheduler() -> None:
    """Shutdown the scheduler and clear the singleton.

    Does not wait for a running sync pass; the pass is cancelled with the loop.
    """
    global _scheduler
    if _scheduler is not None:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
            log.info("scheduler_shutdown")
        _scheduler = None
