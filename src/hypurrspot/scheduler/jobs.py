"""Scheduled jobs for HypurrSpot.

This module defines the jobs that run on a schedule:
- Token sync: Runs one TokenSyncService pass (listing, details, merge, upsert)

Usage:
    from hypurrspot.scheduler.jobs import schedule_token_sync_job

    # Every minute, first run immediately
    schedule_token_sync_job(interval_seconds=60, run_immediately=True)
"""

from datetime import UTC, datetime

import structlog
from apscheduler.triggers.interval import IntervalTrigger

from hypurrspot.scheduler.scheduler import get_scheduler

log = structlog.get_logger(__name__)

# Job ID constants
JOB_ID_TOKEN_SYNC = "token_sync"

MIN_INTERVAL_SECONDS = 5


async def sync_tokens_job() -> None:
    """Scheduled job running one token sync pass.

    Note:
        Handles all errors internally so a failed pass never stops the
        schedule. Logs success/failure for monitoring.
    """
    log.info("token_sync_job_started")

    try:
        from hypurrspot.core.sync.token_sync import (  # noqa: PLC0415
            get_token_sync_service,
        )

        service = await get_token_sync_service()
        result = await service.run_sync_pass()

        log.info(
            "token_sync_job_completed",
            status=result.status.value,
            tokens_listed=result.tokens_listed,
            inserted=result.inserted,
            updated=result.updated,
            failed=result.failed,
        )

    except Exception as e:
        log.error("token_sync_job_failed", error=str(e), error_type=type(e).__name__)


def schedule_token_sync_job(interval_seconds: int = 60, run_immediately: bool = False) -> None:
    """Schedule or reschedule the token sync job.

    Args:
        interval_seconds: Seconds between runs.
        run_immediately: Fire the first run now instead of after one interval.

    Raises:
        ValueError: If interval_seconds is below the minimum.

    Note:
        If the job already exists, it will be removed first and then
        re-added. ``max_instances=1`` keeps runs from overlapping and
        ``coalesce`` folds missed runs into one.
    """
    if interval_seconds < MIN_INTERVAL_SECONDS:
        raise ValueError(
            f"Invalid interval: {interval_seconds}. Must be at least {MIN_INTERVAL_SECONDS}s"
        )

    scheduler = get_scheduler()

    # Remove existing job if present
    if scheduler.get_job(JOB_ID_TOKEN_SYNC):
        scheduler.remove_job(JOB_ID_TOKEN_SYNC)
        log.info("token_sync_job_removed", job_id=JOB_ID_TOKEN_SYNC)

    job_options = {}
    if run_immediately:
        job_options["next_run_time"] = datetime.now(UTC)

    scheduler.add_job(
        sync_tokens_job,
        trigger=IntervalTrigger(seconds=interval_seconds),
        id=JOB_ID_TOKEN_SYNC,
        name="Token Sync",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        **job_options,
    )

    log.info(
        "token_sync_job_scheduled",
        job_id=JOB_ID_TOKEN_SYNC,
        interval_seconds=interval_seconds,
        run_immediately=run_immediately,
    )


def unschedule_token_sync_job() -> None:
    """Remove the token sync job from scheduler.

    Safe to call when job is not scheduled.
    """
    scheduler = get_scheduler()
    if scheduler.get_job(JOB_ID_TOKEN_SYNC):
        scheduler.remove_job(JOB_ID_TOKEN_SYNC)
        log.info("token_sync_job_unscheduled", job_id=JOB_ID_TOKEN_SYNC)


def get_next_run_time() -> str | None:
    """Get the next scheduled run time for the token sync job.

    Returns:
        ISO format datetime string or None if not scheduled.
    """
    scheduler = get_scheduler()
    job = scheduler.get_job(JOB_ID_TOKEN_SYNC)

    if job and job.next_run_time:
        return job.next_run_time.isoformat()
    return None
