"""Health check endpoint with database, scheduler and sync status."""

from typing import Any

import structlog
from fastapi import APIRouter

from hypurrspot.config import get_settings
from hypurrspot.core.exceptions import StoreError

log = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint with database, scheduler and sync status.

    Returns:
        dict with overall status, version, database health, scheduler info
        and the outcome of the last sync pass.
    """
    settings = get_settings()

    supabase_health = await _get_supabase_health()
    scheduler_info = _get_scheduler_status()
    sync_info = _get_sync_status()

    overall_status = "ok" if supabase_health["healthy"] else "degraded"

    return {
        "status": overall_status,
        "version": settings.app_version,
        "databases": {"supabase": supabase_health},
        "scheduler": scheduler_info,
        "sync": sync_info,
    }


async def _get_supabase_health() -> dict[str, Any]:
    """Get Supabase health status and the stored token count."""
    from hypurrspot.data.supabase.client import get_current_supabase_client  # noqa: PLC0415

    client = get_current_supabase_client()
    if client is None:
        return {"status": "disconnected", "healthy": False}
    health = await client.health_check()
    if not health.get("healthy"):
        return health

    from hypurrspot.data.supabase.repositories.token_repo import TokenRepository  # noqa: PLC0415

    try:
        health["token_count"] = await TokenRepository(client).get_count()
    except StoreError as e:
        log.warning("health_token_count_failed", error=str(e))
        health["token_count"] = None
    return health


def _get_scheduler_status() -> dict[str, Any]:
    """Get scheduler enabled/running/next_run info."""
    from hypurrspot.scheduler.jobs import get_next_run_time  # noqa: PLC0415
    from hypurrspot.scheduler.scheduler import is_scheduler_running  # noqa: PLC0415

    settings = get_settings()
    running = is_scheduler_running()

    return {
        "enabled": settings.sync_enabled,
        "running": running,
        "next_run": get_next_run_time() if running else None,
    }


def _get_sync_status() -> dict[str, Any]:
    """Get state of the token sync service, if it has been created."""
    import hypurrspot.core.sync.token_sync as token_sync_module  # noqa: PLC0415

    service = token_sync_module._token_sync_service
    if service is None:
        return {"state": None, "busy": False, "last_result": None}

    last = service.last_result
    return {
        "state": service.state.value,
        "busy": service.busy,
        "last_result": last.model_dump(mode="json") if last else None,
    }
