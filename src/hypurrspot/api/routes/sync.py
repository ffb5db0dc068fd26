"""Manual token sync trigger."""

import structlog
from fastapi import APIRouter, HTTPException, status

from hypurrspot.api.dependencies import SyncServiceDep
from hypurrspot.api.security import SyncTriggerDep
from hypurrspot.core.exceptions import HypurrSpotError
from hypurrspot.data.models.sync import SyncPassResult, SyncStatus

log = structlog.get_logger(__name__)

router = APIRouter(tags=["sync"])


@router.post("/update", response_model=SyncPassResult)
async def trigger_sync(caller: SyncTriggerDep, service: SyncServiceDep) -> SyncPassResult:
    """
    Run one token sync pass now.

    Returns 200 with the pass summary once it completes; per-token failures
    are listed in the summary but do not fail the request. Returns 409 if a
    pass is already running and 500 if the fetch stage failed.
    """
    log.info("manual_sync_triggered", caller=caller)

    try:
        result = await service.run_sync_pass()
    except (HypurrSpotError, TimeoutError) as e:
        log.error("manual_sync_failed", caller=caller, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Update failed"
        ) from e

    if result.status == SyncStatus.SKIPPED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Sync pass already in progress",
        )
    return result
