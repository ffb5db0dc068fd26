"""Token sync service orchestrating one synchronization pass.

A pass moves through ``IDLE -> FETCHING -> PROCESSING -> DONE``:

1. FETCHING - load stored tokens and reference prices, then fetch the spot
   listing and the deploy listing concurrently. Any failure here fails the
   whole pass.
2. PROCESSING - for every listing entry: fetch detail, merge with the stored
   record, insert or update by token index. Failures are isolated per token.
3. DONE - return a SyncPassResult.

Architecture:
    Scheduler / POST /api/update
        │
        ▼
    TokenSyncService (this module)
        │
        ├──► HyperliquidClient, HypurrscanClient (services/)
        │        └── shared RateBudget + ConcurrencyLimiter
        ├──► merge_token_record (core/sync/merge.py)
        └──► TokenRepository, ReferencePriceRepository (data/supabase/)
"""

import asyncio
from datetime import UTC, datetime
from enum import Enum

import structlog

from hypurrspot.config.settings import Settings, get_settings
from hypurrspot.core.exceptions import HypurrSpotError
from hypurrspot.core.sync.merge import merge_token_record
from hypurrspot.data.models.sync import SyncPassResult, SyncStatus, TokenSyncFailure
from hypurrspot.data.models.token import SpotToken, TokenRecord
from hypurrspot.data.supabase.client import SupabaseClient, get_supabase_client
from hypurrspot.data.supabase.repositories.reference_price_repo import (
    ReferencePriceRepository,
)
from hypurrspot.data.supabase.repositories.token_repo import TokenRepository
from hypurrspot.services.concurrency import ConcurrencyLimiter
from hypurrspot.services.hyperliquid.client import HyperliquidClient
from hypurrspot.services.hypurrscan.client import HypurrscanClient
from hypurrspot.services.rate_budget import RateBudget

log = structlog.get_logger(__name__)


class SyncState(Enum):
    """Sync pass states."""

    IDLE = "idle"
    FETCHING = "fetching"
    PROCESSING = "processing"
    DONE = "done"


class TokenSyncService:
    """Runs token sync passes, at most one at a time.

    A pass requested while another is in flight is dropped and reported
    with status ``skipped``.

    Example:
        service = TokenSyncService(token_repo, reference_repo, hyperliquid, hypurrscan)
        result = await service.run_sync_pass()
        print(f"{result.inserted} new, {result.updated} updated, {result.failed} failed")
    """

    def __init__(
        self,
        token_repo: TokenRepository,
        reference_repo: ReferencePriceRepository,
        hyperliquid: HyperliquidClient,
        hypurrscan: HypurrscanClient,
        pass_timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            token_repo: Tokens collection.
            reference_repo: Launch reference prices.
            hyperliquid: Listing and detail client.
            hypurrscan: Deploy listing client.
            pass_timeout_seconds: Deadline for a whole pass, None for no deadline.
        """
        self._token_repo = token_repo
        self._reference_repo = reference_repo
        self._hyperliquid = hyperliquid
        self._hypurrscan = hypurrscan
        self._pass_timeout_seconds = pass_timeout_seconds
        self._lock = asyncio.Lock()
        self._state = SyncState.IDLE
        self._last_result: SyncPassResult | None = None

    @property
    def state(self) -> SyncState:
        """State of the current (or last) pass."""
        return self._state

    @property
    def busy(self) -> bool:
        """True while a pass is in flight."""
        return self._lock.locked()

    @property
    def last_result(self) -> SyncPassResult | None:
        """Result of the last completed pass."""
        return self._last_result

    async def run_sync_pass(self) -> SyncPassResult:
        """Run one sync pass.

        Returns:
            SyncPassResult; status ``skipped`` if a pass was already running.

        Raises:
            HypurrSpotError: If the fetch stage fails (store load, listing or
                deploy fetch).
            TimeoutError: If the pass exceeds its deadline.
        """
        if self._lock.locked():
            log.warning("sync_pass_skipped_busy", state=self._state.value)
            return SyncPassResult(status=SyncStatus.SKIPPED)

        async with self._lock:
            try:
                async with asyncio.timeout(self._pass_timeout_seconds):
                    result = await self._run()
            except TimeoutError:
                log.error(
                    "sync_pass_timed_out",
                    timeout_seconds=self._pass_timeout_seconds,
                    state=self._state.value,
                )
                raise
            finally:
                self._state = SyncState.IDLE

            self._last_result = result
            return result

    async def _run(self) -> SyncPassResult:
        started_at = datetime.now(UTC)
        log.info("sync_pass_started")

        self._state = SyncState.FETCHING
        try:
            existing_records = await self._token_repo.get_all()
            reference_prices = await self._reference_repo.get_all()
            listing, deploys = await asyncio.gather(
                self._hyperliquid.fetch_spot_listing(),
                self._hypurrscan.fetch_deploy_listing(),
            )
        except HypurrSpotError as e:
            log.error("sync_pass_fetch_failed", error=str(e), error_type=type(e).__name__)
            raise

        existing_by_index = {record.token_index: record for record in existing_records}
        result = SyncPassResult(
            tokens_listed=len(listing),
            deploys_seen=len(deploys),
            started_at=started_at,
        )

        self._state = SyncState.PROCESSING
        outcomes = await asyncio.gather(
            *(
                self._sync_token(
                    entry,
                    existing_by_index.get(entry.index),
                    reference_prices.get(entry.index),
                    result,
                )
                for entry in listing
            )
        )

        result.inserted = sum(1 for outcome in outcomes if outcome == "inserted")
        result.updated = sum(1 for outcome in outcomes if outcome == "updated")
        result.finished_at = datetime.now(UTC)
        self._state = SyncState.DONE

        log.info(
            "sync_pass_completed",
            tokens_listed=result.tokens_listed,
            deploys_seen=result.deploys_seen,
            inserted=result.inserted,
            updated=result.updated,
            failed=result.failed,
            elapsed_seconds=(result.finished_at - started_at).total_seconds(),
        )
        return result

    async def _sync_token(
        self,
        entry: SpotToken,
        existing: TokenRecord | None,
        reference_price: str | None,
        result: SyncPassResult,
    ) -> str | None:
        """Fetch, merge and upsert one token.

        Returns:
            "inserted", "updated", or None if the token failed.
        """
        try:
            detail = await self._hyperliquid.fetch_token_detail(entry.token_id)
            record = merge_token_record(entry, detail, existing, reference_price)

            if existing is None:
                await self._token_repo.insert(record)
                log.info("new_token_found", token_index=entry.index, name=entry.name)
                return "inserted"

            await self._token_repo.update_sync_fields(record)
            return "updated"

        except HypurrSpotError as e:
            log.error(
                "token_sync_failed",
                token_index=entry.index,
                name=entry.name,
                token_id=entry.token_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            result.failures.append(
                TokenSyncFailure(token_index=entry.index, name=entry.name, error=str(e))
            )
            return None

    async def close(self) -> None:
        """Close the upstream clients."""
        await self._hyperliquid.close()
        await self._hypurrscan.close()


# Process-wide instances, built once at startup
_token_sync_service: TokenSyncService | None = None
_rate_budget: RateBudget | None = None


def build_token_sync_service(
    supabase: SupabaseClient,
    settings: Settings,
    budget: RateBudget,
    limiter: ConcurrencyLimiter,
) -> TokenSyncService:
    """Wire a TokenSyncService from settings and shared throttles."""
    client_options = {
        "budget": budget,
        "limiter": limiter,
        "request_weight": settings.upstream_request_weight,
        "timeout": settings.upstream_timeout_seconds,
        "max_retries": settings.upstream_max_retries,
        "backoff_base_seconds": settings.upstream_backoff_base_seconds,
    }
    return TokenSyncService(
        token_repo=TokenRepository(supabase),
        reference_repo=ReferencePriceRepository(supabase),
        hyperliquid=HyperliquidClient(settings.hyperliquid_api_url, **client_options),
        hypurrscan=HypurrscanClient(settings.hypurrscan_api_url, **client_options),
        pass_timeout_seconds=settings.sync_pass_timeout_seconds,
    )


async def get_token_sync_service() -> TokenSyncService:
    """Get or create the TokenSyncService singleton.

    The first call builds the shared RateBudget (and starts its reset tick)
    and ConcurrencyLimiter; every later call reuses them.
    """
    global _token_sync_service, _rate_budget
    if _token_sync_service is None:
        settings = get_settings()
        supabase = await get_supabase_client()

        budget = RateBudget(
            limit=settings.rate_limit_weight_per_interval,
            interval_seconds=settings.rate_limit_interval_seconds,
        )
        await budget.start()
        limiter = ConcurrencyLimiter(max_concurrency=settings.upstream_max_concurrency)

        _rate_budget = budget
        _token_sync_service = build_token_sync_service(supabase, settings, budget, limiter)
        log.info("token_sync_service_created")
    return _token_sync_service


async def close_token_sync_service() -> None:
    """Close the TokenSyncService singleton and stop the budget tick."""
    global _token_sync_service, _rate_budget
    if _token_sync_service is not None:
        await _token_sync_service.close()
        _token_sync_service = None
    if _rate_budget is not None:
        await _rate_budget.stop()
        _rate_budget = None
