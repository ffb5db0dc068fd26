"""Token synchronization: merge engine and sync pass orchestration."""

from hypurrspot.core.sync.merge import merge_token_record
from hypurrspot.core.sync.token_sync import (
    SyncState,
    TokenSyncService,
    close_token_sync_service,
    get_token_sync_service,
)

__all__ = [
    "SyncState",
    "TokenSyncService",
    "close_token_sync_service",
    "get_token_sync_service",
    "merge_token_record",
]
