"""Pydantic models for data validation and serialization."""

from hypurrspot.data.models.sync import SyncPassResult, SyncStatus, TokenSyncFailure
from hypurrspot.data.models.token import (
    CURATED_DEFAULTS,
    SYNC_FIELDS,
    SpotToken,
    TokenDetails,
    TokenRecord,
    TokenUpdate,
)
from hypurrspot.data.models.user import AdminUser

__all__ = [
    "CURATED_DEFAULTS",
    "SYNC_FIELDS",
    "AdminUser",
    "SpotToken",
    "SyncPassResult",
    "SyncStatus",
    "TokenDetails",
    "TokenRecord",
    "TokenSyncFailure",
    "TokenUpdate",
]
