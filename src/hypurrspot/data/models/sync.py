"""Models describing the outcome of a token sync pass."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field


class SyncStatus(str, Enum):
    """Outcome of a sync pass request."""

    COMPLETE = "complete"
    SKIPPED = "skipped"  # Another pass was already in flight


class TokenSyncFailure(BaseModel):
    """A token that could not be synced during a pass."""

    token_index: int
    name: str
    error: str


class SyncPassResult(BaseModel):
    """Summary of one sync pass.

    Only fetch-stage failures fail a pass (they raise); per-token failures
    are collected here.

    Attributes:
        status: complete or skipped.
        tokens_listed: Entries returned by the spot listing.
        deploys_seen: Entries returned by the deploy listing.
        inserted: Tokens inserted for the first time.
        updated: Existing tokens updated in place.
        failures: Tokens skipped because of per-token errors.
    """

    status: SyncStatus = SyncStatus.COMPLETE
    tokens_listed: int = 0
    deploys_seen: int = 0
    inserted: int = 0
    updated: int = 0
    failures: list[TokenSyncFailure] = Field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed(self) -> int:
        """Number of tokens that failed."""
        return len(self.failures)
