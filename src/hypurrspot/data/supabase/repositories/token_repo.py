"""Token repository for Supabase.

This module provides a repository pattern for accessing the tokens table,
the document collection the sync pass and the admin edit endpoint share.

Table schema expected:
    tokens (
        token_index INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        token_id TEXT NOT NULL,
        start_px TEXT,
        mark_px TEXT,
        launch_date TEXT,
        auction_price TEXT,
        launch_circ_supply TEXT,
        launch_market_cap TEXT,
        team_allocation TEXT,
        airdrop1 TEXT,
        airdrop2 TEXT,
        dev_reputation BOOLEAN NOT NULL DEFAULT false,
        spread_less_than_three BOOLEAN NOT NULL DEFAULT false,
        thick_ob_liquidity BOOLEAN NOT NULL DEFAULT false,
        no_sell_pressure BOOLEAN NOT NULL DEFAULT false,
        twitter TEXT NOT NULL DEFAULT '',
        telegram TEXT NOT NULL DEFAULT '',
        discord TEXT NOT NULL DEFAULT '',
        website TEXT NOT NULL DEFAULT '',
        comment TEXT NOT NULL DEFAULT '',
        last_updated TIMESTAMPTZ
    )
"""

from datetime import datetime
from typing import Any

import structlog

from hypurrspot.core.exceptions import StoreError
from hypurrspot.data.models.token import TokenRecord
from hypurrspot.data.supabase.client import SupabaseClient

log = structlog.get_logger(__name__)


class TokenRepository:
    """Repository for accessing the tokens table in Supabase.

    Every method raises StoreError on database failure; callers decide
    whether that is fatal (bulk load) or recoverable (single upsert).

    Example:
        client = await get_supabase_client()
        repo = TokenRepository(client)
        tokens = await repo.get_all()
    """

    TABLE_NAME = "tokens"
    PAGE_SIZE = 1000

    def __init__(self, client: SupabaseClient) -> None:
        """Initialize repository with Supabase client.

        Args:
            client: Connected SupabaseClient instance.
        """
        self._client = client

    async def get_all(self) -> list[TokenRecord]:
        """Get every token, ordered by token index.

        Reads in pages so the PostgREST row cap never truncates the result.
        """
        rows: list[dict[str, Any]] = []
        start = 0

        try:
            while True:
                result = await (
                    self._client.client.table(self.TABLE_NAME)
                    .select("*")
                    .order("token_index")
                    .range(start, start + self.PAGE_SIZE - 1)
                    .execute()
                )
                page = result.data or []
                rows.extend(page)
                if len(page) < self.PAGE_SIZE:
                    break
                start += self.PAGE_SIZE
        except Exception as e:
            log.error("tokens_get_all_failed", error=str(e))
            raise StoreError(operation="tokens.get_all", message=str(e)) from e

        return [TokenRecord.model_validate(row) for row in rows]

    async def insert(self, record: TokenRecord) -> None:
        """Insert a token seen for the first time.

        The unique constraint on token_index rejects duplicates.
        """
        try:
            await (
                self._client.client.table(self.TABLE_NAME)
                .insert(record.insert_columns())
                .execute()
            )
        except Exception as e:
            log.error("token_insert_failed", token_index=record.token_index, error=str(e))
            raise StoreError(operation="tokens.insert", message=str(e)) from e

        log.info("token_inserted", token_index=record.token_index, name=record.name)

    async def update_sync_fields(self, record: TokenRecord) -> None:
        """Update the sync-owned columns of an existing token in place.

        Curated columns are not written.
        """
        try:
            await (
                self._client.client.table(self.TABLE_NAME)
                .update(record.sync_columns())
                .eq("token_index", record.token_index)
                .execute()
            )
        except Exception as e:
            log.error("token_update_failed", token_index=record.token_index, error=str(e))
            raise StoreError(operation="tokens.update", message=str(e)) from e

        log.debug("token_updated", token_index=record.token_index, name=record.name)

    async def update_curated(
        self,
        token_index: int,
        changes: dict[str, Any],
        last_updated: datetime,
    ) -> TokenRecord | None:
        """Apply an admin edit and stamp last_updated.

        Args:
            token_index: Index of the token to edit.
            changes: Curated columns to set.
            last_updated: Edit timestamp.

        Returns:
            The updated TokenRecord, or None if no token has that index.
        """
        payload = {**changes, "last_updated": last_updated.isoformat()}

        try:
            result = await (
                self._client.client.table(self.TABLE_NAME)
                .update(payload)
                .eq("token_index", token_index)
                .execute()
            )
        except Exception as e:
            log.error("token_curated_update_failed", token_index=token_index, error=str(e))
            raise StoreError(operation="tokens.update_curated", message=str(e)) from e

        if not result.data:
            return None

        log.info("token_curated_updated", token_index=token_index, fields=sorted(changes))
        return TokenRecord.model_validate(result.data[0])

    async def get_count(self) -> int:
        """Get total count of tokens in database."""
        try:
            result = await (
                self._client.client.table(self.TABLE_NAME)
                .select("token_index", count="exact")
                .execute()
            )
        except Exception as e:
            log.error("tokens_count_failed", error=str(e))
            raise StoreError(operation="tokens.count", message=str(e)) from e

        return result.count or 0
