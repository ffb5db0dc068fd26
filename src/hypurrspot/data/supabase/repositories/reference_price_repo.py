"""Reference launch price repository for Supabase.

The start_px table is maintained outside the service; the sync pass only
reads it to seed TokenRecord.start_px.

Table schema expected:
    start_px (
        token_index INTEGER UNIQUE NOT NULL,
        start_px TEXT NOT NULL
    )
"""

from typing import Any

import structlog

from hypurrspot.core.exceptions import StoreError
from hypurrspot.data.supabase.client import SupabaseClient

log = structlog.get_logger(__name__)


class ReferencePriceRepository:
    """Read-only access to launch reference prices."""

    TABLE_NAME = "start_px"
    PAGE_SIZE = 1000

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get_all(self) -> dict[int, str]:
        """Get every reference price keyed by token index.

        Reads in pages so the PostgREST row cap never truncates the result.
        Rows with an empty price are skipped.

        Raises:
            StoreError: If the table cannot be read.
        """
        rows: list[dict[str, Any]] = []
        start = 0

        try:
            while True:
                result = await (
                    self._client.client.table(self.TABLE_NAME)
                    .select("token_index, start_px")
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
            log.error("reference_prices_get_all_failed", error=str(e))
            raise StoreError(operation="start_px.get_all", message=str(e)) from e

        prices: dict[int, str] = {}
        for row in rows:
            start_px = row.get("start_px")
            if start_px in (None, ""):
                continue
            prices[int(row["token_index"])] = str(start_px)

        log.debug("reference_prices_loaded", count=len(prices))
        return prices
