"""Shared request-weight budget for upstream API calls.

Hyperliquid meters its public API by request *weight* per minute rather than
by request count. Every upstream call made by the service spends from one
shared RateBudget, so the token listing, the deploy listing and the
per-token detail calls all draw from the same allowance.

Windows are aligned to the wall clock (``time // interval``). A background
tick resets the counter at each window boundary; a caller that would
overflow the ceiling sleeps only for the remainder of the current window.
"""

import asyncio
import contextlib
import time
from collections.abc import Callable

import structlog

log = structlog.get_logger(__name__)


class RateBudget:
    """Rolling per-interval request-weight counter.

    Spending is optimistic: weight is charged when ``reserve()`` returns and
    is never refunded, even if the request later fails.

    Thread-safe via asyncio.Lock.

    Example:
        ```python
        budget = RateBudget(limit=1200, interval_seconds=60)
        await budget.start()  # Background reset tick
        await budget.reserve(20)  # Waits if the window is exhausted
        response = await client.post(...)
        ```
    """

    def __init__(
        self,
        limit: int = 1200,
        interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the budget.

        Args:
            limit: Maximum weight granted per window.
            interval_seconds: Window length in seconds.
            clock: Wall-clock source (unix seconds), injectable for tests.
        """
        if limit < 1:
            raise ValueError("limit must be positive")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.limit = limit
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._lock = asyncio.Lock()
        self._used = 0
        self._window = self._current_window()
        self._reset_task: asyncio.Task[None] | None = None

    @property
    def used(self) -> int:
        """Weight spent in the current window."""
        return self._used

    @property
    def remaining(self) -> int:
        """Weight still available in the current window."""
        return max(0, self.limit - self._used)

    def _current_window(self) -> int:
        return int(self._clock() // self.interval_seconds)

    def seconds_until_reset(self) -> float:
        """Seconds left until the next window boundary."""
        return self.interval_seconds - (self._clock() % self.interval_seconds)

    def reset_if_elapsed(self) -> bool:
        """Zero the counter if the wall clock has moved into a new window.

        Returns:
            True if the counter was reset.
        """
        window = self._current_window()
        if window == self._window:
            return False
        self._window = window
        if self._used:
            log.debug("rate_budget_reset", spent=self._used, limit=self.limit)
        self._used = 0
        return True

    async def reserve(self, weight: int) -> None:
        """Wait until ``weight`` units can be spent, then spend them.

        Args:
            weight: Weight of the request about to be issued.

        Raises:
            ValueError: If weight is not positive or exceeds the ceiling.
        """
        if weight < 1:
            raise ValueError("weight must be positive")
        if weight > self.limit:
            raise ValueError(f"weight {weight} exceeds budget limit {self.limit}")

        async with self._lock:
            self.reset_if_elapsed()

            while self._used + weight > self.limit:
                wait_seconds = self.seconds_until_reset()
                log.info(
                    "rate_budget_exhausted",
                    used=self._used,
                    weight=weight,
                    limit=self.limit,
                    wait_seconds=round(wait_seconds, 3),
                )
                await asyncio.sleep(wait_seconds)
                self.reset_if_elapsed()

            self._used += weight

    async def _reset_loop(self) -> None:
        while True:
            await asyncio.sleep(self.seconds_until_reset())
            self.reset_if_elapsed()

    async def start(self) -> None:
        """Start the background reset tick.

        Safe to call multiple times - only one tick task runs.
        """
        if self._reset_task is not None and not self._reset_task.done():
            return
        self._reset_task = asyncio.create_task(self._reset_loop())
        log.info(
            "rate_budget_started",
            limit=self.limit,
            interval_seconds=self.interval_seconds,
        )

    async def stop(self) -> None:
        """Cancel the background reset tick."""
        if self._reset_task is None:
            return
        self._reset_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._reset_task
        self._reset_task = None
        log.info("rate_budget_stopped")
