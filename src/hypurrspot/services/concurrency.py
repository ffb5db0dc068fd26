"""Cap on simultaneous in-flight upstream calls.

Independent of the weight budget: a call must hold both a budget
reservation and a concurrency slot before it reaches the network.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


class ConcurrencyLimiter:
    """FIFO slot pool for upstream calls.

    Backed by asyncio.Semaphore, whose waiters are woken in arrival order,
    so a queued call is admitted as soon as every earlier call has been.

    Example:
        ```python
        limiter = ConcurrencyLimiter(max_concurrency=5)
        async with limiter.slot():
            response = await client.request(...)
        ```
    """

    def __init__(self, max_concurrency: int = 5) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be positive")
        self.max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._in_flight = 0
        self._waiting = 0

    @property
    def in_flight(self) -> int:
        """Number of calls currently holding a slot."""
        return self._in_flight

    @property
    def waiting(self) -> int:
        """Number of calls queued for a slot."""
        return self._waiting

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one slot for the duration of the block."""
        self._waiting += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._waiting -= 1

        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1
            self._semaphore.release()

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run an awaitable factory inside a slot."""
        async with self.slot():
            return await fn()
