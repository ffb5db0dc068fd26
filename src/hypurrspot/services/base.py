"""Base API client for weight-budgeted, rate-limit aware upstream calls.

This module provides BaseAPIClient, which every upstream client extends.
Each request:
- reserves its weight from the shared RateBudget,
- holds a slot from the shared ConcurrencyLimiter while on the wire,
- is retried with exponential backoff when the upstream answers 429.

Any other failure (non-429 HTTP status, timeout, connection error) is
raised immediately as UpstreamUnavailable.
"""

import asyncio
from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from hypurrspot.core.exceptions import RateLimitExceeded, UpstreamUnavailable
from hypurrspot.services.concurrency import ConcurrencyLimiter
from hypurrspot.services.rate_budget import RateBudget

log = structlog.get_logger(__name__)

HTTP_TOO_MANY_REQUESTS = 429


def split_url(url: str) -> tuple[str, str]:
    """Split a full endpoint URL into (origin, path-with-query).

    httpx appends a trailing slash to base_url, so endpoints configured as a
    single URL are requested as origin + path instead.
    """
    parsed = httpx.URL(url)
    origin = f"{parsed.scheme}://{parsed.netloc.decode()}"
    return origin, parsed.raw_path.decode() or "/"


class BaseAPIClient:
    """Base upstream client with budget, concurrency cap and 429 backoff.

    Attributes:
        service: Short service name used in errors and logs.
        base_url: Base URL for all requests.
        timeout: Request timeout in seconds.
        max_retries: Retries after the first rate-limited attempt.
        backoff_base_seconds: Delay before retry N is ``base * 2^(N-1)``.

    Example:
        client = BaseAPIClient(
            service="example",
            base_url="https://api.example.com",
            budget=RateBudget(),
            limiter=ConcurrencyLimiter(),
        )
        response = await client.post("/info", weight=20, json={"type": "spotMeta"})
        await client.close()
    """

    def __init__(
        self,
        service: str,
        base_url: str,
        budget: RateBudget,
        limiter: ConcurrencyLimiter,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        max_retries: int = 5,
        backoff_base_seconds: float = 1.0,
    ) -> None:
        self.service = service
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self.max_retries = max_retries
        self.backoff_base_seconds = backoff_base_seconds
        self._budget = budget
        self._limiter = limiter
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
            log.debug("httpx_client_created", service=self.service, base_url=self.base_url)
        return self._client

    async def close(self) -> None:
        """Close the httpx client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.debug("httpx_client_closed", service=self.service)

    async def _backoff_sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def _log_backoff(self, retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        log.warning(
            "upstream_rate_limited",
            service=self.service,
            attempt=retry_state.attempt_number,
            max_retries=self.max_retries,
            backoff_seconds=delay,
        )

    async def _send_once(
        self, method: str, path: str, weight: int, **kwargs: Any
    ) -> httpx.Response:
        """Issue a single request under the budget and concurrency cap.

        Raises:
            RateLimitExceeded: On HTTP 429.
            UpstreamUnavailable: On any other HTTP error or transport failure.
        """
        await self._budget.reserve(weight)
        client = await self._get_client()

        async with self._limiter.slot():
            try:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                if status_code == HTTP_TOO_MANY_REQUESTS:
                    raise RateLimitExceeded(
                        service=self.service,
                        message="Rate limited",
                        status_code=status_code,
                    ) from e
                log.warning(
                    "upstream_http_error",
                    service=self.service,
                    method=method,
                    path=path,
                    status_code=status_code,
                )
                raise UpstreamUnavailable(
                    service=self.service,
                    message=str(e),
                    status_code=status_code,
                ) from e
            except httpx.RequestError as e:
                log.warning(
                    "upstream_connection_error",
                    service=self.service,
                    method=method,
                    path=path,
                    error=str(e),
                )
                raise UpstreamUnavailable(service=self.service, message=str(e)) from e

        return response

    async def _request(
        self,
        method: str,
        path: str,
        weight: int,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make a request, retrying rate-limited attempts with backoff.

        Every attempt (including retries) reserves ``weight`` from the budget.

        Raises:
            UpstreamUnavailable: On non-retryable failure or exhausted retries.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff_base_seconds, exp_base=2),
            retry=retry_if_exception_type(RateLimitExceeded),
            sleep=self._backoff_sleep,
            before_sleep=self._log_backoff,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._send_once(method, path, weight, **kwargs)
        except RateLimitExceeded as e:
            log.error(
                "upstream_max_retries_exceeded",
                service=self.service,
                method=method,
                path=path,
                attempts=self.max_retries + 1,
            )
            raise UpstreamUnavailable(
                service=self.service,
                message=f"Rate limited after {self.max_retries + 1} attempts",
                status_code=e.status_code,
            ) from e

        return response

    async def get(self, path: str, weight: int, **kwargs: Any) -> httpx.Response:
        """Make a GET request."""
        return await self._request("GET", path, weight, **kwargs)

    async def post(self, path: str, weight: int, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return await self._request("POST", path, weight, **kwargs)
