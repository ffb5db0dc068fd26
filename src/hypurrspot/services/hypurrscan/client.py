"""Hypurrscan API client for the spot deploy listing."""

from typing import Any

import structlog

from hypurrspot.core.exceptions import UpstreamProtocolError
from hypurrspot.services.base import BaseAPIClient, split_url
from hypurrspot.services.concurrency import ConcurrencyLimiter
from hypurrspot.services.rate_budget import RateBudget

log = structlog.get_logger(__name__)


class HypurrscanClient(BaseAPIClient):
    """Client for the Hypurrscan spot deploy listing.

    The deploy events are passed through as-is; the sync pass only reports
    how many were seen.
    """

    SERVICE_NAME = "hypurrscan"
    REQUEST_WEIGHT = 20

    def __init__(
        self,
        api_url: str,
        budget: RateBudget,
        limiter: ConcurrencyLimiter,
        request_weight: int = REQUEST_WEIGHT,
        timeout: float = 30.0,
        max_retries: int = 5,
        backoff_base_seconds: float = 1.0,
    ) -> None:
        origin, self.path = split_url(api_url)
        super().__init__(
            service=self.SERVICE_NAME,
            base_url=origin,
            budget=budget,
            limiter=limiter,
            timeout=timeout,
            headers={"Accept": "application/json"},
            max_retries=max_retries,
            backoff_base_seconds=backoff_base_seconds,
        )
        self.request_weight = request_weight

    async def fetch_deploy_listing(self) -> list[Any]:
        """Fetch the spot deploy event list.

        Raises:
            UpstreamProtocolError: If the body is not a JSON array.
            UpstreamUnavailable: On transport failure or exhausted retries.
        """
        response = await self.get(self.path, weight=self.request_weight)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamProtocolError(
                service=self.service, message="Non-JSON deploy listing"
            ) from e

        if not isinstance(data, list):
            raise UpstreamProtocolError(
                service=self.service,
                message=f"Expected deploy list, got {type(data).__name__}",
            )

        log.info("deploy_listing_fetched", count=len(data))
        return data
