"""Hyperliquid info API client.

Wraps the two Hyperliquid ``/info`` calls the token sync needs:
    - POST {"type": "spotMeta"} - spot token listing
    - POST {"type": "tokenDetails", "tokenId": ...} - per-token detail

Both calls are charged the same request weight against the shared
RateBudget.
"""

from typing import Any

import structlog
from pydantic import ValidationError

from hypurrspot.core.exceptions import UpstreamProtocolError
from hypurrspot.data.models.token import SpotToken, TokenDetails
from hypurrspot.services.base import BaseAPIClient, split_url
from hypurrspot.services.concurrency import ConcurrencyLimiter
from hypurrspot.services.rate_budget import RateBudget

log = structlog.get_logger(__name__)


class HyperliquidClient(BaseAPIClient):
    """Hyperliquid info endpoint client.

    Example:
        client = HyperliquidClient(
            api_url="https://api.hyperliquid.xyz/info",
            budget=budget,
            limiter=limiter,
        )
        try:
            listing = await client.fetch_spot_listing()
            detail = await client.fetch_token_detail(listing[0].token_id)
        finally:
            await client.close()
    """

    SERVICE_NAME = "hyperliquid"
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
        """Initialize the client.

        Args:
            api_url: Full URL of the info endpoint; requests POST to it directly.
            budget: Shared request-weight budget.
            limiter: Shared concurrency limiter.
            request_weight: Weight charged per call.
        """
        origin, self.path = split_url(api_url)
        super().__init__(
            service=self.SERVICE_NAME,
            base_url=origin,
            budget=budget,
            limiter=limiter,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            max_retries=max_retries,
            backoff_base_seconds=backoff_base_seconds,
        )
        self.request_weight = request_weight

    async def _info(self, body: dict[str, Any]) -> Any:
        response = await self.post(self.path, weight=self.request_weight, json=body)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamProtocolError(
                service=self.service,
                message=f"Non-JSON response for {body['type']}",
            ) from e

    async def fetch_spot_listing(self) -> list[SpotToken]:
        """Fetch the spot token listing.

        Returns:
            Listing entries in upstream order.

        Raises:
            UpstreamProtocolError: If the response has no ``tokens`` list.
            UpstreamUnavailable: On transport failure or exhausted retries.
        """
        data = await self._info({"type": "spotMeta"})

        tokens = data.get("tokens") if isinstance(data, dict) else None
        if not isinstance(tokens, list):
            raise UpstreamProtocolError(
                service=self.service,
                message="Invalid API response for spotMeta: missing 'tokens'",
            )

        try:
            listing = [SpotToken.model_validate(item) for item in tokens]
        except ValidationError as e:
            raise UpstreamProtocolError(
                service=self.service,
                message=f"Invalid spotMeta token entry: {e.error_count()} error(s)",
            ) from e

        log.info("spot_listing_fetched", count=len(listing))
        return listing

    async def fetch_token_detail(self, token_id: str) -> TokenDetails:
        """Fetch detail for one token.

        Raises:
            UpstreamProtocolError: If the detail has no name.
            UpstreamUnavailable: On transport failure or exhausted retries.
        """
        data = await self._info({"type": "tokenDetails", "tokenId": token_id})

        if not isinstance(data, dict) or not data.get("name"):
            raise UpstreamProtocolError(
                service=self.service,
                message=f"Details not found for tokenId: {token_id}",
            )

        try:
            detail = TokenDetails.model_validate(data)
        except ValidationError as e:
            raise UpstreamProtocolError(
                service=self.service,
                message=f"Invalid tokenDetails for tokenId {token_id}",
            ) from e

        log.debug("token_detail_fetched", token_id=token_id, name=detail.name)
        return detail
