"""Tests for BaseAPIClient: budget, concurrency cap and 429 backoff."""

from unittest.mock import AsyncMock

import httpx
import pytest
import respx

from hypurrspot.core.exceptions import UpstreamUnavailable
from hypurrspot.services.base import BaseAPIClient, split_url
from hypurrspot.services.concurrency import ConcurrencyLimiter
from hypurrspot.services.rate_budget import RateBudget

BASE_URL = "https://api.example.com"


def _client(**kwargs) -> BaseAPIClient:
    client = BaseAPIClient(
        service="example",
        base_url=BASE_URL,
        budget=RateBudget(limit=1200),
        limiter=ConcurrencyLimiter(max_concurrency=5),
        **kwargs,
    )
    client._backoff_sleep = AsyncMock()  # type: ignore[method-assign]
    return client


class TestSplitUrl:
    """Tests for split_url helper."""

    def test_split_path(self) -> None:
        assert split_url("https://api.hyperliquid.xyz/info") == (
            "https://api.hyperliquid.xyz",
            "/info",
        )

    def test_split_root(self) -> None:
        assert split_url("http://localhost:8080") == ("http://localhost:8080", "/")


class TestBaseAPIClientInit:
    """Tests for BaseAPIClient initialization."""

    def test_defaults(self) -> None:
        """
        Given: BaseAPIClient without explicit options
        When: Created
        Then: Uses 30s timeout, 5 retries and 1s backoff base
        """
        client = _client()

        assert client.base_url == BASE_URL
        assert client.timeout == 30.0
        assert client.max_retries == 5
        assert client.backoff_base_seconds == 1.0

    def test_lazy_initialization(self) -> None:
        client = _client()
        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_cleans_up_client(self) -> None:
        client = _client()
        mock_httpx_client = AsyncMock()
        client._client = mock_httpx_client

        await client.close()

        mock_httpx_client.aclose.assert_called_once()
        assert client._client is None


class TestBaseAPIClientRetry:
    """Tests for 429 retry policy."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_on_first_attempt(self) -> None:
        route = respx.post(f"{BASE_URL}/info").mock(
            return_value=httpx.Response(200, json={"ok": True})
        )
        client = _client()

        response = await client.post("/info", weight=20, json={"type": "spotMeta"})

        assert response.json() == {"ok": True}
        assert route.call_count == 1
        client._backoff_sleep.assert_not_awaited()
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_429_then_succeeds(self) -> None:
        """
        Given: Upstream answers 429 twice, then 200
        When: Request is made
        Then: Retries with 1s then 2s backoff and returns the response
        """
        route = respx.post(f"{BASE_URL}/info").mock(
            side_effect=[
                httpx.Response(429),
                httpx.Response(429),
                httpx.Response(200, json={"ok": True}),
            ]
        )
        client = _client()

        response = await client.post("/info", weight=20)

        assert response.status_code == 200
        assert route.call_count == 3
        assert [call.args[0] for call in client._backoff_sleep.await_args_list] == [1, 2]
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_exhausted_retries_raise_unavailable(self) -> None:
        """
        Given: Upstream always answers 429
        When: Request is made
        Then: 1 attempt + 5 retries with 1, 2, 4, 8, 16s backoff, then UpstreamUnavailable
        """
        route = respx.post(f"{BASE_URL}/info").mock(return_value=httpx.Response(429))
        client = _client()

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await client.post("/info", weight=20)

        assert route.call_count == 6
        assert [call.args[0] for call in client._backoff_sleep.await_args_list] == [
            1,
            2,
            4,
            8,
            16,
        ]
        assert exc_info.value.status_code == 429
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_every_attempt_spends_budget(self) -> None:
        respx.post(f"{BASE_URL}/info").mock(
            side_effect=[httpx.Response(429), httpx.Response(200, json={})]
        )
        client = _client()

        await client.post("/info", weight=20)

        assert client._budget.used == 40
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_not_retried(self) -> None:
        route = respx.get(f"{BASE_URL}/data").mock(return_value=httpx.Response(500))
        client = _client()

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await client.get("/data", weight=20)

        assert route.call_count == 1
        assert exc_info.value.status_code == 500
        client._backoff_sleep.assert_not_awaited()
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_error_not_retried(self) -> None:
        route = respx.get(f"{BASE_URL}/data").mock(side_effect=httpx.ConnectError("refused"))
        client = _client()

        with pytest.raises(UpstreamUnavailable, match="refused"):
            await client.get("/data", weight=20)

        assert route.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_custom_retry_policy(self) -> None:
        route = respx.get(f"{BASE_URL}/data").mock(return_value=httpx.Response(429))
        client = _client(max_retries=2, backoff_base_seconds=0.5)

        with pytest.raises(UpstreamUnavailable):
            await client.get("/data", weight=20)

        assert route.call_count == 3
        assert [call.args[0] for call in client._backoff_sleep.await_args_list] == [0.5, 1.0]
        await client.close()
