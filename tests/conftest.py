"""Shared pytest fixtures for HypurrSpot tests.

This module provides fixtures for:
- Test environment variables and a fresh Settings cache per test
- Mocked Supabase client with chainable query builder
- Test data factories
- Upstream API mocks (Hyperliquid, Hypurrscan) via respx

Usage:
    @pytest.mark.unit
    def test_something(token_factory):
        token = token_factory()
        assert token.token_index >= 0
"""

import os
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.factories.token import TokenRecordFactory
from tests.fixtures.auth import TEST_CRON_SECRET, TEST_SESSION_SECRET

# Upstream mocks live in tests/fixtures
from tests.fixtures.hyperliquid_mock import mock_upstreams  # noqa: F401

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables.

    Loads .env file first, then sets defaults for any missing variables.
    """
    from dotenv import load_dotenv

    original_env = os.environ.copy()

    # Load .env file if it exists (won't override existing env vars)
    load_dotenv()

    os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
    os.environ.setdefault("SUPABASE_KEY", "test-key")
    os.environ["SESSION_SECRET"] = TEST_SESSION_SECRET
    os.environ["CRON_SECRET"] = TEST_CRON_SECRET
    os.environ["SYNC_ENABLED"] = "true"

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Make every test read settings from the current environment."""
    from hypurrspot.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset module-level singletons between tests."""
    import hypurrspot.core.sync.token_sync as token_sync_module
    import hypurrspot.data.supabase.client as supabase_module
    import hypurrspot.scheduler.scheduler as scheduler_module

    yield

    supabase_module._supabase_client = None
    token_sync_module._token_sync_service = None
    token_sync_module._rate_budget = None
    if scheduler_module._scheduler is not None and scheduler_module._scheduler.running:
        scheduler_module._scheduler.shutdown(wait=False)
    scheduler_module._scheduler = None


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def token_factory() -> type[TokenRecordFactory]:
    """Provide token factory for creating test token records."""
    return TokenRecordFactory


# =============================================================================
# Database Fixtures (Mocked for Unit Tests)
# =============================================================================


@pytest.fixture
def mock_supabase_client() -> MagicMock:
    """Mock SupabaseClient wrapper for repository tests.

    ``mock.client.table(...)`` returns one chainable query builder whose
    ``execute`` is an AsyncMock; set ``query.execute.return_value`` per test.
    """
    mock = MagicMock()

    query = MagicMock()
    for method in ("select", "insert", "update", "eq", "order", "range", "limit"):
        getattr(query, method).return_value = query
    query.execute = AsyncMock(return_value=MagicMock(data=[], count=0))

    mock.client.table.return_value = query
    mock.query = query
    return mock
