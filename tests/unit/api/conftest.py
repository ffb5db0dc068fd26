"""Fixtures for API tests: app, client and admin session."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.fixtures.auth import make_session_cookie


@pytest.fixture
def app() -> FastAPI:
    """App without lifespan side effects (TestClient is not entered)."""
    from hypurrspot.api.app import create_app

    return create_app()


@pytest.fixture
def mock_token_repo() -> MagicMock:
    repo = MagicMock()
    repo.get_all = AsyncMock(return_value=[])
    repo.update_curated = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_user_repo() -> MagicMock:
    repo = MagicMock()
    repo.get_by_username = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_sync_service() -> MagicMock:
    service = MagicMock()
    service.run_sync_pass = AsyncMock()
    return service


@pytest.fixture
def client(
    app: FastAPI,
    mock_token_repo: MagicMock,
    mock_user_repo: MagicMock,
    mock_sync_service: MagicMock,
) -> Generator[TestClient, None, None]:
    """TestClient with repositories and the sync service overridden."""
    from hypurrspot.api.dependencies import get_token_repo, get_user_repo
    from hypurrspot.core.sync.token_sync import get_token_sync_service

    app.dependency_overrides[get_token_repo] = lambda: mock_token_repo
    app.dependency_overrides[get_user_repo] = lambda: mock_user_repo
    app.dependency_overrides[get_token_sync_service] = lambda: mock_sync_service

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    """Client carrying a valid admin session cookie."""
    client.cookies.set("token", make_session_cookie())
    return client
