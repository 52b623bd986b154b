"""
Stagebot Team Learning - Pytest Configuration and Fixtures

Shared fixtures and test configuration for all test modules.
"""

import os

# Add project root to path for imports
import sys
from typing import Any
from unittest.mock import MagicMock, Mock

import pytest
from httpx import AsyncClient

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# =============================================================================
# Environment Override Fixture
# =============================================================================


@pytest.fixture
def override_test_env(monkeypatch, tmp_path):
    """
    Override environment variables for testing.

    Ensures tests run with consistent test configuration and never pick
    up a developer's central standards file.
    """
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "test_service_key")
    monkeypatch.setenv("FEEDBACK_TABLE", "feedback")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("STAGEBOT_CENTRAL_STANDARDS", str(tmp_path / "missing-central.yaml"))
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("STORE_FIELD_MAX_CHARS", raising=False)
    monkeypatch.delenv("DEFAULT_MIN_OCCURRENCES", raising=False)
    monkeypatch.delenv("DEFAULT_MAX_RESULTS", raising=False)
    monkeypatch.delenv("STAGEBOT_CENTRAL_STANDARDS_API_KEY", raising=False)
    monkeypatch.delenv("STANDARDS_TABLE", raising=False)
    monkeypatch.delenv("STANDARDS_ID", raising=False)


@pytest.fixture
def test_config(override_test_env):
    """Config loaded from the test environment."""
    from utils.config import Config

    return Config()


# =============================================================================
# Mock Supabase Client Fixture
# =============================================================================


@pytest.fixture
def mock_supabase_client() -> Mock:
    """
    Mock Supabase client for testing.

    Every query chain (select/eq/gt/order/limit) resolves to the same
    builder, so tests set the rows once on execute().
    """
    client = MagicMock()
    builder = client.table.return_value
    builder.select.return_value = builder
    builder.eq.return_value = builder
    builder.gt.return_value = builder
    builder.order.return_value = builder
    builder.limit.return_value = builder
    builder.execute.return_value.data = []
    builder.insert.return_value.execute.return_value.data = []
    client.rpc.return_value.execute.return_value.data = True
    return client


def set_store_rows(client: Mock, *pages: list[dict[str, Any]]) -> None:
    """Make successive execute() calls return the given pages, then an empty one."""
    client.table.return_value.execute.side_effect = [MagicMock(data=page) for page in (*pages, [])]


@pytest.fixture
def store_rows():
    """Helper to program paged store reads on mock_supabase_client."""
    return set_store_rows


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest.fixture
def app_with_overrides(test_config, mock_supabase_client):
    """
    The FastAPI app wired to the mock store.

    Dependency overrides are cleared after each test.
    """
    from main import app, get_base_config, get_config, get_supabase

    app.dependency_overrides[get_config] = lambda: test_config
    app.dependency_overrides[get_base_config] = lambda: test_config
    app.dependency_overrides[get_supabase] = lambda: mock_supabase_client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_with_overrides):
    """
    FastAPI test client for endpoint testing.

    Provides a sync test client for testing API endpoints.
    """
    from fastapi.testclient import TestClient

    with TestClient(app_with_overrides) as test_client:
        yield test_client


@pytest.fixture
async def async_test_client(app_with_overrides) -> AsyncClient:
    """
    Async test client for FastAPI application.

    Provides an async client for testing API endpoints.
    """
    from httpx import ASGITransport

    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """
    Pytest configuration hook.

    Registers custom markers and test configuration.
    """
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "contract: mark test as contract/endpoint test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
