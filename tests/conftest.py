"""Shared fixtures for the findings API tests."""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Settings require a project id; set one before the app is imported.
os.environ.setdefault("GCP_PROJECT_ID", "flusec-test")

from fastapi.testclient import TestClient  # noqa: E402

from flusec_cloud.main import app  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def mock_resolver():
    """Identity resolver that maps every token to ``alice``."""
    resolver = MagicMock()
    resolver.resolve_username = AsyncMock(return_value="alice")
    with patch("flusec_cloud.api.routes.get_identity_resolver", return_value=resolver):
        yield resolver


@pytest.fixture
def mock_store():
    """Findings store that assigns ``batch_<n>`` ids in order."""
    store = MagicMock()

    async def _insert_many(documents):
        return [f"batch_{index}" for index, _ in enumerate(documents)]

    store.insert_many = AsyncMock(side_effect=_insert_many)
    with patch("flusec_cloud.api.routes.get_findings_store", return_value=store):
        yield store


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer gho_valid_token"}
