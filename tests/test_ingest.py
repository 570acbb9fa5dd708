# =============================================================================
# Flusec Cloud - API Tests
# =============================================================================
"""
HTTP-level tests for the findings API.

Tests cover:
- Health check
- Bearer token handling
- Flat and multi-workspace submissions
- Validation and error responses
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from flusec_cloud.config import get_settings
from flusec_cloud.errors import AuthError, PersistenceError
from flusec_cloud.services.github import GitHubIdentityResolver


# =============================================================================
# Health Check Tests
# =============================================================================

class TestHealthCheck:
    """Tests for the health check endpoint."""

    def test_health_check_returns_ok(self, client):
        """Health check should answer without authentication."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["status"] == "healthy"
        assert data["service"] == "flusec-cloud"
        assert "timestamp" in data


# =============================================================================
# Authentication Tests
# =============================================================================

class TestBearerToken:
    """Tests for Authorization header handling."""

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": "Bearer "},
            {"Authorization": "Bearer    "},
            {"Authorization": "Basic dXNlcjpwYXNz"},
            {"Authorization": "gho_token_without_scheme"},
        ],
    )
    def test_missing_token_returns_401_without_calls(self, headers, client, mock_resolver, mock_store):
        """No usable token short-circuits before GitHub or Firestore."""
        response = client.post("/v1/findings", json={"findings": []}, headers=headers)

        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Missing Bearer token"}
        mock_resolver.resolve_username.assert_not_called()
        mock_store.insert_many.assert_not_called()

    def test_missing_token_skips_body_parsing(self, client, mock_resolver, mock_store):
        """An unauthenticated request with a broken body is still a 401."""
        response = client.post(
            "/v1/findings",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 401

    def test_token_is_trimmed(self, client, mock_resolver, mock_store):
        """Whitespace around the token is stripped before the lookup."""
        client.post(
            "/v1/findings",
            json={},
            headers={"Authorization": "Bearer   gho_abc  "},
        )

        mock_resolver.resolve_username.assert_awaited_once_with("gho_abc")

    def test_rejected_token_returns_401(self, client, mock_resolver, mock_store, auth_headers):
        """Scenario C: GitHub rejects the token, nothing is stored."""
        mock_resolver.resolve_username.side_effect = AuthError(
            "GitHub auth failed: HTTP 401 Bad credentials"
        )

        response = client.post(
            "/v1/findings",
            json={"findings": [{"a": 1}]},
            headers=auth_headers,
        )

        assert response.status_code == 401
        assert response.json() == {
            "ok": False,
            "error": "GitHub auth failed: HTTP 401 Bad credentials",
        }
        mock_store.insert_many.assert_not_called()

    def test_rejected_token_through_github_client(self, client, mock_store, auth_headers):
        """A real resolver answering 401 maps to a 401 response."""
        resolver = GitHubIdentityResolver(
            api_url="https://api.github.test",
            user_agent="flusec-cloud",
            timeout=5.0,
            client=httpx.AsyncClient(
                transport=httpx.MockTransport(
                    lambda request: httpx.Response(401, json={"message": "Bad credentials"})
                )
            ),
        )

        with patch("flusec_cloud.api.routes.get_identity_resolver", return_value=resolver):
            response = client.post("/v1/findings", json={"findings": []}, headers=auth_headers)

        assert response.status_code == 401
        assert response.json()["ok"] is False
        assert "HTTP 401" in response.json()["error"]
        mock_store.insert_many.assert_not_called()


# =============================================================================
# Ingestion Tests
# =============================================================================

class TestIngestion:
    """Tests for successful submissions."""

    def test_flat_payload_stores_one_batch(self, client, mock_resolver, mock_store, auth_headers):
        """Scenario A: a flat body becomes one document owned by the token's login."""
        response = client.post(
            "/v1/findings",
            json={"findings": [{"a": 1}, {"b": 2}], "workspaceName": "w1"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "username": "alice",
            "batchesInserted": 1,
            "totalFindings": 2,
            "batchIds": ["batch_0"],
        }

        documents = mock_store.insert_many.call_args.args[0]
        assert len(documents) == 1
        assert documents[0].username == "alice"
        assert documents[0].workspace_name == "w1"
        assert documents[0].findings == [{"a": 1}, {"b": 2}]

    def test_multi_workspace_payload_stores_each_workspace(
        self, client, mock_resolver, mock_store, auth_headers
    ):
        """Scenario B: one document per workspace, counts summed."""
        response = client.post(
            "/v1/findings",
            json={
                "extensionVersion": "0.0.3",
                "workspaces": [
                    {"workspaceName": "w1", "findings": [{"a": 1}]},
                    {"workspaceName": "w2", "findings": []},
                ],
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["batchesInserted"] == 2
        assert data["totalFindings"] == 1
        assert data["batchIds"] == ["batch_0", "batch_1"]

        documents = mock_store.insert_many.call_args.args[0]
        assert [d.workspace_name for d in documents] == ["w1", "w2"]
        assert all(d.extension_version == "0.0.3" for d in documents)
        assert documents[0].generated_at == documents[1].generated_at
        assert documents[0].received_at == documents[1].received_at

    def test_client_supplied_username_is_ignored(self, client, mock_resolver, mock_store, auth_headers):
        """The stored username always comes from the token."""
        client.post(
            "/v1/findings",
            json={"username": "mallory", "findings": []},
            headers=auth_headers,
        )

        documents = mock_store.insert_many.call_args.args[0]
        assert documents[0].username == "alice"

    def test_total_findings_uses_reported_counts(self, client, mock_resolver, mock_store, auth_headers):
        """Reported findingsCount values are summed, not list lengths."""
        response = client.post(
            "/v1/findings",
            json={
                "workspaces": [
                    {"findings": [], "findingsCount": 40},
                    {"findings": [{"a": 1}, {"b": 2}]},
                ],
            },
            headers=auth_headers,
        )

        assert response.json()["totalFindings"] == 42

    def test_empty_body_stores_default_batch(self, client, mock_resolver, mock_store, auth_headers):
        """An empty body is a legacy submission with no findings."""
        response = client.post("/v1/findings", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["batchesInserted"] == 1
        assert response.json()["totalFindings"] == 0


# =============================================================================
# Validation Tests
# =============================================================================

class TestValidation:
    """Tests for rejected submissions."""

    def test_empty_workspaces_returns_400(self, client, mock_resolver, mock_store, auth_headers):
        """No workspaces means nothing to store."""
        response = client.post("/v1/findings", json={"workspaces": []}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "Invalid payload"}
        mock_store.insert_many.assert_not_called()

    def test_invalid_json_returns_400(self, client, mock_resolver, mock_store, auth_headers):
        """A body that is not JSON is rejected."""
        response = client.post(
            "/v1/findings",
            content="{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "Invalid JSON body"}
        mock_store.insert_many.assert_not_called()

    def test_oversized_body_returns_413(self, client, mock_resolver, mock_store, auth_headers, monkeypatch):
        """Bodies above the configured limit are refused."""
        monkeypatch.setattr(get_settings(), "max_body_bytes", 64)

        response = client.post(
            "/v1/findings",
            json={"findings": [{"secret": "x" * 100}]},
            headers=auth_headers,
        )

        assert response.status_code == 413
        assert response.json()["ok"] is False
        mock_store.insert_many.assert_not_called()

    def test_oversized_chunked_body_returns_413(
        self, client, mock_resolver, mock_store, auth_headers, monkeypatch
    ):
        """A streamed body without Content-Length is cut off at the limit."""
        monkeypatch.setattr(get_settings(), "max_body_bytes", 64)

        def chunks():
            yield b'{"findings": ['
            for _ in range(20):
                yield b'{"secret": "xxxxxxxx"},'
            yield b"{}]}"

        response = client.post(
            "/v1/findings",
            content=chunks(),
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 413
        assert response.json()["ok"] is False
        mock_store.insert_many.assert_not_called()

    def test_deeply_nested_body_returns_400(self, client, mock_resolver, mock_store, auth_headers):
        """JSON nested past the parser's recursion limit is an invalid body."""
        depth = 200_000
        body = '{"findings": ' + "[" * depth + "]" * depth + "}"

        response = client.post(
            "/v1/findings",
            content=body,
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "Invalid JSON body"}
        mock_store.insert_many.assert_not_called()


# =============================================================================
# Failure Tests
# =============================================================================

class TestFailures:
    """Tests for storage and unexpected failures."""

    def test_storage_failure_returns_500(self, client, mock_resolver, mock_store, auth_headers):
        """A failed write is reported as a total failure."""
        mock_store.insert_many = AsyncMock(side_effect=PersistenceError("Failed to store findings: unavailable"))

        response = client.post("/v1/findings", json={"findings": []}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {
            "ok": False,
            "error": "Failed to store findings: unavailable",
        }

    def test_unexpected_error_returns_message_only(self, client, mock_resolver, mock_store, auth_headers):
        """Unexpected exceptions surface only their message."""
        mock_store.insert_many = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/v1/findings", json={"findings": []}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "boom"}
