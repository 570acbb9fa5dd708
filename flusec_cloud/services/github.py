# =============================================================================
# Flusec Cloud - GitHub Identity Resolver
# =============================================================================
"""
Resolves a GitHub access token to the login of the account that owns it.

One ``GET /user`` call per submission; the HTTP client is shared across
requests and closed when the application shuts down.
"""

from functools import lru_cache
from typing import Optional

import httpx
import structlog

from ..config import get_settings
from ..errors import AuthError, IdentityServiceError


# Configure structured logger
logger = structlog.get_logger(__name__)


class GitHubIdentityResolver:
    """
    Async GitHub identity lookup.

    Attributes:
        api_url: Base URL of the GitHub REST API
        user_agent: User-Agent header GitHub requires
        timeout: Seconds before the call is abandoned
        _client: Lazily created HTTP client
    """

    def __init__(
        self,
        api_url: str,
        user_agent: str,
        timeout: float,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def resolve_username(self, token: str) -> str:
        """
        Exchange a bearer token for the GitHub login.

        Args:
            token: Non-empty GitHub access token

        Returns:
            str: The account login

        Raises:
            AuthError: GitHub rejected the token or sent no login
            IdentityServiceError: GitHub could not be reached in time
        """
        client = self._get_client()

        try:
            response = await client.get(
                f"{self.api_url}/user",
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/vnd.github+json",
                    "User-Agent": self.user_agent,
                },
            )
        except httpx.HTTPError as e:
            logger.error(
                "github_request_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise IdentityServiceError(f"GitHub identity check failed: {e}") from e

        if not response.is_success:
            body = await self._read_body(response)
            logger.warning(
                "github_auth_failed",
                status_code=response.status_code,
            )
            raise AuthError(f"GitHub auth failed: HTTP {response.status_code} {body}".strip())

        try:
            data = response.json()
        except ValueError:
            data = None

        login = data.get("login") if isinstance(data, dict) else None
        if not isinstance(login, str) or not login:
            logger.warning("github_login_missing", status_code=response.status_code)
            raise AuthError("GitHub response missing login")

        return login

    @staticmethod
    async def _read_body(response: httpx.Response) -> str:
        """Best-effort response text for diagnostics."""
        try:
            await response.aread()
            return response.text
        except (httpx.HTTPError, UnicodeDecodeError):
            return ""

    async def aclose(self) -> None:
        """Close the underlying HTTP client, if one was opened."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


@lru_cache
def get_identity_resolver() -> GitHubIdentityResolver:
    """
    Get cached identity resolver instance.

    Returns:
        GitHubIdentityResolver: Resolver configured from settings
    """
    settings = get_settings()
    return GitHubIdentityResolver(
        api_url=settings.github_api_url,
        user_agent=settings.github_user_agent,
        timeout=settings.identity_timeout_seconds,
    )
