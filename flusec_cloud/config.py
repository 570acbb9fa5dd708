# =============================================================================
# Flusec Cloud - Configuration
# =============================================================================
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (or a local .env file).
The GCP project has no default: starting without it is a fatal error.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        gcp_project_id: Google Cloud project holding the Firestore database
        firestore_database: Firestore database name
        findings_collection: Collection receiving findings batch documents
        github_api_url: Base URL of the GitHub REST API
        github_user_agent: User-Agent sent to GitHub
        identity_timeout_seconds: Upper bound for the GitHub identity call
        storage_timeout_seconds: Upper bound for the Firestore batch commit
        max_body_bytes: Largest accepted request body
        host: Interface the HTTP server binds to
        port: Port the HTTP server listens on
        environment: Current environment (development/staging/production)
        log_level: Logging verbosity level
        service_name: Name of this service for logging/tracing
    """

    # Google Cloud Configuration
    gcp_project_id: str
    firestore_database: str = "(default)"
    findings_collection: str = "hardcoded_secrets_detection"

    # GitHub Identity Configuration
    github_api_url: str = "https://api.github.com"
    github_user_agent: str = "flusec-cloud"

    # Timeouts
    identity_timeout_seconds: float = 10.0
    storage_timeout_seconds: float = 15.0

    # Request Limits
    max_body_bytes: int = 5 * 1024 * 1024  # 5MB

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8082

    # Application Configuration
    environment: str = "development"
    log_level: str = "INFO"
    service_name: str = "flusec-cloud"

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to avoid re-reading environment variables
    on every request.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
