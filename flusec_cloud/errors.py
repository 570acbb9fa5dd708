# =============================================================================
# Flusec Cloud - Error Taxonomy
# =============================================================================
"""
Exceptions raised while ingesting a findings submission.

Every error carries the HTTP status it maps to. The application renders
them as ``{"ok": false, "error": <message>}``.
"""


class IngestionError(Exception):
    """Base class for failures surfaced to the submitting client."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingCredentialError(IngestionError):
    """No bearer token in the Authorization header."""

    status_code = 401


class AuthError(IngestionError):
    """GitHub rejected the token or returned an unusable response."""

    status_code = 401


class IdentityServiceError(IngestionError):
    """GitHub could not be reached or did not answer in time."""

    status_code = 500


class PayloadValidationError(IngestionError):
    """The request body is unreadable or normalizes to no batches."""

    status_code = 400


class PayloadTooLargeError(IngestionError):
    """The request body exceeds the configured size limit."""

    status_code = 413


class PersistenceError(IngestionError):
    """The findings store failed to write the batch documents."""

    status_code = 500


class UnexpectedIngestionError(IngestionError):
    """Any other failure while handling a submission."""

    status_code = 500
