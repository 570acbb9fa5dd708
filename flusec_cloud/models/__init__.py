# =============================================================================
# Flusec Cloud - Models Package
# =============================================================================
"""Pydantic models for batches, stored documents and API responses."""

from .schemas import (
    ErrorResponse,
    HealthResponse,
    IngestResponse,
    PersistedBatchDocument,
    WorkspaceBatch,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "IngestResponse",
    "PersistedBatchDocument",
    "WorkspaceBatch",
]
