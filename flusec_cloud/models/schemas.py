# =============================================================================
# Flusec Cloud - Pydantic Schemas
# =============================================================================
"""
Canonical batch models and API response models.

Attributes are snake_case in Python; the wire format and the stored
documents use the camelCase names the extension sends.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkspaceBatch(CamelModel):
    """
    One workspace's findings, normalized from either request shape.

    Attributes:
        workspace_id: Stable caller-supplied workspace identifier
        workspace_name: Human-readable workspace label
        extension_version: Version of the submitting extension
        generated_at: ISO-8601 time the client produced the findings
        findings: Opaque finding records, passed through unmodified
        findings_count: Number of findings reported for the workspace
        findings_file: Source file label the findings were read from
    """

    workspace_id: str = ""
    workspace_name: str = ""
    extension_version: str = ""
    generated_at: str
    findings: List[Any] = Field(default_factory=list)
    findings_count: int = Field(default=0, ge=0)
    findings_file: str = ""


class PersistedBatchDocument(WorkspaceBatch):
    """
    Document stored for each workspace batch.

    Attributes:
        username: GitHub login resolved from the bearer token
        received_at: Server time the submission was assembled
    """

    username: str = Field(..., min_length=1)
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_firestore_dict(self) -> Dict[str, Any]:
        """
        Convert to Firestore-compatible dictionary.

        ``receivedAt`` stays a datetime so Firestore stores it as a
        native timestamp.

        Returns:
            Dict: Document data for Firestore
        """
        return {
            "username": self.username,
            "workspaceId": self.workspace_id,
            "workspaceName": self.workspace_name,
            "extensionVersion": self.extension_version,
            "generatedAt": self.generated_at,
            "receivedAt": self.received_at,
            "findingsFile": self.findings_file,
            "findingsCount": self.findings_count,
            "findings": self.findings,
        }


class IngestResponse(CamelModel):
    """
    Response model for a successful findings submission.

    Attributes:
        ok: Always true for successful requests
        username: GitHub login the batches were stored under
        batches_inserted: Number of documents written
        total_findings: Sum of findingsCount across written documents
        batch_ids: Firestore document ids, in submission order
    """

    ok: bool = Field(default=True, description="Request outcome")
    username: str = Field(..., description="Authenticated GitHub login")
    batches_inserted: int = Field(..., description="Number of stored batches")
    total_findings: int = Field(..., description="Total findings across batches")
    batch_ids: List[str] = Field(..., description="Stored document identifiers")


class ErrorResponse(BaseModel):
    """Response body for every failed request."""

    ok: bool = Field(default=False, description="Request outcome")
    error: str = Field(..., description="Human-readable failure message")


class HealthResponse(BaseModel):
    """
    Response model for health check endpoint.

    Attributes:
        ok: Always true while the process is serving
        status: Service health status
        service: Service name
        version: Service version
        timestamp: Current server time
    """

    ok: bool = Field(default=True, description="Liveness flag")
    status: str = Field(default="healthy", description="Health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Current timestamp",
    )
