"""
Flusec Cloud - Route Handlers

Handles /v1/findings submissions from the extension and /health.
"""

from typing import Optional

from fastapi import APIRouter, Header, Request

from .. import __version__
from ..config import get_settings
from ..models import ErrorResponse, HealthResponse, IngestResponse
from ..services import FindingsIngestor, get_findings_store, get_identity_resolver


router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check for load balancers."""
    settings = get_settings()
    return HealthResponse(service=settings.service_name, version=__version__)


@router.post(
    "/v1/findings",
    response_model=IngestResponse,
    tags=["Ingestion"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def ingest_findings(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> IngestResponse:
    """
    Store a findings submission.

    Multi-workspace: {"extensionVersion", "generatedAt", "workspaces": [...]}
    Flat (legacy): {"workspaceId", "workspaceName", "findings", ...}
    """
    ingestor = FindingsIngestor(
        resolver=get_identity_resolver(),
        store=get_findings_store(),
        max_body_bytes=get_settings().max_body_bytes,
    )
    return await ingestor.ingest(authorization, request)
