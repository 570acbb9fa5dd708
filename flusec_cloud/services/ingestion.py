# =============================================================================
# Flusec Cloud - Ingestion Coordinator
# =============================================================================
"""
End-to-end handling of one findings submission.

Steps:
1. Extract the bearer token (fail fast, before any outbound call)
2. Resolve the GitHub login
3. Read and parse the JSON body
4. Normalize into workspace batches and reject an empty result
5. Stamp batches with the login and receipt time
6. Write all documents in one batched commit
"""

import json
from typing import Any, Optional

import structlog
from fastapi import Request

from ..errors import (
    IngestionError,
    MissingCredentialError,
    PayloadTooLargeError,
    PayloadValidationError,
    UnexpectedIngestionError,
)
from ..models import IngestResponse
from .assembler import assemble_documents
from .firestore import FindingsStore
from .github import GitHubIdentityResolver
from .normalizer import is_multi_workspace, normalize_payload


logger = structlog.get_logger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Return the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        MissingCredentialError: Header absent, not a Bearer header, or empty token
    """
    header = authorization or ""
    token = header[len(BEARER_PREFIX):].strip() if header.startswith(BEARER_PREFIX) else ""
    if not token:
        raise MissingCredentialError("Missing Bearer token")
    return token


async def read_json_body(request: Request, max_bytes: int) -> Any:
    """
    Read and decode the request body.

    An empty body decodes to ``{}``.

    Raises:
        PayloadTooLargeError: Body exceeds ``max_bytes``
        PayloadValidationError: Body is not valid JSON or nests too deeply
    """
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > max_bytes:
        raise PayloadTooLargeError(f"Request body exceeds {max_bytes} bytes")

    # Chunked uploads carry no Content-Length; stop reading past the limit.
    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise PayloadTooLargeError(f"Request body exceeds {max_bytes} bytes")
        chunks.append(chunk)

    raw = b"".join(chunks)
    if not raw.strip():
        return {}

    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError, RecursionError) as e:
        logger.warning("invalid_json_body", error=str(e))
        raise PayloadValidationError("Invalid JSON body") from e


class FindingsIngestor:
    """
    Coordinates identity resolution, normalization and storage.

    Attributes:
        resolver: GitHub identity resolver
        store: Findings store receiving the documents
        max_body_bytes: Largest accepted request body
    """

    def __init__(
        self,
        resolver: GitHubIdentityResolver,
        store: FindingsStore,
        max_body_bytes: int,
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.max_body_bytes = max_body_bytes

    async def ingest(self, authorization: Optional[str], request: Request) -> IngestResponse:
        """
        Ingest one submission.

        Args:
            authorization: Raw Authorization header value
            request: Incoming request carrying the JSON body

        Returns:
            IngestResponse: Login, inserted batch count, total findings and ids

        Raises:
            IngestionError: Any failure, already mapped to its HTTP status
        """
        token = extract_bearer_token(authorization)

        try:
            return await self._ingest(token, request)
        except IngestionError:
            raise
        except Exception as e:
            logger.exception("ingest_failed", error=str(e), error_type=type(e).__name__)
            raise UnexpectedIngestionError(str(e) or type(e).__name__) from e

    async def _ingest(self, token: str, request: Request) -> IngestResponse:
        username = await self.resolver.resolve_username(token)

        body = await read_json_body(request, self.max_body_bytes)
        batches = normalize_payload(body)

        if not batches:
            logger.warning("ingest_rejected_empty", username=username)
            raise PayloadValidationError("Invalid payload")

        documents = assemble_documents(username, batches)
        batch_ids = await self.store.insert_many(documents)
        total_findings = sum(document.findings_count for document in documents)

        logger.info(
            "ingest_successful",
            username=username,
            multi_workspace=is_multi_workspace(body),
            batches_inserted=len(documents),
            total_findings=total_findings,
        )

        return IngestResponse(
            username=username,
            batches_inserted=len(documents),
            total_findings=total_findings,
            batch_ids=batch_ids,
        )
