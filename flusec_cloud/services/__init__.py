# =============================================================================
# Flusec Cloud - Services Package
# =============================================================================
"""Service layer: identity, normalization, storage and ingestion."""

from .assembler import assemble_documents
from .firestore import FindingsStore, get_findings_store
from .github import GitHubIdentityResolver, get_identity_resolver
from .ingestion import FindingsIngestor, extract_bearer_token
from .normalizer import normalize_payload

__all__ = [
    "FindingsIngestor",
    "FindingsStore",
    "GitHubIdentityResolver",
    "assemble_documents",
    "extract_bearer_token",
    "get_findings_store",
    "get_identity_resolver",
    "normalize_payload",
]
