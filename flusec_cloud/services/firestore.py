# =============================================================================
# Flusec Cloud - Firestore Findings Store
# =============================================================================
"""
Append-only Firestore storage for findings batches.

Each submission is written as one batched commit: every document is
created under an auto-generated id in the findings collection, and the
ids are returned in submission order.

    {findings_collection}/{auto_id}
"""

import asyncio
from functools import lru_cache
from typing import List, Optional, Sequence

import structlog
from google.cloud import firestore

from ..config import get_settings
from ..errors import PersistenceError
from ..models import PersistedBatchDocument


# Configure structured logger
logger = structlog.get_logger(__name__)


class FindingsStore:
    """
    Firestore-backed store for persisted batch documents.

    Documents are only ever created, never updated or deleted.

    Attributes:
        project_id: GCP project identifier
        database: Firestore database name
        collection_name: Collection receiving batch documents
        timeout: Seconds allowed for one batched commit
        _client: Lazily created async Firestore client
    """

    def __init__(
        self,
        project_id: str,
        database: str,
        collection_name: str,
        timeout: float,
    ) -> None:
        self.project_id = project_id
        self.database = database
        self.collection_name = collection_name
        self.timeout = timeout
        self._client: Optional[firestore.AsyncClient] = None

        logger.info(
            "findings_store_initialized",
            project_id=project_id,
            database=database,
            collection=collection_name,
        )

    def _get_client(self) -> firestore.AsyncClient:
        """
        Lazily initialize the Firestore client.

        Returns:
            firestore.AsyncClient: Initialized Firestore client
        """
        if self._client is None:
            self._client = firestore.AsyncClient(
                project=self.project_id,
                database=self.database,
            )
        return self._client

    async def insert_many(self, documents: Sequence[PersistedBatchDocument]) -> List[str]:
        """
        Create all documents in one batched commit.

        Args:
            documents: Documents to store, in submission order

        Returns:
            List[str]: Generated document ids, in the same order

        Raises:
            PersistenceError: If the commit fails or exceeds the timeout
        """
        if not documents:
            return []

        client = self._get_client()
        collection = client.collection(self.collection_name)
        batch = client.batch()

        doc_refs = []
        try:
            for document in documents:
                doc_ref = collection.document()
                batch.create(doc_ref, document.to_firestore_dict())
                doc_refs.append(doc_ref)

            await asyncio.wait_for(batch.commit(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(
                "findings_batch_timeout",
                collection=self.collection_name,
                documents=len(documents),
                timeout_seconds=self.timeout,
            )
            raise PersistenceError(
                f"Storage write timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            logger.error(
                "findings_batch_failed",
                collection=self.collection_name,
                documents=len(documents),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(f"Failed to store findings: {e}") from e

        batch_ids = [doc_ref.id for doc_ref in doc_refs]

        logger.info(
            "findings_batch_written",
            collection=self.collection_name,
            documents=len(batch_ids),
        )

        return batch_ids

    def release(self) -> None:
        """
        Forget the Firestore client so the next use opens a fresh one.

        The async client has no close method; its channel is reclaimed
        when the last reference goes away.
        """
        if self._client is not None:
            self._client = None
            logger.info("findings_store_released", collection=self.collection_name)


@lru_cache
def get_findings_store() -> FindingsStore:
    """
    Get cached findings store instance.

    Uses LRU cache to share a single Firestore client across
    all requests.

    Returns:
        FindingsStore: Configured findings store
    """
    settings = get_settings()
    return FindingsStore(
        project_id=settings.gcp_project_id,
        database=settings.firestore_database,
        collection_name=settings.findings_collection,
        timeout=settings.storage_timeout_seconds,
    )
