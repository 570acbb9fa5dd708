# =============================================================================
# Flusec Cloud - Batch Assembler
# =============================================================================
"""Stamps normalized batches with the submitter identity and receipt time."""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..models import PersistedBatchDocument, WorkspaceBatch


def assemble_documents(
    username: str,
    batches: Sequence[WorkspaceBatch],
    received_at: Optional[datetime] = None,
) -> List[PersistedBatchDocument]:
    """
    Build one persistable document per batch, preserving order.

    All documents share ``username`` and a single ``received_at``
    captured once per call.
    """
    received_at = received_at or datetime.now(timezone.utc)
    return [
        PersistedBatchDocument(
            **batch.model_dump(),
            username=username,
            received_at=received_at,
        )
        for batch in batches
    ]
