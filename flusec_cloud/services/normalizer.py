# =============================================================================
# Flusec Cloud - Payload Normalizer
# =============================================================================
"""
Turns a parsed request body into canonical workspace batches.

Two request shapes are accepted:

    Multi-workspace:
        {"extensionVersion": "...", "generatedAt": "...",
         "workspaces": [{"workspaceName": "...", "findings": [...]}, ...]}

    Flat (legacy, one workspace):
        {"workspaceName": "...", "extensionVersion": "...", "findings": [...]}

Normalization never fails: malformed fields degrade to defaults.
"""

import math
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from ..models import WorkspaceBatch


# Firestore stores integers as signed 64-bit values.
MAX_FINDINGS_COUNT = 2**63 - 1


def current_timestamp(now: Optional[datetime] = None) -> str:
    """Render a UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_text(value: Any, fallback: str = "") -> str:
    # Empty strings fall through to the fallback, like a missing field.
    if isinstance(value, str) and value:
        return value
    return fallback


def _as_findings(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _as_count(value: Any, findings: List[Any]) -> int:
    """Use the caller's count when it is a usable number, else count findings."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return len(findings)
    if isinstance(value, float) and not math.isfinite(value):
        return len(findings)
    if value < 0 or value > MAX_FINDINGS_COUNT:
        return len(findings)
    return int(value)


def _extract_batch(
    fields: Mapping[str, Any],
    extension_version: str,
    generated_at: str,
) -> WorkspaceBatch:
    findings = _as_findings(fields.get("findings"))
    return WorkspaceBatch(
        workspace_id=_as_text(fields.get("workspaceId")),
        workspace_name=_as_text(fields.get("workspaceName")),
        extension_version=_as_text(fields.get("extensionVersion"), extension_version),
        generated_at=_as_text(fields.get("generatedAt"), generated_at),
        findings=findings,
        findings_count=_as_count(fields.get("findingsCount"), findings),
        findings_file=_as_text(fields.get("findingsFile")),
    )


def is_multi_workspace(body: Any) -> bool:
    """True when the body carries a ``workspaces`` list (of any length)."""
    return isinstance(body, Mapping) and isinstance(body.get("workspaces"), list)


def normalize_payload(body: Any, now: Optional[datetime] = None) -> List[WorkspaceBatch]:
    """
    Normalize a request body into an ordered list of workspace batches.

    The fallback clock is read once, so every batch of one request shares
    the same default ``generatedAt``.

    Args:
        body: Parsed JSON body (any JSON value)
        now: Time used for a missing ``generatedAt`` (defaults to now)

    Returns:
        List[WorkspaceBatch]: One batch per workspace entry, or exactly one
        batch for a flat body. Empty only for ``{"workspaces": []}``.
    """
    fallback_generated_at = current_timestamp(now)

    if is_multi_workspace(body):
        request_version = _as_text(body.get("extensionVersion"))
        request_generated_at = _as_text(body.get("generatedAt"), fallback_generated_at)
        return [
            _extract_batch(_as_mapping(entry), request_version, request_generated_at)
            for entry in body["workspaces"]
        ]

    return [_extract_batch(_as_mapping(body), "", fallback_generated_at)]
