"""
Audit data models for purge runs.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from scoped_purge.core.models import PurgeResult, utc_timestamp


def _event_id() -> str:
    return f"purge_{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S%f')}"


class PurgeAuditEvent(BaseModel):
    """
    One audit record per purge request.

    Immutable record of what was deleted, by whom, and where it stopped.
    """

    event_id: str = Field(default_factory=_event_id)
    timestamp: str = Field(default_factory=utc_timestamp)
    actor: str = Field(default="system", description="Who requested the purge")
    scope: str = Field(description="Requested scope name")
    status: str = Field(description="PurgeStatus value")
    planned: list[str] = Field(default_factory=list)
    purged: list[str] = Field(default_factory=list)
    failed_entity: str | None = None
    error_type: str | None = None
    error_message: str | None = None
    rows_deleted: dict[str, int] = Field(default_factory=dict)
    duration_ms: float | None = None
    checksum: str | None = Field(default=None, description="SHA256 of the event body")

    model_config = {"frozen": True}

    @classmethod
    def from_result(cls, result: PurgeResult, actor: str = "system") -> "PurgeAuditEvent":
        """Build an audit event from a purge result."""
        return cls(
            actor=actor,
            scope=result.scope,
            status=result.status.value,
            planned=list(result.planned),
            purged=list(result.entities_purged),
            failed_entity=result.failed_entity,
            error_type=type(result.error).__name__ if result.error else None,
            error_message=result.error.message if result.error else None,
            rows_deleted=dict(result.rows_deleted),
            duration_ms=result.duration_ms,
        )

    def compute_checksum(self) -> str:
        """Compute SHA256 checksum of event data for integrity verification."""
        data = self.model_dump(exclude={"checksum"})
        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()

    def to_log_line(self) -> str:
        """Convert to JSONL string for file storage."""
        event = self.model_copy(update={"checksum": self.compute_checksum()})
        return event.model_dump_json(exclude_none=True)

    @classmethod
    def from_log_line(cls, line: str) -> "PurgeAuditEvent":
        """Parse one JSONL line."""
        data: dict[str, Any] = json.loads(line)
        return cls.model_validate(data)
