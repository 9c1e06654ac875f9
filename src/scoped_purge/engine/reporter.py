"""
Result Reporter - turns a PurgeResult into caller-facing output.

Previously purged entities stay purged; nothing here implies a rollback.
"""

import json
from pathlib import Path
from typing import Any

from scoped_purge.core.models import PurgeResult


class ResultReporter:
    """Formats purge results for API responses, terminals and files."""

    @staticmethod
    def to_response(result: PurgeResult) -> dict[str, Any]:
        """
        Build the response body.

        Shape: ``{ok, scope, purged, failedEntity?, error?}``; the optional
        keys are present only on failure.
        """
        response: dict[str, Any] = {
            "ok": result.is_success(),
            "scope": result.scope,
            "purged": list(result.entities_purged),
        }
        if not result.is_success():
            if result.failed_entity is not None:
                response["failedEntity"] = result.failed_entity
            if result.error is not None:
                response["error"] = result.error.message
        return response

    @staticmethod
    def to_record(result: PurgeResult) -> dict[str, Any]:
        """Full serialisable record including timings and row counts."""
        return {
            "scope": result.scope,
            "status": result.status.value,
            "planned": list(result.planned),
            "purged": list(result.entities_purged),
            "remaining": list(result.entities_remaining),
            "failed_entity": result.failed_entity,
            "error": result.error.to_dict() if result.error else None,
            "rows_deleted": dict(result.rows_deleted),
            "started_at": result.started_at,
            "finished_at": result.finished_at,
            "duration_ms": result.duration_ms,
        }

    @staticmethod
    def summary(result: PurgeResult) -> str:
        """Generate a human-readable summary of a purge."""
        lines = [
            f"Scope: {result.scope}",
            f"Status: {result.status.value}",
            f"Entities: {len(result.entities_purged)}/{len(result.planned)}",
        ]

        for i, name in enumerate(result.planned):
            if name in result.entities_purged:
                rows = result.rows_deleted.get(name)
                suffix = f" ({rows} rows)" if rows is not None else ""
                lines.append(f"  [{i+1}] ✓ {name}{suffix}")
            elif name == result.failed_entity:
                lines.append(f"  [{i+1}] ✗ {name}")
            else:
                lines.append(f"  [{i+1}] - {name} (not attempted)")

        if result.error is not None:
            lines.append(f"Error: {result.error.message}")
            if result.entities_purged:
                lines.append(
                    "Already purged (not rolled back): " + ", ".join(result.entities_purged)
                )
        if result.duration_ms is not None:
            lines.append(f"Time: {result.duration_ms:.0f}ms")

        return "\n".join(lines)

    @classmethod
    def persist(cls, result: PurgeResult, output_dir: Path) -> Path:
        """Persist a purge result as JSON and return the file path."""
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp_safe = result.started_at.replace(":", "-").replace("Z", "")
        scope_safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in result.scope)

        stem = f"purge_{scope_safe}_{timestamp_safe}"
        output_path = output_dir / f"{stem}.json"
        # started_at has second resolution; never overwrite an earlier record
        n = 1
        while output_path.exists():
            n += 1
            output_path = output_dir / f"{stem}_{n}.json"
        output_path.write_text(json.dumps(cls.to_record(result), indent=2))
        return output_path
