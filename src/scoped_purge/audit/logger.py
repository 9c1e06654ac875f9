"""
Audit log writer for purge runs.

Appends one JSON line per purge to <audit_dir>/purge_YYYYMMDD.jsonl.
"""

import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

from scoped_purge.audit.models import PurgeAuditEvent
from scoped_purge.core.models import PurgeResult

logger = logging.getLogger(__name__)


class PurgeAuditLogger:
    """
    Thread-safe, synchronous audit log writer.

    A failed write is logged and swallowed: auditing never changes the
    outcome reported for a purge.
    """

    DEFAULT_AUDIT_DIR = Path("var/audit")
    LOG_PREFIX = "purge_"
    LOG_SUFFIX = ".jsonl"

    def __init__(self, audit_dir: Path | None = None):
        """
        Initialize the audit logger.

        Args:
            audit_dir: Directory for audit log files (default: var/audit/)
        """
        self._audit_dir = Path(audit_dir) if audit_dir else self.DEFAULT_AUDIT_DIR
        self._lock = threading.Lock()

    @property
    def audit_dir(self) -> Path:
        """Directory holding the audit files."""
        return self._audit_dir

    def _get_log_file(self, date: datetime | None = None) -> Path:
        """Get the log file path for a specific date."""
        if date is None:
            date = datetime.now(timezone.utc)
        filename = f"{self.LOG_PREFIX}{date.strftime('%Y%m%d')}{self.LOG_SUFFIX}"
        return self._audit_dir / filename

    def record(self, result: PurgeResult, actor: str = "system") -> PurgeAuditEvent | None:
        """Append an audit event for ``result``; returns None if the write failed."""
        event = PurgeAuditEvent.from_result(result, actor=actor)
        log_file = self._get_log_file()

        try:
            with self._lock:
                self._audit_dir.mkdir(parents=True, exist_ok=True)
                with open(log_file, "a", encoding="utf-8") as f:
                    f.write(event.to_log_line() + "\n")
                    f.flush()
                    os.fsync(f.fileno())
        except OSError as e:
            logger.error(
                f"Failed to write purge audit event to {log_file}: {e}",
                extra={"event": "audit_write_failed", "scope": result.scope},
            )
            return None

        return event

    def read(self, date: datetime | None = None) -> list[PurgeAuditEvent]:
        """Read all events recorded on ``date`` (default: today, UTC)."""
        log_file = self._get_log_file(date)
        if not log_file.exists():
            return []
        with open(log_file, encoding="utf-8") as f:
            return [PurgeAuditEvent.from_log_line(line) for line in f if line.strip()]
