"""Tests for the purge audit trail."""

from pathlib import Path

from scoped_purge.audit.logger import PurgeAuditLogger
from scoped_purge.audit.models import PurgeAuditEvent
from scoped_purge.core.exceptions import StoreDeleteError
from scoped_purge.core.models import PurgeResult, PurgeStatus
from scoped_purge.engine.executor import PurgeEngine
from scoped_purge.registry.graph import EntityGraph
from scoped_purge.stores.memory import InMemoryStore


def _failed_result() -> PurgeResult:
    return PurgeResult(
        scope="finance",
        status=PurgeStatus.STORE_FAILED,
        entities_purged=("income",),
        planned=("income", "expense", "budget"),
        failed_entity="expense",
        error=StoreDeleteError("permission denied for table expense", entity_name="expense"),
        rows_deleted={"income": 2},
        duration_ms=15.5,
    )


class TestPurgeAuditEvent:
    """Tests for PurgeAuditEvent."""

    def test_from_result(self) -> None:
        """Events capture where a purge stopped and why."""
        event = PurgeAuditEvent.from_result(_failed_result(), actor="alice")
        assert event.actor == "alice"
        assert event.status == "store_failed"
        assert event.purged == ["income"]
        assert event.failed_entity == "expense"
        assert event.error_type == "StoreDeleteError"
        assert event.error_message == "permission denied for table expense"
        assert event.event_id.startswith("purge_")

    def test_log_line_round_trip_keeps_checksum_valid(self) -> None:
        """A parsed line carries a checksum matching its contents."""
        event = PurgeAuditEvent.from_result(_failed_result())
        parsed = PurgeAuditEvent.from_log_line(event.to_log_line())
        assert parsed.checksum is not None
        assert parsed.checksum == parsed.compute_checksum()
        assert parsed.checksum == event.compute_checksum()

    def test_tampering_breaks_checksum(self) -> None:
        """Editing a recorded field invalidates the checksum."""
        line = PurgeAuditEvent.from_result(_failed_result()).to_log_line()
        tampered = PurgeAuditEvent.from_log_line(line.replace('"finance"', '"visits"'))
        assert tampered.scope == "visits"
        assert tampered.checksum != tampered.compute_checksum()


class TestPurgeAuditLogger:
    """Tests for PurgeAuditLogger."""

    def test_record_and_read(self, temp_dir: Path) -> None:
        """Recorded events are appended and can be read back."""
        audit = PurgeAuditLogger(temp_dir / "audit")
        audit.record(_failed_result(), actor="alice")
        audit.record(_failed_result(), actor="bob")

        events = audit.read()
        assert [e.actor for e in events] == ["alice", "bob"]
        files = list((temp_dir / "audit").glob("purge_*.jsonl"))
        assert len(files) == 1

    def test_read_missing_day(self, temp_dir: Path) -> None:
        """Reading a day with no file returns no events."""
        assert PurgeAuditLogger(temp_dir).read() == []

    def test_write_failure_is_not_raised(self, temp_dir: Path) -> None:
        """An unwritable audit directory is logged, not raised."""
        blocker = temp_dir / "not_a_dir"
        blocker.write_text("")
        audit = PurgeAuditLogger(blocker)
        assert audit.record(_failed_result()) is None

    def test_engine_writes_audit(self, temp_dir: Path, graph: EntityGraph) -> None:
        """Every engine purge leaves one audit line."""
        audit = PurgeAuditLogger(temp_dir)
        engine = PurgeEngine(graph, InMemoryStore(), audit_logger=audit)

        engine.purge("visits", actor="carol")
        engine.purge("unknown", actor="carol")

        events = audit.read()
        assert [e.status for e in events] == ["completed", "unknown_scope"]
        assert events[0].purged == ["visits"]
