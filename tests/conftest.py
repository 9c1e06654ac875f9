"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from scoped_purge.core.models import Entity, KeyColumnKind
from scoped_purge.registry.catalog import builtin_graph
from scoped_purge.registry.graph import EntityGraph, RegistryBuilder
from scoped_purge.stores.memory import InMemoryStore

FINANCE_ENTITIES = ["donations", "income", "expense", "budget", "payroll"]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def purge_env(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Clear PURGE_* variables and point the audit trail at a temp directory."""
    for var in (
        "PURGE_CATALOG_PATH",
        "PURGE_STORE",
        "PURGE_SQLITE_PATH",
        "PURGE_STORE_URL",
        "PURGE_STORE_KEY",
        "PURGE_TIMEOUT_SECONDS",
        "PURGE_HTTP_TIMEOUT_SECONDS",
        "PURGE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    audit_dir = temp_dir / "audit"
    monkeypatch.setenv("PURGE_AUDIT_DIR", str(audit_dir))
    return audit_dir


@pytest.fixture
def graph() -> EntityGraph:
    """The built-in entity graph."""
    return builtin_graph()


@pytest.fixture
def members_graph() -> EntityGraph:
    """members (parent) and visits (child) in one scope."""
    builder = RegistryBuilder()
    builder.register(Entity("members", "id"))
    builder.register(Entity("visits", "id"), depends_on=["members"])
    builder.add_scope("members", ["members", "visits"])
    return builder.build()


@pytest.fixture
def finance_graph() -> EntityGraph:
    """Five independent ledger entities in one scope, resolved in listed order."""
    builder = RegistryBuilder()
    for name in FINANCE_ENTITIES:
        builder.register(Entity(name, "id"))
    builder.add_scope("finance", FINANCE_ENTITIES)
    return builder.build()


@pytest.fixture
def attendance_graph() -> EntityGraph:
    """Attendance keyed by a numeric week number."""
    builder = RegistryBuilder()
    builder.register(Entity("attendance", "weekNumber", KeyColumnKind.NUMERIC))
    builder.add_scope("attendance", ["attendance"])
    return builder.build()


@pytest.fixture
def seeded_store() -> InMemoryStore:
    """In-memory store with a few rows in every built-in entity."""
    store = InMemoryStore()
    store.insert("settings", {"id": "s1", "church_name": "Grace"})
    store.insert("members", {"id": "m1"}, {"id": "m2"})
    store.insert("attendance", *({"week_num": w, "member_id": "m1"} for w in range(1, 5)))
    store.insert("notes", {"member_id": "m1", "body": "call back"})
    store.insert("visits", {"id": "v1", "member_id": "m2"})
    store.insert("income", {"id": "i1", "member_id": "m1"})
    store.insert("expense", {"id": "e1"})
    store.insert("budget", {"fiscal_year": "2024"}, {"fiscal_year": "2025"})
    store.insert("checklist", {"week_key": "2024-W07"})
    store.insert("plans", {"id": "p1"})
    store.insert("sermons", {"id": "x1"})
    return store
