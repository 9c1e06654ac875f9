"""Tests for configuration loading and engine wiring."""

from pathlib import Path

import pytest

from scoped_purge.config import (
    EngineConfig,
    StoreKind,
    create_engine,
    create_store,
    load_config,
)
from scoped_purge.core.exceptions import ConfigurationError
from scoped_purge.stores import InMemoryStore, PostgRESTStore, SQLiteStore


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, purge_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without variables the built-in catalog and memory store are used."""
        monkeypatch.delenv("PURGE_AUDIT_DIR")
        config = load_config()
        assert config.catalog_path is None
        assert config.store == StoreKind.MEMORY
        assert config.timeout_seconds is None
        assert config.http_timeout_seconds == 30.0
        assert config.audit_dir == Path("var/audit")
        assert config.log_level == "INFO"

    def test_from_environment(self, purge_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Every variable is honoured."""
        monkeypatch.setenv("PURGE_STORE", "SQLite")
        monkeypatch.setenv("PURGE_SQLITE_PATH", "/tmp/x.db")
        monkeypatch.setenv("PURGE_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("PURGE_HTTP_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("PURGE_CATALOG_PATH", "catalog.yaml")
        monkeypatch.setenv("PURGE_LOG_LEVEL", "debug")

        config = load_config()

        assert config.store == StoreKind.SQLITE
        assert config.sqlite_path == Path("/tmp/x.db")
        assert config.timeout_seconds == 2.5
        assert config.http_timeout_seconds == 5.0
        assert config.catalog_path == Path("catalog.yaml")
        assert config.audit_dir == purge_env
        assert config.log_level == "DEBUG"

    def test_empty_audit_dir_disables_audit(
        self, purge_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An empty PURGE_AUDIT_DIR turns auditing off."""
        monkeypatch.setenv("PURGE_AUDIT_DIR", "")
        assert load_config().audit_dir is None

    def test_unknown_store(self, purge_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Unknown store kinds name the variable."""
        monkeypatch.setenv("PURGE_STORE", "mongo")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert exc_info.value.env_var == "PURGE_STORE"

    @pytest.mark.parametrize("value", ["soon", "0", "-3"])
    def test_invalid_timeout(
        self, value: str, purge_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Timeouts must be positive numbers."""
        monkeypatch.setenv("PURGE_TIMEOUT_SECONDS", value)
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert exc_info.value.env_var == "PURGE_TIMEOUT_SECONDS"

    def test_invalid_log_level(self, purge_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Log levels are validated."""
        monkeypatch.setenv("PURGE_LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigurationError):
            load_config()


class TestCreateStore:
    """Tests for create_store."""

    def test_memory(self) -> None:
        """The default store is in-memory."""
        assert isinstance(create_store(EngineConfig()), InMemoryStore)

    def test_sqlite(self, temp_dir: Path) -> None:
        """SQLite stores open the configured file."""
        store = create_store(EngineConfig(store=StoreKind.SQLITE, sqlite_path=temp_dir / "p.db"))
        assert isinstance(store, SQLiteStore)
        store.close()
        assert (temp_dir / "p.db").exists()

    def test_postgrest_requires_url(self) -> None:
        """PostgREST without a URL fails at startup."""
        with pytest.raises(ConfigurationError) as exc_info:
            create_store(EngineConfig(store=StoreKind.POSTGREST, store_key="k"))
        assert exc_info.value.env_var == "PURGE_STORE_URL"

    def test_postgrest(self) -> None:
        """PostgREST stores are built from URL and key."""
        store = create_store(
            EngineConfig(store=StoreKind.POSTGREST, store_url="https://x.supabase.co", store_key="k")
        )
        assert isinstance(store, PostgRESTStore)
        store.close()


class TestCreateEngine:
    """Tests for create_engine."""

    def test_builtin_catalog(self) -> None:
        """Without a catalog path the built-in graph is used."""
        engine = create_engine(EngineConfig(audit_dir=None))
        assert "all" in engine.resolver.names()
        assert isinstance(engine.store, InMemoryStore)

    def test_catalog_file(self, temp_dir: Path) -> None:
        """A catalog file replaces the built-in graph."""
        path = temp_dir / "catalog.yaml"
        path.write_text("entities:\n  - name: plans\nscopes:\n  planner: [plans]\n")
        engine = create_engine(EngineConfig(catalog_path=path, audit_dir=None))
        assert engine.resolver.names() == ["planner"]

    def test_bad_catalog_fails_at_startup(self, temp_dir: Path) -> None:
        """Catalog problems surface when the engine is built."""
        with pytest.raises(ConfigurationError):
            create_engine(EngineConfig(catalog_path=temp_dir / "missing.yaml"))

    def test_injected_store_and_audit(self, temp_dir: Path) -> None:
        """A given store is used and purges are audited to the configured directory."""
        store = InMemoryStore({"plans": [{"id": "p1"}]})
        engine = create_engine(EngineConfig(audit_dir=temp_dir / "audit"), store=store)

        result = engine.purge("planner")

        assert result.is_success()
        assert engine.store is store
        assert list((temp_dir / "audit").glob("purge_*.jsonl"))
