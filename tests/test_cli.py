"""Tests for CLI module."""

import json
import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from scoped_purge.cli import app

runner = CliRunner()


@pytest.fixture
def sqlite_env(purge_env: Path, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at a seeded SQLite database and a two-entity catalog."""
    db_path = temp_dir / "purge.db"
    conn = sqlite3.connect(db_path)
    conn.executescript(
        """
        CREATE TABLE plans (id TEXT PRIMARY KEY);
        CREATE TABLE sermons (id TEXT PRIMARY KEY);
        INSERT INTO plans VALUES ('p1'), ('p2');
        """
    )
    conn.commit()
    conn.close()

    catalog = temp_dir / "catalog.yaml"
    catalog.write_text(
        "entities:\n"
        "  - name: plans\n"
        "  - name: sermons\n"
        "  - name: archive\n"
        "scopes:\n"
        "  planner: [plans]\n"
        "  archive: [archive]\n"
    )
    monkeypatch.setenv("PURGE_STORE", "sqlite")
    monkeypatch.setenv("PURGE_SQLITE_PATH", str(db_path))
    monkeypatch.setenv("PURGE_CATALOG_PATH", str(catalog))
    return db_path


class TestEntitiesCommand:
    """Tests for the entities command."""

    def test_entities_list(self, purge_env: Path) -> None:
        """List the built-in entities."""
        result = runner.invoke(app, ["entities"])
        assert result.exit_code == 0
        assert "Registered Entities (11)" in result.stdout
        assert "attendance" in result.stdout

    def test_entities_with_catalog_option(self, purge_env: Path, temp_dir: Path) -> None:
        """--catalog overrides the built-in catalog."""
        catalog = temp_dir / "c.yaml"
        catalog.write_text("entities:\n  - name: plans\n")
        result = runner.invoke(app, ["entities", "--catalog", str(catalog)])
        assert result.exit_code == 0
        assert "Registered Entities (1)" in result.stdout

    def test_configuration_error(self, purge_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Invalid configuration exits with an error message."""
        monkeypatch.setenv("PURGE_STORE", "mongo")
        result = runner.invoke(app, ["entities"])
        assert result.exit_code == 1
        assert "Configuration error" in result.stdout


class TestScopesCommand:
    """Tests for the scopes command."""

    def test_scopes_list(self, purge_env: Path) -> None:
        """List scopes with their order."""
        result = runner.invoke(app, ["scopes"])
        assert result.exit_code == 0
        assert "Purge Scopes" in result.stdout
        assert "pastoral" in result.stdout
        assert "finance" in result.stdout


class TestPlanCommand:
    """Tests for the plan command."""

    def test_plan_shows_predicates(self, purge_env: Path) -> None:
        """Plans show order and predicate."""
        result = runner.invoke(app, ["plan", "attendance"])
        assert result.exit_code == 0
        assert "week_num != -1" in result.stdout

    def test_plan_unknown_scope(self, purge_env: Path) -> None:
        """Unknown scopes exit with an error."""
        result = runner.invoke(app, ["plan", "nope"])
        assert result.exit_code == 1
        assert "Unknown scope 'nope'" in result.stdout


class TestPurgeCommand:
    """Tests for the purge command."""

    def test_purge_with_yes(self, sqlite_env: Path) -> None:
        """Purging a scope deletes rows and reports them."""
        result = runner.invoke(app, ["purge", "planner", "--yes"])

        assert result.exit_code == 0
        assert "Status: completed" in result.stdout
        assert "plans (2 rows)" in result.stdout
        conn = sqlite3.connect(sqlite_env)
        assert conn.execute("SELECT COUNT(*) FROM plans").fetchone()[0] == 0
        conn.close()

    def test_purge_store_failure(self, sqlite_env: Path) -> None:
        """A store error exits 1 and shows the store's message."""
        result = runner.invoke(app, ["purge", "archive", "--yes"])
        assert result.exit_code == 1
        assert "Status: store_failed" in result.stdout
        assert "no such table: archive" in result.stdout

    def test_purge_unknown_scope(self, purge_env: Path) -> None:
        """Unknown scopes exit 1 without prompting."""
        result = runner.invoke(app, ["purge", "nope"])
        assert result.exit_code == 1
        assert "Status: unknown_scope" in result.stdout

    def test_purge_declined(self, sqlite_env: Path) -> None:
        """Declining the prompt leaves the data alone."""
        result = runner.invoke(app, ["purge", "planner"], input="n\n")

        assert result.exit_code == 1
        assert "Aborted" in result.stdout
        conn = sqlite3.connect(sqlite_env)
        assert conn.execute("SELECT COUNT(*) FROM plans").fetchone()[0] == 2
        conn.close()

    def test_purge_confirmed(self, sqlite_env: Path) -> None:
        """Answering yes runs the purge."""
        result = runner.invoke(app, ["purge", "planner"], input="y\n")
        assert result.exit_code == 0
        assert "Status: completed" in result.stdout

    def test_purge_output_and_audit(self, sqlite_env: Path, purge_env: Path, temp_dir: Path) -> None:
        """--output saves the result; the audit trail records the actor."""
        out_dir = temp_dir / "results"
        result = runner.invoke(
            app, ["purge", "planner", "--yes", "--output", str(out_dir), "--actor", "dana"]
        )

        assert result.exit_code == 0
        files = list(out_dir.glob("purge_planner_*.json"))
        assert len(files) == 1
        assert json.loads(files[0].read_text())["purged"] == ["plans"]

        audit_lines = next(purge_env.glob("purge_*.jsonl")).read_text().splitlines()
        assert json.loads(audit_lines[-1])["actor"] == "dana"


class TestServeCommand:
    """Tests for the serve command."""

    def test_serve_closes_store_on_exit(self, sqlite_env: Path) -> None:
        """The store opened for serving is closed once uvicorn returns."""
        with patch("uvicorn.run") as run, patch(
            "scoped_purge.stores.sqlite.SQLiteStore.close"
        ) as close:
            result = runner.invoke(app, ["serve", "--port", "8123"])

        assert result.exit_code == 0
        assert run.call_args.kwargs["port"] == 8123
        close.assert_called_once()


class TestVersionCommand:
    """Tests for the version command."""

    def test_version(self) -> None:
        """Show version information."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Scoped Purge" in result.stdout
        assert "0.1" in result.stdout
