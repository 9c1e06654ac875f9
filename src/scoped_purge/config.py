"""
Engine configuration and startup wiring.

Environment variables:
- PURGE_CATALOG_PATH: YAML catalog file (default: built-in catalog)
- PURGE_STORE: memory | sqlite | postgrest (default: memory)
- PURGE_SQLITE_PATH: SQLite database file (default: var/purge.db)
- PURGE_STORE_URL / PURGE_STORE_KEY: PostgREST project URL and service key
- PURGE_TIMEOUT_SECONDS: request deadline checked between entities
- PURGE_HTTP_TIMEOUT_SECONDS: per-call HTTP timeout (default: 30)
- PURGE_AUDIT_DIR: audit log directory, empty to disable (default: var/audit)
- PURGE_LOG_LEVEL: log level for CLI and API (default: INFO)
"""

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from scoped_purge.audit.logger import PurgeAuditLogger
from scoped_purge.core.exceptions import ConfigurationError
from scoped_purge.engine.executor import PurgeEngine
from scoped_purge.registry.catalog import builtin_graph
from scoped_purge.registry.graph import EntityGraph
from scoped_purge.registry.loader import load_catalog_from_yaml
from scoped_purge.stores.base import PurgeStore
from scoped_purge.stores.memory import InMemoryStore
from scoped_purge.stores.postgrest import PostgRESTStore
from scoped_purge.stores.sqlite import SQLiteStore

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class StoreKind(str, Enum):
    """Available store adapters."""

    MEMORY = "memory"
    SQLITE = "sqlite"
    POSTGREST = "postgrest"


class EngineConfig(BaseModel):
    """Configuration for the purge engine."""

    catalog_path: Path | None = None
    store: StoreKind = StoreKind.MEMORY
    sqlite_path: Path = Path("var/purge.db")
    store_url: str | None = None
    store_key: str | None = None
    timeout_seconds: float | None = None
    http_timeout_seconds: float = 30.0
    audit_dir: Path | None = Path("var/audit")
    log_level: str = "INFO"


def _positive_float(env_var: str) -> float | None:
    raw = os.getenv(env_var)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(
            f"{env_var} must be a number, got {raw!r}",
            env_var=env_var,
        ) from None
    if value <= 0:
        raise ConfigurationError(f"{env_var} must be positive, got {raw!r}", env_var=env_var)
    return value


def load_config() -> EngineConfig:
    """
    Load configuration from environment.

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    store_str = os.getenv("PURGE_STORE", StoreKind.MEMORY.value).strip().lower()
    try:
        store = StoreKind(store_str)
    except ValueError:
        raise ConfigurationError(
            f"Unknown store {store_str!r}; expected one of: "
            f"{', '.join(k.value for k in StoreKind)}",
            env_var="PURGE_STORE",
        ) from None

    log_level = os.getenv("PURGE_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigurationError(f"Invalid log level {log_level!r}", env_var="PURGE_LOG_LEVEL")

    catalog = os.getenv("PURGE_CATALOG_PATH")
    audit_dir = os.getenv("PURGE_AUDIT_DIR", "var/audit")

    return EngineConfig(
        catalog_path=Path(catalog) if catalog else None,
        store=store,
        sqlite_path=Path(os.getenv("PURGE_SQLITE_PATH", "var/purge.db")),
        store_url=os.getenv("PURGE_STORE_URL") or None,
        store_key=os.getenv("PURGE_STORE_KEY") or None,
        timeout_seconds=_positive_float("PURGE_TIMEOUT_SECONDS"),
        http_timeout_seconds=_positive_float("PURGE_HTTP_TIMEOUT_SECONDS") or 30.0,
        audit_dir=Path(audit_dir) if audit_dir else None,
        log_level=log_level,
    )


def load_graph(config: EngineConfig) -> EntityGraph:
    """Build the entity graph named by the configuration."""
    if config.catalog_path is not None:
        return load_catalog_from_yaml(config.catalog_path)
    return builtin_graph()


def create_store(config: EngineConfig) -> PurgeStore:
    """Instantiate the configured store adapter."""
    match config.store:
        case StoreKind.SQLITE:
            return SQLiteStore(config.sqlite_path)
        case StoreKind.POSTGREST:
            return PostgRESTStore(
                base_url=config.store_url or "",
                api_key=config.store_key or "",
                timeout_seconds=config.http_timeout_seconds,
            )
        case _:
            return InMemoryStore()


def create_engine(
    config: EngineConfig | None = None,
    store: PurgeStore | None = None,
) -> PurgeEngine:
    """
    Build a PurgeEngine from configuration.

    Configuration errors (bad catalog, cycles, protected entities in scopes)
    surface here, at startup.
    """
    config = config or load_config()
    graph = load_graph(config)
    audit_logger = PurgeAuditLogger(config.audit_dir) if config.audit_dir else None
    return PurgeEngine(
        graph=graph,
        store=store if store is not None else create_store(config),
        timeout_seconds=config.timeout_seconds,
        audit_logger=audit_logger,
    )
