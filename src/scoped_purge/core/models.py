"""
Core data models for Scoped Purge.

Entities, edges and scopes are immutable configuration; PurgeResult is
created fresh per request.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from scoped_purge.core.exceptions import ConfigurationError, PurgeError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class KeyColumnKind(str, Enum):
    """How an entity's key column is typed; selects the sentinel value."""

    IDENTIFIER = "identifier"
    NUMERIC = "numeric"
    COMPOSITE_STRING = "compositeString"


class PurgeStatus(str, Enum):
    """Outcome of one purge invocation."""

    COMPLETED = "completed"
    STORE_FAILED = "store_failed"
    CANCELLED = "cancelled"
    UNKNOWN_SCOPE = "unknown_scope"


def validate_identifier(value: str, *, config_key: str) -> str:
    """Reject names that cannot be used verbatim as a table or column name."""
    if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
        raise ConfigurationError(
            f"Invalid identifier: {value!r}",
            config_key=config_key,
        )
    return value


@dataclass(frozen=True)
class Entity:
    """One purgeable collection in the relational store."""

    name: str
    key_column: str
    key_kind: KeyColumnKind = KeyColumnKind.IDENTIFIER
    protected: bool = False

    def __post_init__(self) -> None:
        validate_identifier(self.name, config_key="entities.name")
        validate_identifier(self.key_column, config_key=f"entities.{self.name}.key_column")
        if not isinstance(self.key_kind, KeyColumnKind):
            # Accept the raw string form used in config files
            try:
                object.__setattr__(self, "key_kind", KeyColumnKind(self.key_kind))
            except ValueError:
                raise ConfigurationError(
                    f"Unknown key kind for entity '{self.name}': {self.key_kind!r}",
                    config_key=f"entities.{self.name}.key_kind",
                ) from None


@dataclass(frozen=True)
class DependencyEdge:
    """child must be deleted strictly before parent when both are in a batch."""

    child: str
    parent: str


@dataclass(frozen=True)
class Scope:
    """A named, bounded subset of entities targeted by one purge request."""

    name: str
    entity_names: tuple[str, ...]
    description: str = ""


@dataclass
class PurgeResult:
    """Result of executing one purge."""

    scope: str
    status: PurgeStatus
    entities_purged: tuple[str, ...] = ()
    planned: tuple[str, ...] = ()
    failed_entity: str | None = None
    error: PurgeError | None = None
    rows_deleted: dict[str, int] = field(default_factory=dict)
    started_at: str = field(default_factory=lambda: utc_timestamp())
    finished_at: str | None = None
    duration_ms: float | None = None

    def is_success(self) -> bool:
        """Return True if every planned entity was purged."""
        return self.status == PurgeStatus.COMPLETED and self.error is None

    @property
    def entities_remaining(self) -> tuple[str, ...]:
        """Planned entities that were not purged, in planned order."""
        done = set(self.entities_purged)
        return tuple(name for name in self.planned if name not in done)

    @property
    def error_message(self) -> str | None:
        """The underlying error message, verbatim."""
        return self.error.message if self.error else None


def utc_timestamp() -> str:
    """Return current ISO8601 timestamp in UTC."""
    from datetime import datetime, timezone

    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
