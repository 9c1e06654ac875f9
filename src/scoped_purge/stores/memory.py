"""
In-memory store used for dry runs and tests.
"""

import threading
from dataclasses import dataclass
from typing import Any

from scoped_purge.engine.predicates import DeletePredicate
from scoped_purge.stores.base import StoreError


@dataclass(frozen=True)
class ForeignKey:
    """``child.column`` references ``parent.parent_column``."""

    child: str
    column: str
    parent: str
    parent_column: str = "id"


@dataclass
class DeleteCall:
    """One recorded delete() invocation."""

    entity_name: str
    predicate: DeletePredicate
    rows_deleted: int | None = None
    error: str | None = None


class InMemoryStore:
    """
    Dict-backed store evaluating predicates row by row.

    Failures can be injected per entity with fail_on(); foreign keys given
    at construction are enforced like a RESTRICT constraint.
    """

    kind = "memory"

    def __init__(
        self,
        tables: dict[str, list[dict[str, Any]]] | None = None,
        foreign_keys: list[ForeignKey] | None = None,
    ):
        self._tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self._foreign_keys = list(foreign_keys or [])
        self._failures: dict[str, str] = {}
        self._lock = threading.Lock()
        self.calls: list[DeleteCall] = []

    def insert(self, entity_name: str, *rows: dict[str, Any]) -> None:
        """Append rows to an entity, creating it if needed."""
        with self._lock:
            self._tables.setdefault(entity_name, []).extend(dict(r) for r in rows)

    def rows(self, entity_name: str) -> list[dict[str, Any]]:
        """Return a copy of an entity's rows."""
        with self._lock:
            return [dict(r) for r in self._tables.get(entity_name, [])]

    def count(self, entity_name: str) -> int:
        """Number of rows currently held for an entity."""
        with self._lock:
            return len(self._tables.get(entity_name, []))

    def fail_on(self, entity_name: str, message: str) -> None:
        """Make every delete against ``entity_name`` raise StoreError(message)."""
        self._failures[entity_name] = message

    def clear_failure(self, entity_name: str) -> None:
        """Remove an injected failure."""
        self._failures.pop(entity_name, None)

    @property
    def call_count(self) -> int:
        """Number of delete() calls received."""
        return len(self.calls)

    def called_entities(self) -> list[str]:
        """Entity names in the order delete() was called."""
        return [c.entity_name for c in self.calls]

    def delete(self, entity_name: str, predicate: DeletePredicate) -> int:
        """Delete matching rows, enforcing injected failures and foreign keys."""
        call = DeleteCall(entity_name=entity_name, predicate=predicate)
        self.calls.append(call)

        if entity_name in self._failures:
            call.error = self._failures[entity_name]
            raise StoreError(call.error, entity_name=entity_name)

        with self._lock:
            rows = self._tables.get(entity_name, [])
            doomed = [r for r in rows if predicate.matches(r.get(predicate.column))]
            kept = [r for r in rows if not predicate.matches(r.get(predicate.column))]

            for fk in self._foreign_keys:
                if fk.parent != entity_name:
                    continue
                doomed_keys = {r.get(fk.parent_column) for r in doomed}
                for child_row in self._tables.get(fk.child, []):
                    if child_row.get(fk.column) in doomed_keys:
                        call.error = (
                            f'update or delete on table "{entity_name}" violates '
                            f'foreign key constraint on table "{fk.child}"'
                        )
                        raise StoreError(call.error, entity_name=entity_name, code="23503")

            self._tables[entity_name] = kept

        call.rows_deleted = len(doomed)
        return len(doomed)
