"""
Deletion Predicate Builder.

Store query layers typically need a comparison filter and have no
"delete everything" call, so an unconditional delete is written as
``key_column <> sentinel``. Each key kind has one process-wide sentinel that
no real row can hold.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from scoped_purge.core.models import Entity, KeyColumnKind

# uuid4 always sets version nibble 4, so the nil UUID is never generated
IDENTIFIER_SENTINEL = "00000000-0000-0000-0000-000000000000"
# Week numbers, years and ordinals are non-negative
NUMERIC_SENTINEL = -1
# Real composite keys are years ("2024") or date keys ("2024-W07")
COMPOSITE_STRING_SENTINEL = "__none__"

SENTINELS = MappingProxyType(
    {
        KeyColumnKind.IDENTIFIER: IDENTIFIER_SENTINEL,
        KeyColumnKind.NUMERIC: NUMERIC_SENTINEL,
        KeyColumnKind.COMPOSITE_STRING: COMPOSITE_STRING_SENTINEL,
    }
)


class PredicateOperator(str, Enum):
    """Comparison operators a store adapter must understand."""

    NOT_EQUAL = "neq"


@dataclass(frozen=True)
class DeletePredicate:
    """A single-column comparison filter for a delete call."""

    column: str
    operator: PredicateOperator
    value: Any

    def matches(self, row_value: Any) -> bool:
        """
        Evaluate the predicate against one row's column value.

        NULL keys never match, the same as SQL ``<>`` and PostgREST ``neq``.
        """
        if row_value is None:
            return False
        match self.operator:
            case PredicateOperator.NOT_EQUAL:
                return row_value != self.value
            case _:
                raise ValueError(f"Unsupported operator: {self.operator}")

    def to_sql(self) -> tuple[str, tuple[Any, ...]]:
        """Return a parameterised SQL condition and its parameters."""
        match self.operator:
            case PredicateOperator.NOT_EQUAL:
                return f'"{self.column}" <> ?', (self.value,)
            case _:
                raise ValueError(f"Unsupported operator: {self.operator}")

    def to_query_params(self) -> dict[str, str]:
        """Return PostgREST query parameters, e.g. ``{"id": "neq.<value>"}``."""
        return {self.column: f"{self.operator.value}.{self.value}"}

    def __str__(self) -> str:
        return f"{self.column} != {self.value!r}"


def sentinel_for(kind: KeyColumnKind) -> Any:
    """Return the sentinel shared by every entity of ``kind``."""
    return SENTINELS[KeyColumnKind(kind)]


def build_all_rows_predicate(entity: Entity) -> DeletePredicate:
    """Build the predicate matching every real row of ``entity``."""
    return DeletePredicate(
        column=entity.key_column,
        operator=PredicateOperator.NOT_EQUAL,
        value=sentinel_for(entity.key_kind),
    )
