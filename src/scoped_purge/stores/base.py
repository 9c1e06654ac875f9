"""
Store capability consumed by the purge engine.

The engine needs exactly one operation from the relational store:
delete the rows of one entity that match a predicate. Connection
management and transport belong to the adapter.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scoped_purge.engine.predicates import DeletePredicate


class StoreError(Exception):
    """
    Raised by store adapters when a delete is rejected or fails.

    ``message`` is the store's own error text, kept verbatim.
    """

    def __init__(
        self,
        message: str,
        *,
        entity_name: str | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.entity_name = entity_name
        self.status_code = status_code
        self.code = code


@runtime_checkable
class PurgeStore(Protocol):
    """Anything that can delete predicate-matched rows from a named entity."""

    def delete(self, entity_name: str, predicate: "DeletePredicate") -> int | None:
        """
        Delete rows of ``entity_name`` matching ``predicate``.

        Returns the number of rows deleted when the store reports it.
        Raises on failure; the call always runs to completion.
        """
        ...
