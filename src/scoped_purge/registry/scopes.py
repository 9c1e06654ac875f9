"""
Scope Resolver - maps a scope name to its FK-safe entity order.
"""

from scoped_purge.core.exceptions import UnknownScopeError
from scoped_purge.core.models import Entity, Scope
from scoped_purge.registry.graph import EntityGraph


class ScopeResolver:
    """
    Resolves scope names against an EntityGraph.

    A scope's order is never stored; it is derived from the graph each time,
    so it stays consistent with the dependency edges however the scope
    list was written.
    """

    def __init__(self, graph: EntityGraph):
        self._graph = graph

    @property
    def graph(self) -> EntityGraph:
        """The graph this resolver reads from."""
        return self._graph

    def names(self) -> list[str]:
        """Return all scope names in declaration order."""
        return list(self._graph.scopes.keys())

    def get(self, scope_name: str) -> Scope:
        """
        Get a scope definition by name.

        Raises:
            UnknownScopeError: If the scope is not registered
        """
        scope = self._graph.scopes.get(scope_name)
        if scope is None:
            raise UnknownScopeError(
                f"Unknown scope '{scope_name}'",
                scope_name=scope_name,
                available=self.names(),
            )
        return scope

    def resolve(self, scope_name: str) -> tuple[Entity, ...]:
        """
        Return the scope's entities ordered children-before-parents.

        Raises:
            UnknownScopeError: If the scope is not registered
        """
        scope = self.get(scope_name)
        return self._graph.build_order(scope.entity_names)

    def resolve_names(self, scope_name: str) -> list[str]:
        """Same as resolve() but returns entity names."""
        return [entity.name for entity in self.resolve(scope_name)]
