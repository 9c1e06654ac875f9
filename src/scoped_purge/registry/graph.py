"""
Entity Registry and Dependency Graph.

Entities are declared once at startup through a RegistryBuilder, which
validates the whole graph (known names, acyclicity, protected entities kept
out of scopes) and freezes it into an EntityGraph. The graph never changes
afterwards; execution orders are derived from it, never hand-maintained.
"""

import heapq
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from scoped_purge.core.exceptions import (
    ConfigurationError,
    CyclicDependencyError,
    DuplicateEntityError,
    ProtectedEntityError,
    UnknownEntityError,
)
from scoped_purge.core.models import DependencyEdge, Entity, Scope

logger = logging.getLogger(__name__)

# Scope member list meaning "every non-protected entity"
ALL_ENTITIES = "*"


class EntityGraph:
    """
    Immutable catalog of purgeable entities and their dependency edges.

    Built by RegistryBuilder.build(); do not instantiate directly.
    """

    def __init__(
        self,
        entities: tuple[Entity, ...],
        edges: tuple[DependencyEdge, ...],
        scopes: dict[str, Scope],
    ):
        self._entities = entities
        self._by_name: dict[str, Entity] = {e.name: e for e in entities}
        self._index: dict[str, int] = {e.name: i for i, e in enumerate(entities)}
        self._edges = edges
        self._scopes: Mapping[str, Scope] = MappingProxyType(dict(scopes))

        parents: dict[str, list[str]] = {e.name: [] for e in entities}
        children: dict[str, list[str]] = {e.name: [] for e in entities}
        for edge in edges:
            parents[edge.child].append(edge.parent)
            children[edge.parent].append(edge.child)
        self._parents = {k: tuple(v) for k, v in parents.items()}
        self._children = {k: tuple(v) for k, v in children.items()}
        self._ancestors = self._compute_ancestors()

    def _compute_ancestors(self) -> dict[str, frozenset[str]]:
        """Transitive parents of every entity (graph is known to be acyclic)."""
        ancestors: dict[str, frozenset[str]] = {}

        def visit(name: str) -> frozenset[str]:
            if name in ancestors:
                return ancestors[name]
            found: set[str] = set()
            for parent in self._parents[name]:
                found.add(parent)
                found |= visit(parent)
            ancestors[name] = frozenset(found)
            return ancestors[name]

        for entity in self._entities:
            visit(entity.name)
        return ancestors

    @property
    def entities(self) -> tuple[Entity, ...]:
        """All entities in registration order."""
        return self._entities

    @property
    def edges(self) -> tuple[DependencyEdge, ...]:
        """All child -> parent edges."""
        return self._edges

    @property
    def scopes(self) -> Mapping[str, Scope]:
        """Registered scopes by name (read-only)."""
        return self._scopes

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._entities)

    def names(self) -> list[str]:
        """Return all entity names in registration order."""
        return [e.name for e in self._entities]

    def get(self, name: str) -> Entity:
        """Get an entity by name."""
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownEntityError(
                f"Entity '{name}' is not registered",
                entity_name=name,
            ) from None

    def parents_of(self, name: str) -> tuple[str, ...]:
        """Entities that must be deleted after ``name``."""
        self.get(name)
        return self._parents[name]

    def children_of(self, name: str) -> tuple[str, ...]:
        """Entities that must be deleted before ``name``."""
        self.get(name)
        return self._children[name]

    def protected_names(self) -> list[str]:
        """Names of entities that no scope may contain."""
        return [e.name for e in self._entities if e.protected]

    def build_order(self, names: Iterable[str]) -> tuple[Entity, ...]:
        """
        Return a linear extension of the dependency order restricted to ``names``.

        Children always precede their (transitive) parents. Entities with no
        relative constraint keep registration order, so the output is
        deterministic.

        Raises:
            UnknownEntityError: If any name is not registered
        """
        subset: list[str] = []
        for name in names:
            self.get(name)
            if name not in subset:
                subset.append(name)

        members = set(subset)
        # Constraints follow the transitive order, so a parent reachable only
        # through an entity outside the subset still comes after its descendant.
        blockers: dict[str, int] = {name: 0 for name in subset}
        unlocks: dict[str, list[str]] = {name: [] for name in subset}
        for child in subset:
            for parent in self._ancestors[child] & members:
                blockers[parent] += 1
                unlocks[child].append(parent)

        ready = [(self._index[n], n) for n in subset if blockers[n] == 0]
        heapq.heapify(ready)
        ordered: list[Entity] = []
        while ready:
            _, name = heapq.heappop(ready)
            ordered.append(self._by_name[name])
            for parent in unlocks[name]:
                blockers[parent] -= 1
                if blockers[parent] == 0:
                    heapq.heappush(ready, (self._index[parent], parent))

        return tuple(ordered)


class RegistryBuilder:
    """
    Collects entity, edge and scope declarations and validates them.

    Usage:
        builder = RegistryBuilder()
        builder.register(Entity("members", "id"))
        builder.register(Entity("visits", "id"), depends_on=["members"])
        builder.add_scope("members", ["members", "visits"])
        graph = builder.build()
    """

    def __init__(self) -> None:
        self._entities: dict[str, Entity] = {}
        self._depends_on: dict[str, tuple[str, ...]] = {}
        self._scopes: dict[str, tuple[str | tuple[str, ...], str]] = {}

    def register(
        self,
        entity: Entity,
        depends_on: Iterable[Entity | str] = (),
    ) -> "RegistryBuilder":
        """
        Add an entity and its child -> parent edges.

        Parents may be registered later; references are checked in build().

        Raises:
            DuplicateEntityError: If the entity name is already registered
        """
        if entity.name in self._entities:
            raise DuplicateEntityError(
                f"Entity '{entity.name}' registered twice",
                name=entity.name,
            )
        parents = tuple(p.name if isinstance(p, Entity) else p for p in depends_on)
        self._entities[entity.name] = entity
        self._depends_on[entity.name] = tuple(dict.fromkeys(parents))
        return self

    def add_scope(
        self,
        name: str,
        entity_names: Iterable[str] | str,
        description: str = "",
    ) -> "RegistryBuilder":
        """
        Declare a scope. Pass ALL_ENTITIES ("*") for every non-protected entity.

        Raises:
            DuplicateEntityError: If the scope name is already declared
        """
        if name in self._scopes:
            raise DuplicateEntityError(
                f"Scope '{name}' declared twice",
                name=name,
                kind="scope",
            )
        if isinstance(entity_names, str) and entity_names != ALL_ENTITIES:
            raise ConfigurationError(
                f"Scope '{name}' must list entity names or use '{ALL_ENTITIES}'",
                config_key=f"scopes.{name}",
            )
        members = entity_names if entity_names == ALL_ENTITIES else tuple(entity_names)
        self._scopes[name] = (members, description)
        return self

    def build(self) -> EntityGraph:
        """
        Validate declarations and freeze them into an EntityGraph.

        Raises:
            UnknownEntityError: If an edge or scope names an unregistered entity
            CyclicDependencyError: If the edges form a cycle
            ProtectedEntityError: If a scope contains a protected entity
        """
        edges: list[DependencyEdge] = []
        for child, parents in self._depends_on.items():
            for parent in parents:
                if parent not in self._entities:
                    raise UnknownEntityError(
                        f"Entity '{child}' depends on unregistered entity '{parent}'",
                        entity_name=parent,
                        referenced_by=child,
                    )
                edges.append(DependencyEdge(child=child, parent=parent))

        self._check_acyclic()

        entities = tuple(self._entities.values())
        scopes = {
            name: self._build_scope(name, members, description)
            for name, (members, description) in self._scopes.items()
        }
        graph = EntityGraph(entities, tuple(edges), scopes)
        for scope in scopes.values():
            _warn_partial_scope(graph, scope)

        logger.info(
            f"Entity registry built: {len(entities)} entities, "
            f"{len(edges)} edges, {len(scopes)} scopes"
        )
        return graph

    def _build_scope(
        self,
        name: str,
        members: str | tuple[str, ...],
        description: str,
    ) -> Scope:
        if members == ALL_ENTITIES:
            names = tuple(n for n, e in self._entities.items() if not e.protected)
            return Scope(name=name, entity_names=names, description=description)

        for entity_name in members:
            entity = self._entities.get(entity_name)
            if entity is None:
                raise UnknownEntityError(
                    f"Scope '{name}' includes unregistered entity '{entity_name}'",
                    entity_name=entity_name,
                    referenced_by=f"scope:{name}",
                )
            if entity.protected:
                raise ProtectedEntityError(
                    f"Scope '{name}' includes protected entity '{entity_name}'",
                    entity_name=entity_name,
                    scope_name=name,
                )
        return Scope(
            name=name,
            entity_names=tuple(dict.fromkeys(members)),
            description=description,
        )

    def _check_acyclic(self) -> None:
        """Kahn's algorithm over the full graph; leftovers contain a cycle."""
        pending_children = {name: 0 for name in self._entities}
        for parents in self._depends_on.values():
            for parent in parents:
                pending_children[parent] += 1

        queue = [name for name, count in pending_children.items() if count == 0]
        visited = 0
        while queue:
            name = queue.pop()
            visited += 1
            for parent in self._depends_on[name]:
                pending_children[parent] -= 1
                if pending_children[parent] == 0:
                    queue.append(parent)

        if visited == len(self._entities):
            return

        remaining = {name for name, count in pending_children.items() if count > 0}
        cycle = self._find_cycle(remaining)
        raise CyclicDependencyError(
            f"Dependency cycle between entities: {', '.join(sorted(set(cycle)))}",
            cycle=cycle,
        )

    def _find_cycle(self, remaining: set[str]) -> list[str]:
        """
        Extract one cycle from the entities Kahn's algorithm could not place.

        Every leftover entity still has an unplaced child, so walking child
        edges inside ``remaining`` must eventually repeat a node. The result
        reads in deletion direction: each name must go before the next.
        """
        children: dict[str, list[str]] = {name: [] for name in remaining}
        for child, parents in self._depends_on.items():
            if child not in remaining:
                continue
            for parent in parents:
                if parent in remaining:
                    children[parent].append(child)

        start = next(name for name in self._entities if name in remaining)
        path: list[str] = []
        seen: dict[str, int] = {}
        node = start
        while node not in seen:
            seen[node] = len(path)
            path.append(node)
            node = children[node][0]
        cycle = list(reversed(path[seen[node]:]))
        return cycle + [cycle[0]]


def _warn_partial_scope(graph: EntityGraph, scope: Scope) -> None:
    """A scope may deliberately skip children; the store will then refuse the parent."""
    members = set(scope.entity_names)
    for name in scope.entity_names:
        missing = [c for c in graph.children_of(name) if c not in members]
        if missing:
            logger.warning(
                f"Scope '{scope.name}' purges '{name}' but not its dependents: "
                f"{', '.join(missing)}",
                extra={"event": "partial_scope", "scope": scope.name, "entity": name},
            )
