"""
Scoped Purge Registry Module.

Entity catalog, dependency graph and scope resolution.
"""

__all__ = [
    "ALL_ENTITIES",
    "EntityGraph",
    "RegistryBuilder",
    "ScopeResolver",
    "builtin_graph",
    "load_catalog_from_dict",
    "load_catalog_from_yaml",
]

from scoped_purge.registry.catalog import builtin_graph
from scoped_purge.registry.graph import ALL_ENTITIES, EntityGraph, RegistryBuilder
from scoped_purge.registry.loader import load_catalog_from_dict, load_catalog_from_yaml
from scoped_purge.registry.scopes import ScopeResolver
