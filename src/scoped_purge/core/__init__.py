"""
Scoped Purge Core Module.

Provides foundational types and the exception hierarchy.
"""

__all__ = [
    "DependencyEdge",
    "Entity",
    "KeyColumnKind",
    "PurgeResult",
    "PurgeStatus",
    "Scope",
    # Exceptions
    "PurgeError",
    "ConfigurationError",
    "CyclicDependencyError",
    "DuplicateEntityError",
    "ProtectedEntityError",
    "UnknownEntityError",
    "UnknownScopeError",
    "StoreDeleteError",
    "PurgeCancelledError",
]

from scoped_purge.core.exceptions import (
    ConfigurationError,
    CyclicDependencyError,
    DuplicateEntityError,
    ProtectedEntityError,
    PurgeCancelledError,
    PurgeError,
    StoreDeleteError,
    UnknownEntityError,
    UnknownScopeError,
)
from scoped_purge.core.models import (
    DependencyEdge,
    Entity,
    KeyColumnKind,
    PurgeResult,
    PurgeStatus,
    Scope,
)
