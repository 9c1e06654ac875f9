"""
Scoped Purge Exception Hierarchy.

Defines all custom exceptions used across the purge engine.
Configuration errors are raised at startup; per-request errors are
carried inside a PurgeResult rather than raised across the purge boundary.
"""

from typing import Any


class PurgeError(Exception):
    """
    Base exception for all Scoped Purge errors.

    All custom exceptions inherit from this class, allowing
    generic catch blocks and consistent error handling.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        """
        Initialize a PurgeError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(PurgeError):
    """
    Errors in configuration loading or validation.

    Raised at startup when:
    - Environment variables hold invalid values
    - The catalog file is missing or malformed
    - The entity graph or scope declarations are inconsistent
    """

    def __init__(
        self,
        message: str,
        *,
        config_file: str | None = None,
        env_var: str | None = None,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a ConfigurationError.

        Args:
            message: Human-readable error message
            config_file: Path to configuration file if applicable
            env_var: Environment variable name if applicable
            config_key: Configuration key if applicable
            details: Optional structured data for debugging
        """
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if env_var:
            details["env_var"] = env_var
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, details=details)
        self.config_file = config_file
        self.env_var = env_var
        self.config_key = config_key


class CyclicDependencyError(ConfigurationError):
    """Raised when the dependency edges between entities form a cycle."""

    def __init__(self, message: str = "Dependency graph contains a cycle", *, cycle: list[str]):
        super().__init__(message, details={"cycle": " -> ".join(cycle)})
        self.cycle = cycle


class ProtectedEntityError(ConfigurationError):
    """Raised when a protected entity is placed in a scope."""

    def __init__(
        self,
        message: str = "Protected entity cannot be part of a scope",
        *,
        entity_name: str,
        scope_name: str,
    ):
        super().__init__(
            message,
            details={"entity_name": entity_name, "scope_name": scope_name},
        )
        self.entity_name = entity_name
        self.scope_name = scope_name


class DuplicateEntityError(ConfigurationError):
    """Raised when an entity or scope name is registered twice."""

    def __init__(self, message: str = "Name already registered", *, name: str, kind: str = "entity"):
        super().__init__(message, details={kind: name})
        self.name = name
        self.kind = kind


class UnknownEntityError(PurgeError):
    """
    Raised when an entity name is not present in the registry.

    Seen at registry build time for bad edges or scope members, and by
    build_order() for bad subsets, always before any deletion starts.
    """

    def __init__(
        self,
        message: str = "Entity not registered",
        *,
        entity_name: str,
        referenced_by: str | None = None,
    ):
        details: dict[str, Any] = {"entity_name": entity_name}
        if referenced_by:
            details["referenced_by"] = referenced_by
        super().__init__(message, details=details)
        self.entity_name = entity_name
        self.referenced_by = referenced_by


class UnknownScopeError(PurgeError):
    """Raised when a caller names a scope that is not registered."""

    def __init__(
        self,
        message: str = "Unknown scope",
        *,
        scope_name: str,
        available: list[str] | None = None,
    ):
        details: dict[str, Any] = {"scope_name": scope_name}
        if available:
            details["available"] = ", ".join(available)
        super().__init__(message, details=details)
        self.scope_name = scope_name
        self.available = available or []


class StoreDeleteError(PurgeError):
    """
    The store rejected or failed a delete for one entity.

    The underlying store message is passed through verbatim as ``message``
    so the operator sees exactly what the store reported.
    """

    def __init__(
        self,
        message: str,
        *,
        entity_name: str,
        cause: BaseException | None = None,
    ):
        details: dict[str, Any] = {"entity_name": entity_name}
        if cause is not None:
            details["cause_type"] = type(cause).__name__
        super().__init__(message, details=details)
        self.entity_name = entity_name
        self.cause = cause


class PurgeCancelledError(PurgeError):
    """Raised when cancellation or the request deadline is observed between entities."""

    def __init__(
        self,
        message: str = "Purge cancelled",
        *,
        entity_name: str | None = None,
        reason: str | None = None,
    ):
        details: dict[str, Any] = {}
        if entity_name:
            details["next_entity"] = entity_name
        if reason:
            details["reason"] = reason
        super().__init__(message, details=details)
        self.entity_name = entity_name
        self.reason = reason


def format_exception(error: BaseException) -> str:
    """
    Format an exception for user-friendly display.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, PurgeError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"
