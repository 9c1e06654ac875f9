"""
Pydantic response schemas for API endpoints.
"""

from typing import Any

from pydantic import BaseModel, Field


class PurgeResponse(BaseModel):
    """
    Result of a purge request.

    ``failedEntity`` and ``error`` are omitted on success.
    """

    ok: bool = Field(..., description="True if every entity in the scope was purged")
    scope: str = Field(..., description="Requested scope name")
    purged: list[str] = Field(default_factory=list, description="Entities purged, in order")
    failed_entity: str | None = Field(
        None, alias="failedEntity", description="Entity whose delete failed or was not started"
    )
    error: str | None = Field(None, description="Store or engine error message, verbatim")

    model_config = {"extra": "forbid", "populate_by_name": True}


class EntityInfo(BaseModel):
    """One entity in a scope's resolved order."""

    name: str = Field(..., description="Entity name")
    key_column: str = Field(..., description="Column used by the all-rows predicate")
    key_kind: str = Field(..., description="identifier, numeric or compositeString")
    predicate: str = Field(..., description="Rendered delete predicate")


class ScopeInfo(BaseModel):
    """A scope and the order its entities are purged in."""

    name: str = Field(..., description="Scope name")
    description: str = Field("", description="Scope description")
    entity_count: int = Field(..., description="Number of entities in the scope")
    order: list[str] = Field(..., description="Entity names in purge order")
    entities: list[EntityInfo] = Field(default_factory=list, description="Entity details")


class ScopeListResponse(BaseModel):
    """Response model for listing scopes."""

    scopes: list[ScopeInfo] = Field(..., description="Registered scopes")
    total: int = Field(..., description="Number of scopes")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Check timestamp")
    store: str = Field(..., description="Store adapter in use")
    components: dict[str, str] = Field(default_factory=dict, description="Component statuses")

    model_config = {"extra": "forbid"}


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: dict[str, Any] = Field(..., description="Error details")
