"""
Pydantic schemas for API request/response validation.
"""

from scoped_purge.api.schemas.exceptions import (
    APIException,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
)
from scoped_purge.api.schemas.requests import PurgeRequest
from scoped_purge.api.schemas.responses import (
    EntityInfo,
    ErrorResponse,
    HealthResponse,
    PurgeResponse,
    ScopeInfo,
    ScopeListResponse,
)

__all__ = [
    # Exceptions
    "APIException",
    "NotFoundError",
    "ConflictError",
    "ServiceUnavailableError",
    # Requests
    "PurgeRequest",
    # Responses
    "PurgeResponse",
    "EntityInfo",
    "ScopeInfo",
    "ScopeListResponse",
    "HealthResponse",
    "ErrorResponse",
]
