"""
Purge endpoints.

One purge runs at a time per process; a second request while one is in
flight is rejected with 409 rather than queued.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from scoped_purge.api.schemas.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
)
from scoped_purge.api.schemas.requests import PurgeRequest
from scoped_purge.api.schemas.responses import (
    EntityInfo,
    ErrorResponse,
    PurgeResponse,
    ScopeInfo,
    ScopeListResponse,
)
from scoped_purge.core.exceptions import UnknownScopeError
from scoped_purge.core.models import PurgeStatus
from scoped_purge.engine.executor import PurgeEngine
from scoped_purge.engine.predicates import build_all_rows_predicate
from scoped_purge.engine.reporter import ResultReporter

router = APIRouter()
logger = logging.getLogger(__name__)

STATUS_CODES: dict[PurgeStatus, int] = {
    PurgeStatus.COMPLETED: 200,
    PurgeStatus.UNKNOWN_SCOPE: 400,
    PurgeStatus.STORE_FAILED: 500,
    PurgeStatus.CANCELLED: 503,
}


def get_engine(request: Request) -> PurgeEngine:
    """Engine built at startup and attached to the application state."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise ServiceUnavailableError(detail="Purge engine not initialized")
    return engine


def _scope_info(engine: PurgeEngine, name: str) -> ScopeInfo:
    scope = engine.resolver.get(name)
    ordered = engine.plan(name)
    return ScopeInfo(
        name=scope.name,
        description=scope.description,
        entity_count=len(ordered),
        order=[e.name for e in ordered],
        entities=[
            EntityInfo(
                name=e.name,
                key_column=e.key_column,
                key_kind=e.key_kind.value,
                predicate=str(build_all_rows_predicate(e)),
            )
            for e in ordered
        ],
    )


_ERRORS = {409: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}


@router.post("", response_model=PurgeResponse, response_model_exclude_none=True, responses=_ERRORS)
@router.post("/", response_model=PurgeResponse, response_model_exclude_none=True, include_in_schema=False)
def purge_scope(body: PurgeRequest, request: Request) -> JSONResponse:
    """
    Purge every entity in a scope, children before parents.

    Status codes:
    - 200: every entity purged
    - 400: unknown scope, nothing touched
    - 500: a store delete failed; ``purged`` lists what was already removed
    - 503: cancelled or deadline exceeded between entities
    - 409: another purge is in progress

    Re-sending the same request after fixing the cause resumes the purge.
    """
    engine = get_engine(request)
    lock = request.app.state.purge_lock
    if not lock.acquire(blocking=False):
        raise ConflictError(detail=f"Rejected purge of scope '{body.scope}'")

    actor = request.headers.get("x-actor", "api")
    try:
        result = engine.purge(body.scope, actor=actor)
    finally:
        lock.release()

    response = PurgeResponse.model_validate(ResultReporter.to_response(result))
    return JSONResponse(
        status_code=STATUS_CODES[result.status],
        content=response.model_dump(by_alias=True, exclude_none=True),
    )


@router.get("/scopes", response_model=ScopeListResponse)
async def list_scopes(request: Request) -> ScopeListResponse:
    """List registered scopes with their resolved purge order."""
    engine = get_engine(request)
    scopes = [_scope_info(engine, name) for name in engine.resolver.names()]
    return ScopeListResponse(scopes=scopes, total=len(scopes))


@router.get("/scopes/{scope_name}", response_model=ScopeInfo, responses={404: {"model": ErrorResponse}})
async def get_scope(scope_name: str, request: Request) -> ScopeInfo:
    """
    Get one scope's resolved purge order without deleting anything.

    Raises:
        NotFoundError: If the scope is not registered
    """
    engine = get_engine(request)
    try:
        return _scope_info(engine, scope_name)
    except UnknownScopeError as e:
        raise NotFoundError(
            message=f"Scope '{scope_name}' not found",
            detail=f"Available scopes: {', '.join(engine.resolver.names())}",
        ) from e
