"""
Health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from scoped_purge import __version__
from scoped_purge.api.schemas.responses import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse, include_in_schema=False)
async def health_check(request: Request) -> HealthResponse:
    """
    Report service status, version and the store adapter in use.

    The store itself is not probed; a health check must never delete.
    """
    engine = getattr(request.app.state, "engine", None)
    store_kind = getattr(engine.store, "kind", type(engine.store).__name__) if engine else "unknown"

    components: dict[str, str] = {}
    if engine is None:
        status = "unhealthy"
        components["engine"] = "not initialized"
    else:
        status = "healthy"
        components["engine"] = (
            f"ready ({len(engine.graph)} entities, {len(engine.resolver.names())} scopes)"
        )
        components["purge"] = "busy" if request.app.state.purge_lock.locked() else "idle"

    return HealthResponse(
        status=status,
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        store=store_kind,
        components=components,
    )


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness check; succeeds whenever the process is serving."""
    return {
        "alive": "true",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
