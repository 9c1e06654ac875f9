"""
FastAPI Application Setup.

Application factory for the Scoped Purge REST API.
"""

import logging
import threading
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from scoped_purge import __version__
from scoped_purge.api.middleware.logging import RequestLoggingMiddleware
from scoped_purge.api.routes import health, purge
from scoped_purge.api.schemas.exceptions import APIException
from scoped_purge.config import EngineConfig, create_engine, load_config
from scoped_purge.engine.executor import PurgeEngine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the purge engine on startup and release the store on shutdown.

    Catalog errors (unknown entities, cycles, protected entities in a
    scope) abort startup here rather than surfacing per request.
    """
    logger.info("Scoped Purge API starting up...")
    logger.info(f"Version: {__version__}")

    if app.state.engine is None:
        config: EngineConfig = app.state.config or load_config()
        logging.getLogger("scoped_purge").setLevel(config.log_level)
        app.state.engine = create_engine(config)
        app.state.owns_engine = True
    engine: PurgeEngine = app.state.engine
    logger.info(
        f"Engine ready: {len(engine.graph)} entities, scopes: {', '.join(engine.resolver.names())}"
    )

    yield

    logger.info("Scoped Purge API shutting down...")
    if app.state.owns_engine:
        close = getattr(engine.store, "close", None)
        if callable(close):
            close()


def create_app(
    engine: PurgeEngine | None = None,
    config: EngineConfig | None = None,
    title: str = "Scoped Purge API",
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        engine: Prebuilt engine; when omitted one is built at startup
        config: Configuration used to build the engine (default: environment)
        title: Application title for OpenAPI docs

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=title,
        description="Scoped, dependency-ordered purges of relational data",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.config = config
    app.state.owns_engine = False
    app.state.purge_lock = threading.Lock()

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )
    app.include_router(
        purge.router,
        prefix="/api/v1/purge",
        tags=["Purge"],
    )

    # Exception handlers
    @app.exception_handler(APIException)
    async def api_exception_handler(request, exc: APIException) -> JSONResponse:
        """Handle API exceptions with proper error responses."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "type": exc.error_type,
                    "message": exc.message,
                    "detail": exc.detail,
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "type": "internal_error",
                    "message": "An unexpected error occurred",
                    "detail": str(exc) if logger.isEnabledFor(logging.DEBUG) else None,
                }
            },
        )

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, object]:
        """Root endpoint with API information."""
        return {
            "name": "Scoped Purge API",
            "version": __version__,
            "status": "operational",
            "docs": "/docs",
            "health": "/health",
            "scopes": "/api/v1/purge/scopes",
        }

    return app


# Default app instance for `uvicorn scoped_purge.api.app:app`
app = create_app()
