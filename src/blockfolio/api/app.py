"""
FastAPI application factory.

This module builds the HTTP surface around one live document workspace:

1.  **Middleware**: CORS so an editor front end on another origin can call us.
2.  **Exception handling**: unhandled errors come back as structured JSON.
3.  **Routing**: the document/export router and a health probe.
4.  **Lifecycle**: the workspace is created on startup and its pending
    autosave is flushed on shutdown.

Usage
-----
>>> app = create_app()                      # workspace from settings
>>> app = create_app(Workspace(MemoryStore()))  # injected (tests)
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blockfolio import __version__
from blockfolio.api.routers import document
from blockfolio.api.workspace import Workspace
from blockfolio.core.settings import get_logger

logger = get_logger(__name__)


def create_app(workspace: Workspace | None = None) -> FastAPI:
    """
    Construct and configure the Blockfolio FastAPI application.

    Parameters
    ----------
    workspace:
        Workspace to serve. When omitted, the global instance is built from
        settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if workspace is not None:
            Workspace.set_instance(workspace)
        active = Workspace.get_instance()
        logger.info("Workspace ready (key=%r)", active.key)
        yield
        active.shutdown()
        logger.info("Workspace flushed, shutting down")

    app = FastAPI(
        title="Blockfolio API",
        description="Block document persistence and PDF export",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Global Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Return unhandled exceptions as structured JSON instead of a bare 500."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc),
                "path": request.url.path,
            },
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(document.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Simple liveness probe."""
        return {"status": "ok", "version": __version__}

    return app


__all__ = ["create_app"]
