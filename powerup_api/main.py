"""
Procore Power-Up - capture backend API
FastAPI app the browser extension talks to: wiretap captures, cached
records, command palette search and headless scans.

Install dependencies:
pip install -e .

Run server:
uvicorn powerup_api.main:app --host 0.0.0.0 --port 8000
"""
from __future__ import annotations

import contextvars
import logging
import time
import uuid
from typing import Optional

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from powerup_api import __version__
from powerup_api.adapters import RecordStore, StorageError, build_store
from powerup_api.core.cache import MergeCache
from powerup_api.core.preferences import ProjectPreferences
from powerup_api.routers import capture, favorites, projects, scans, search
from powerup_api.settings import Settings, get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar("request_id", default=None)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """
    Build the app. `store` overrides the backend named in settings
    (tests pass a MemoryAdapter).
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if store is None:
        store = build_store(settings)

    app = FastAPI(
        title="Procore Power-Up API",
        description="Capture cache and command palette backend for the Power-Up extension",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.store = store
    app.state.cache = MergeCache(store, serialize_writes=settings.serialize_writes)
    app.state.preferences = ProjectPreferences(store, recents_limit=settings.recents_limit)

    @app.middleware("http")
    async def request_tracing_middleware(request, call_next):
        """Add request_id and timing to all requests."""
        request_id = str(uuid.uuid4())[:8]
        request_id_var.set(request_id)
        started = time.time()

        response = await call_next(request)

        latency = time.time() - started
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "request_id": request_id,
                "latency_ms": round(latency * 1000, 2),
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_exception_handler(request, exc: StorageError):
        logger.error(f"Storage failure: {exc}", exc_info=exc.cause)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage unavailable", "operation": exc.operation},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "backend": settings.storage_backend.lower(),
            "version": __version__,
        }

    # Order matters: /projects/{id}/{kind} in `projects` would shadow the
    # fixed sub-paths of the other routers.
    app.include_router(capture.router)
    app.include_router(search.router)
    app.include_router(favorites.router)
    app.include_router(scans.router)
    app.include_router(projects.router)

    logger.info(f"🔧 Procore Power-Up API ready (backend: {settings.storage_backend.upper()})")
    return app


app = create_app()
