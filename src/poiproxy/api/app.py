# src/poiproxy/api/app.py
"""
FastAPI application wiring.

`create_app()` builds the settings-driven objects (catalog store, encryption provider,
search orchestrator) once, stores them on `app.state` and closes them on shutdown.
Business logic lives in `poiproxy.search` and `poiproxy.candidates`.

Run with:
    uvicorn poiproxy.api.app:app
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware

from poiproxy.catalog.store import CatalogStore
from poiproxy.config.settings import Settings, get_settings
from poiproxy.core.logging import configure_logging
from poiproxy.privacy.encryption import EncryptionProvider, build_encryption_provider
from poiproxy.search.factory import build_catalog_store, build_search
from poiproxy.search.orchestrator import ProximitySearch

from .errors import register_error_handlers
from .routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    search: ProximitySearch | None = None,
    store: CatalogStore | None = None,
    encryption: EncryptionProvider | None = None,
) -> FastAPI:
    """Build the API app; injected objects (tests) take precedence over settings."""
    settings = settings or get_settings()
    configure_logging(settings)

    encryption = encryption or build_encryption_provider(settings.encryption)
    store = store or build_catalog_store(settings, encryption=encryption)
    search = search or build_search(settings, store=store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.search.close()

    app = FastAPI(title="poiproxy API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.encryption = encryption
    app.state.store = store
    app.state.search = search

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
        )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info("%s %s %s %dms", request.method, request.url.path, response.status_code, duration_ms)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Ms"] = str(duration_ms)
        return response

    register_error_handlers(app)
    app.include_router(router)

    if not encryption.protects_data_at_rest:
        logger.warning("Catalog encryption provider is '%s': records are stored in plaintext.", encryption.name)
    return app


app = create_app()
