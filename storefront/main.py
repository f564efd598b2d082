"""
FastAPI application for the storefront API.

Catalog, tracking and currency endpoints backed by the cached query engine.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import psutil
from fastapi import FastAPI

from storefront.config import settings
from storefront.core.cache import provider as cache_provider
from storefront.errors import register_error_handlers
from storefront.http_client import close_http_client
from storefront.logger import get_logger, setup_logging
from storefront.middleware.access_log_middleware import AccessLogMiddleware
from storefront.middleware.performance_middleware import PerformanceMiddleware
from storefront.routers import api_router
from storefront.services.supabase_client import close_supabase_client

VERSION = "0.1.0"

logger = get_logger(__name__)


def _megabytes(num_bytes: int) -> float:
    return round(num_bytes / (1024 * 1024), 2)


def _status_snapshot() -> dict:
    """Process usage plus how many entries each cache namespace holds."""
    proc = psutil.Process()
    memory = proc.memory_info()
    return {
        "process": {
            "pid": proc.pid,
            "cpu_percent": proc.cpu_percent(interval=None),
            "num_threads": proc.num_threads(),
            "rss_mb": _megabytes(memory.rss),
            "memory_percent": round(proc.memory_percent(), 2),
        },
        "caches": {
            namespace: len(cache) for namespace, cache in cache_provider.registered_caches()
        },
    }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("storefront_starting", environment=settings.environment, version=VERSION)
    if not settings.supabase_url:
        logger.warning("supabase_not_configured")

    yield

    await close_supabase_client()
    await close_http_client()
    logger.info("storefront_stopped")


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Storefront catalog, tracking and currency API",
        version=VERSION,
        lifespan=lifespan,
    )
    register_error_handlers(app)

    # Registered last runs first: access log wraps performance.
    app.add_middleware(PerformanceMiddleware)
    app.add_middleware(AccessLogMiddleware)

    @app.get("/")
    async def root():
        return {
            "status": "running",
            "service": settings.app_name,
            "version": VERSION,
            **_status_snapshot(),
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
