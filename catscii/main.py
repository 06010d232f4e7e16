"""
catscii - FastAPI application.

Serves a random cat photo as ASCII art on ``GET /``.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .config import get_settings
from .dependencies import close_client, get_coordinator
from .routers import art_router, health_router
from .tasks import PrewarmTask

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()

    # Startup
    logger.info("Starting %s v%s", settings.app_name, __version__)
    logger.info("  Upstream: %s (API key %s)", settings.cat_api_url,
                "set" if settings.thecatapi_key else "not set")
    logger.info("  Art width: %d columns", settings.art_columns)
    logger.info("  Freshness window: %ss, stale on error: %s",
                settings.freshness_seconds, settings.serve_stale_on_error)

    prewarm = None
    if settings.prewarm_interval_seconds > 0:
        prewarm = PrewarmTask(get_coordinator(), settings.prewarm_interval_seconds)
        prewarm.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    if prewarm is not None:
        await prewarm.stop()
    await close_client()


def create_app() -> FastAPI:
    """Create the FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="catscii",
        description="Random cat pictures as ASCII art",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.include_router(art_router)
    app.include_router(health_router, prefix="/api")
    return app


# For running with uvicorn directly
app = create_app()
