"""
FastAPI dependencies for dependency injection.
"""
from typing import Optional

from .config import Settings, get_settings
from .services.coordinator import FetchCoordinator
from .services.images import CatImageClient
from .services.pipeline import ArtPipeline

# Global instances (set on app startup)
_client: Optional[CatImageClient] = None
_coordinator: Optional[FetchCoordinator] = None


def build_client(settings: Settings) -> CatImageClient:
    return CatImageClient(
        api_url=settings.cat_api_url,
        api_key=settings.thecatapi_key,
        timeout=settings.fetch_timeout_seconds,
        user_agent=settings.user_agent,
    )


def build_coordinator(settings: Settings, client: CatImageClient) -> FetchCoordinator:
    pipeline = ArtPipeline(
        client,
        columns=settings.art_columns,
        ramp=settings.glyph_ramp,
        char_aspect=settings.char_aspect,
        max_rows=settings.art_max_rows,
    )
    return FetchCoordinator(
        pipeline,
        freshness_seconds=settings.freshness_seconds,
        serve_stale_on_error=settings.serve_stale_on_error,
        stale_if_error_seconds=settings.stale_if_error_seconds,
    )


def get_client() -> CatImageClient:
    """Get the upstream image client."""
    global _client
    if _client is None:
        _client = build_client(get_settings())
    return _client


def get_coordinator() -> FetchCoordinator:
    """Get the fetch coordinator."""
    global _coordinator
    if _coordinator is None:
        _coordinator = build_coordinator(get_settings(), get_client())
    return _coordinator


def set_coordinator(coordinator: Optional[FetchCoordinator]) -> None:
    """Set the coordinator instance (for testing or swapping pipelines)."""
    global _coordinator
    _coordinator = coordinator


async def close_client() -> None:
    """Close the upstream client and forget the coordinator using it."""
    global _client, _coordinator
    if _client is not None:
        await _client.close()
    _client = None
    _coordinator = None
