"""
Health check endpoint.
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from .. import __version__
from ..dependencies import get_coordinator
from ..models import HealthResponse
from ..services.coordinator import FetchCoordinator

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    coordinator: Annotated[FetchCoordinator, Depends(get_coordinator)],
) -> HealthResponse:
    """Check if the API is running and report the art cache state."""
    snapshot = coordinator.snapshot()
    return HealthResponse(
        status="ok",
        version=__version__,
        cache_state=snapshot.state,
        art_age_seconds=snapshot.art_age_seconds,
        upstream_fetches=snapshot.fetch_count,
    )
