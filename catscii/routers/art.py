"""
Cat art endpoints.

The only place where pipeline failures become HTTP status codes.
"""
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import HTMLResponse, PlainTextResponse

from ..dependencies import get_coordinator
from ..errors import CatsciiError, FetchFailure, NetworkTimeout
from ..services.coordinator import FetchCoordinator
from ..services.renderer import AsciiArt, to_html

logger = logging.getLogger(__name__)

router = APIRouter(tags=["art"])


def failure_status(exc: CatsciiError) -> int:
    """HTTP status for a pipeline failure; decode failures are a 500."""
    if isinstance(exc, NetworkTimeout):
        return status.HTTP_504_GATEWAY_TIMEOUT
    if isinstance(exc, FetchFailure):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def failure_response(exc: CatsciiError) -> PlainTextResponse:
    return PlainTextResponse(f"{exc.message}\n", status_code=failure_status(exc))


async def _get_art(coordinator: FetchCoordinator, user_agent: Optional[str]) -> AsciiArt:
    logger.info("Cat art requested (user agent: %s)", user_agent or "-")
    return await coordinator.get()


@router.get("/", response_class=PlainTextResponse)
async def get_cat_art(
    coordinator: Annotated[FetchCoordinator, Depends(get_coordinator)],
    user_agent: Annotated[Optional[str], Header()] = None,
):
    """A random cat as plain-text ASCII art."""
    try:
        art = await _get_art(coordinator, user_agent)
    except CatsciiError as exc:
        return failure_response(exc)
    return PlainTextResponse(art.text)


@router.get("/html", response_class=HTMLResponse)
async def get_cat_art_html(
    coordinator: Annotated[FetchCoordinator, Depends(get_coordinator)],
    user_agent: Annotated[Optional[str], Header()] = None,
):
    """The same cat as colored ASCII art in an HTML page."""
    try:
        art = await _get_art(coordinator, user_agent)
    except CatsciiError as exc:
        return failure_response(exc)
    return HTMLResponse(to_html(art))
