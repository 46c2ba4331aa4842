"""Deep link, notification tap and game open endpoints."""
from fastapi import APIRouter, Depends, Path

from ..schemas.control import DeepLinkRequest, NotificationTap, OpenResult
from ..services.container import ClientServices, get_services

router = APIRouter(prefix="/api", tags=["links"])


@router.post("/links/open", response_model=OpenResult)
async def open_link(request: DeepLinkRequest, services: ClientServices = Depends(get_services)):
    """Route an incoming ogs:// link. Non-game links are ignored."""
    url = services.deep_links.handle_url(request.url)
    return OpenResult(opened=url is not None, url=url)


@router.post("/notifications/tap", response_model=OpenResult)
async def notification_tapped(request: NotificationTap, services: ClientServices = Depends(get_services)):
    """Route a tapped notification's payload."""
    url = services.deep_links.handle_notification_tap(request.payload)
    return OpenResult(opened=url is not None, url=url)


@router.post("/games/{game_id}/open", response_model=OpenResult)
async def open_game(game_id: int = Path(..., ge=1), services: ClientServices = Depends(get_services)):
    """Open a monitored game's web page by its ID."""
    url = services.deep_links.open_game(game_id)
    return OpenResult(opened=True, url=url)
