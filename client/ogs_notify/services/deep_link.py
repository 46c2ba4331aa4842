"""Deep-link routing for ogs:// URLs and notification taps."""
import logging
import webbrowser
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlsplit

from ..schemas.diagnostics import WEB_GAME_URL

logger = logging.getLogger(__name__)

APP_SCHEME = "ogs"
GAME_HOST = "game"
OPEN_GAME_ACTION = "open_game"


def game_id_from_url(url: str) -> Optional[int]:
    """Extract the game ID from ogs://game/<id>, or None if it does not match."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if parts.scheme.lower() != APP_SCHEME or parts.netloc.lower() != GAME_HOST:
        return None

    segments = [segment for segment in parts.path.split("/") if segment]
    if not segments or not (segments[-1].isascii() and segments[-1].isdigit()):
        return None
    return int(segments[-1])


def _is_web_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


class DeepLinkRouter:
    """Turns incoming links into an external open of the game's web page.

    Links that do not match are ignored without an error.
    """

    def __init__(self, opener: Optional[Callable[[str], Any]] = None):
        self._opener = opener or webbrowser.open

    def handle_url(self, url: str) -> Optional[str]:
        """Open the web page for an ogs://game/<id> link. Returns the opened URL."""
        game_id = game_id_from_url(url)
        if game_id is None:
            logger.debug(f"Ignoring non-game link: {url}")
            return None
        return self.open_game(game_id)

    def open_game(self, game_id: int) -> str:
        """Open a game's web page, as the diagnostics "Play Game" action does."""
        return self._open(WEB_GAME_URL.format(game_id=game_id))

    def handle_notification_tap(self, payload: Mapping[str, Any]) -> Optional[str]:
        """Open the game from a tapped notification's payload, if it asks for it."""
        if payload.get("action") != OPEN_GAME_ACTION:
            return None
        web_url = payload.get("web_url")
        if not _is_web_url(web_url):
            logger.debug(f"Notification payload without a usable web_url: {payload}")
            return None
        return self._open(web_url)

    def _open(self, url: str) -> str:
        logger.info(f"Opening {url}")
        self._opener(url)
        return url
