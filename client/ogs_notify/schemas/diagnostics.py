"""Diagnostics snapshot schemas, matching the notification service's JSON."""
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict

WEB_GAME_URL = "https://online-go.com/game/{game_id}"
APP_GAME_URL = "ogs://game/{game_id}"


def _from_millis(value: float) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class GameInfo(BaseModel):
    """A game the service is watching for this user."""
    model_config = ConfigDict(strict=True)

    game_id: int
    last_move_timestamp: float  # milliseconds since epoch
    current_player: int
    is_your_turn: bool
    game_name: str

    @property
    def last_move_date(self) -> datetime:
        return _from_millis(self.last_move_timestamp)

    @property
    def web_url(self) -> str:
        return WEB_GAME_URL.format(game_id=self.game_id)

    @property
    def app_url(self) -> str:
        return APP_GAME_URL.format(game_id=self.game_id)


class UserDiagnostics(BaseModel):
    """Server-side view of a user's registration and monitored games.

    Created fresh on every fetch; never merged with an earlier snapshot.
    """
    model_config = ConfigDict(strict=True)

    user_id: str
    device_token_registered: bool
    device_token_preview: Optional[str] = None
    last_notification_time: float  # milliseconds, 0 when never notified
    monitored_games: List[GameInfo]
    total_active_games: int
    server_check_interval: str
    last_server_check_time: Optional[float] = None  # seconds

    @property
    def last_notification_date(self) -> Optional[datetime]:
        if self.last_notification_time <= 0:
            return None
        return _from_millis(self.last_notification_time)

    @property
    def last_server_check_date(self) -> Optional[datetime]:
        if self.last_server_check_time is None:
            return None
        return datetime.fromtimestamp(self.last_server_check_time, tz=timezone.utc)

    @property
    def games_requiring_turn(self) -> List[GameInfo]:
        return [game for game in self.monitored_games if game.is_your_turn]
