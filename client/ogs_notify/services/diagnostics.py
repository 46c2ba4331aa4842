"""Diagnostics synchronizer - on-demand snapshots of server-side state."""
import asyncio
import logging
from typing import Optional

from ..config import settings
from ..errors import MissingUserId
from ..models.local_state import USER_ID_KEY
from ..schemas.diagnostics import UserDiagnostics
from ..store import KeyValueStore
from .environment import EnvironmentSelector
from .remote_client import NotificationServiceClient

logger = logging.getLogger(__name__)


class DiagnosticsSynchronizer:
    """Loads diagnostics and keeps only the most recent snapshot.

    Every successful load replaces `snapshot` wholesale. Nothing is cached
    between calls and errors from the client propagate unchanged.
    """

    def __init__(
        self,
        store: KeyValueStore,
        client: NotificationServiceClient,
        environment: EnvironmentSelector,
        settle_delay: Optional[float] = None,
        poll_timeout: Optional[float] = None,
    ):
        self._store = store
        self._client = client
        self._environment = environment
        self.settle_delay = settings.check_settle_delay_seconds if settle_delay is None else settle_delay
        self.poll_timeout = settings.check_poll_timeout_seconds if poll_timeout is None else poll_timeout
        self.snapshot: Optional[UserDiagnostics] = None

    async def load_diagnostics(self, user_id: str) -> UserDiagnostics:
        diagnostics = await self._client.fetch_diagnostics(await self._environment.base_url(), user_id)
        self.snapshot = diagnostics
        logger.info(
            f"Diagnostics loaded for user {user_id}: "
            f"{diagnostics.total_active_games} active games, "
            f"{len(diagnostics.games_requiring_turn)} awaiting a move"
        )
        return diagnostics

    async def current_user_id(self) -> str:
        user_id = await self._store.get(USER_ID_KEY)
        if not user_id:
            raise MissingUserId()
        return user_id

    async def load_for_current_user(self) -> UserDiagnostics:
        """Load diagnostics for the stored user ID.

        Raises:
            MissingUserId: if no user ID has been set yet
        """
        return await self.load_diagnostics(await self.current_user_id())

    async def trigger_manual_check(self, user_id: str) -> UserDiagnostics:
        """Ask the server to re-check now, then re-fetch diagnostics.

        The trigger response carries no data. After a settle delay the
        snapshot is re-fetched; if an earlier snapshot for this user exists,
        fetching repeats until the server's last check time moves forward or
        the poll timeout is used up. The returned snapshot may still predate
        the server's check.
        """
        previous = self.snapshot if self.snapshot and self.snapshot.user_id == user_id else None

        await self._client.trigger_manual_check(await self._environment.base_url(), user_id)
        logger.info(f"Manual check triggered for user {user_id}")

        attempts = self._poll_attempts() if previous else 1
        diagnostics = None
        for _ in range(attempts):
            await asyncio.sleep(self.settle_delay)
            diagnostics = await self.load_diagnostics(user_id)
            if previous is None or self._check_advanced(previous, diagnostics):
                return diagnostics

        logger.warning(
            f"Server check for user {user_id} not observed after {attempts} fetches, "
            f"showing latest snapshot"
        )
        return diagnostics

    def _poll_attempts(self) -> int:
        if self.settle_delay <= 0:
            return 1
        return max(1, int(self.poll_timeout // self.settle_delay))

    @staticmethod
    def _check_advanced(previous: UserDiagnostics, current: UserDiagnostics) -> bool:
        if current.last_server_check_time is None:
            return False
        if previous.last_server_check_time is None:
            return True
        return current.last_server_check_time > previous.last_server_check_time
