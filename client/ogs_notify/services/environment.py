"""Server environment selection and cached health state."""
import logging
from enum import Enum
from typing import Dict, Optional, Union

from ..config import Settings, settings as default_settings
from ..models.local_state import SERVER_ENVIRONMENT_KEY
from ..schemas.health import ServerHealthStatus
from ..store import KeyValueStore
from .remote_client import NotificationServiceClient

logger = logging.getLogger(__name__)


class ServerEnvironment(str, Enum):
    """Closed set of notification service endpoints. The first is the default."""
    LOCAL = "local"
    PRODUCTION = "production"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def default(cls) -> "ServerEnvironment":
        return next(iter(cls))


def base_urls_from_settings(config: Settings) -> Dict[ServerEnvironment, str]:
    return {
        ServerEnvironment.LOCAL: config.local_base_url,
        ServerEnvironment.PRODUCTION: config.production_base_url,
    }


class EnvironmentSelector:
    """Persists the selected environment and resolves its base URL per call.

    Changing the environment drops the cached health status but leaves the
    user ID and device token alone; requests already in flight keep going to
    the endpoint they were issued against.
    """

    def __init__(
        self,
        store: KeyValueStore,
        client: NotificationServiceClient,
        base_urls: Optional[Dict[ServerEnvironment, str]] = None,
    ):
        self._store = store
        self._client = client
        self._base_urls = base_urls or base_urls_from_settings(default_settings)
        self._cached_health: Optional[ServerHealthStatus] = None
        # Bumped on every switch so probes of the old endpoint are not cached
        self._generation = 0

    @property
    def cached_health(self) -> Optional[ServerHealthStatus]:
        return self._cached_health

    def url_for(self, environment: ServerEnvironment) -> str:
        return self._base_urls[environment]

    async def get_current_environment(self) -> ServerEnvironment:
        raw = await self._store.get(SERVER_ENVIRONMENT_KEY)
        if raw is None:
            return ServerEnvironment.default()
        try:
            return ServerEnvironment(raw)
        except ValueError:
            logger.warning(f"Unknown stored environment '{raw}', using {ServerEnvironment.default().value}")
            return ServerEnvironment.default()

    async def set_environment(self, environment: Union[ServerEnvironment, str]) -> ServerEnvironment:
        """Select a new environment.

        Raises:
            ValueError: if the name is not a known environment
        """
        environment = ServerEnvironment(environment)
        await self._store.set(SERVER_ENVIRONMENT_KEY, environment.value)
        self._generation += 1
        self._cached_health = None
        logger.info(f"Server environment changed to: {environment.display_name} ({self.url_for(environment)})")
        return environment

    async def base_url(self) -> str:
        return self.url_for(await self.get_current_environment())

    async def probe_health(self) -> ServerHealthStatus:
        """Probe the current environment and cache the result."""
        generation = self._generation
        status = await self._client.probe_health(await self.base_url())
        if generation == self._generation:
            self._cached_health = status
        else:
            logger.debug("Environment changed during health probe, result not cached")
        return status
