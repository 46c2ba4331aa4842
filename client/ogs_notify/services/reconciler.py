"""Registration reconciler - keeps (user ID, device token) registered remotely.

Both halves of the binding arrive independently: the user types an ID, the
OS hands over a push token whenever permission is granted. Each entry point
persists its half and then reconciles from the store, so the order of
arrival does not matter and nothing is lost across restarts.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..errors import IncompleteBinding, NotificationClientError, ServerError, TransportFailure
from ..models.local_state import DEVICE_TOKEN_KEY, USER_ID_KEY
from ..schemas.registration import BindingStatus, RegistrationState
from ..store import KeyValueStore
from ..utils.retry import RetryPolicy, retry_with_backoff
from .environment import EnvironmentSelector
from .remote_client import NotificationServiceClient

logger = logging.getLogger(__name__)


@dataclass
class RegistrationOutcome:
    """Result of one reconciliation attempt."""
    state: RegistrationState
    message: str
    user_id: Optional[str] = None
    error: Optional[NotificationClientError] = None

    @property
    def ok(self) -> bool:
        return self.state != RegistrationState.FAILED


def format_device_token(token: Union[bytes, str]) -> str:
    """Render an OS-issued token as the lowercase hex string the service expects."""
    if isinstance(token, (bytes, bytearray)):
        return bytes(token).hex()
    return token.strip()


def is_retryable_registration_error(exc: Exception) -> bool:
    """Transport failures and 5xx answers may succeed on a later attempt."""
    if isinstance(exc, TransportFailure):
        return True
    return isinstance(exc, ServerError) and exc.is_server_side


class RegistrationReconciler:
    """Owns the invariant that the stored binding is registered with the service.

    All store reads and the binding computation run under one lock. The last
    binding this process confirmed is remembered in memory only, so repeated
    triggers for the same pair are dropped while a restart registers again.
    """

    def __init__(
        self,
        store: KeyValueStore,
        client: NotificationServiceClient,
        environment: EnvironmentSelector,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self._store = store
        self._client = client
        self._environment = environment
        self.retry_policy = retry_policy or RetryPolicy()
        self._lock = asyncio.Lock()
        self._confirmed: Optional[Tuple[str, str, str]] = None

    async def on_token_available(self, token: Union[bytes, str]) -> RegistrationOutcome:
        """Persist a freshly issued device token, then reconcile."""
        token = format_device_token(token)
        if not token:
            raise ValueError("Device token is empty")
        await self._store.set(DEVICE_TOKEN_KEY, token)
        logger.info(f"Device token stored: {token[:16]}...")
        return await self.reconcile()

    async def on_user_id_set(self, user_id: str) -> RegistrationOutcome:
        """Persist the user's ID, then reconcile.

        Raises:
            ValueError: if the ID is empty after trimming whitespace
        """
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValueError("Please enter a valid User ID")
        await self._store.set(USER_ID_KEY, user_id)
        logger.info(f"User ID stored: {user_id}")
        return await self.reconcile()

    async def reconcile(self) -> RegistrationOutcome:
        """Register the stored binding if both halves are known and it changed."""
        async with self._lock:
            user_id = await self._store.get(USER_ID_KEY)
            token = await self._store.get(DEVICE_TOKEN_KEY)

            if not user_id:
                logger.info("No User ID set - skipping automatic registration")
                return RegistrationOutcome(
                    RegistrationState.DEFERRED,
                    "Please set your OGS User ID",
                )
            if not token:
                logger.info("No device token available yet - registration deferred")
                return RegistrationOutcome(
                    RegistrationState.DEFERRED,
                    "User ID saved. Device will be registered when the app gets notification permission",
                    user_id=user_id,
                )

            base_url = await self._environment.base_url()
            if (base_url, user_id, token) == self._confirmed:
                logger.debug(f"Binding for user {user_id} already registered at {base_url}")
                return RegistrationOutcome(
                    RegistrationState.SKIPPED,
                    "Device already registered",
                    user_id=user_id,
                )
            return await self._register(base_url, user_id, token)

    async def reregister(self) -> RegistrationOutcome:
        """Register the stored binding again, even if already confirmed.

        Raises:
            IncompleteBinding: if the user ID or device token is missing
        """
        async with self._lock:
            user_id = await self._store.get(USER_ID_KEY)
            token = await self._store.get(DEVICE_TOKEN_KEY)
            if not user_id or not token:
                raise IncompleteBinding()
            base_url = await self._environment.base_url()
            return await self._register(base_url, user_id, token)

    async def binding_status(self) -> Tuple[BindingStatus, str]:
        """Which halves of the binding are known locally."""
        has_user_id = await self._store.get(USER_ID_KEY) is not None
        has_token = await self._store.get(DEVICE_TOKEN_KEY) is not None

        if has_user_id and has_token:
            return BindingStatus.READY, "Ready to receive notifications"
        if has_user_id:
            return BindingStatus.AWAITING_TOKEN, "User ID set, waiting for device token"
        return BindingStatus.NEEDS_USER_ID, "Please set your OGS User ID"

    async def _register(self, base_url: str, user_id: str, token: str) -> RegistrationOutcome:
        try:
            await retry_with_backoff(
                lambda: self._client.register(base_url, user_id, token),
                self.retry_policy,
                is_retryable_registration_error,
                description="Device registration",
            )
        except NotificationClientError as e:
            # Stored values stay as they are; the next trigger tries again
            logger.error(f"Failed to register device with server: {e}")
            return RegistrationOutcome(
                RegistrationState.FAILED,
                f"Registration failed: {e.message}",
                user_id=user_id,
                error=e,
            )

        self._confirmed = (base_url, user_id, token)
        logger.info(f"Device registered successfully for user {user_id}")
        return RegistrationOutcome(
            RegistrationState.REGISTERED,
            "Device registered",
            user_id=user_id,
        )
