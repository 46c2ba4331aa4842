"""Notification service client - HTTP calls against a selected endpoint."""
import logging
import socket
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import settings
from ..errors import DecodingFailure, InvalidEndpoint, ServerError, TransportFailure
from ..schemas.diagnostics import UserDiagnostics
from ..schemas.health import ServerHealthStatus
from ..schemas.registration import DeviceRegistration

logger = logging.getLogger(__name__)

# Resolver error text, for errors that arrive without the socket.gaierror cause
DNS_FAILURE_MARKERS = (
    "name or service not known",
    "temporary failure in name resolution",
    "nodename nor servname provided",
    "no address associated with hostname",
    "getaddrinfo failed",
)


def is_dns_failure(exc: BaseException) -> bool:
    """True when a connect error came from host name resolution."""
    seen = set()
    current = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, socket.gaierror):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    error_str = str(exc).lower()
    return any(marker in error_str for marker in DNS_FAILURE_MARKERS)


class NotificationServiceClient:
    """Stateless client for the OGS notification service.

    Every operation takes the base URL explicitly, so the endpoint is decided
    by the caller at call time and concurrent calls never share config.
    Nothing is retried here; each failure is raised as a typed error.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._transport = transport

    @staticmethod
    def _endpoint(base_url: str, path: str) -> str:
        """Join base URL and path, rejecting URLs that cannot be requested."""
        try:
            url = httpx.URL(base_url)
        except httpx.InvalidURL as e:
            raise InvalidEndpoint(base_url) from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidEndpoint(base_url)
        return f"{base_url.rstrip('/')}{path}"

    async def _request(self, method: str, base_url: str, path: str, **kwargs) -> httpx.Response:
        url = self._endpoint(base_url, path)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                return await client.request(method, url, **kwargs)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidEndpoint(base_url) from e
        except httpx.ConnectError as e:
            if is_dns_failure(e):
                raise TransportFailure(f"Cannot find host: {e}", offline=False) from e
            raise TransportFailure(str(e) or type(e).__name__, offline=True) from e
        except httpx.NetworkError as e:
            # Connection refused / unreachable / dropped
            raise TransportFailure(str(e) or type(e).__name__, offline=True) from e
        except httpx.HTTPError as e:
            raise TransportFailure(str(e) or type(e).__name__, offline=False) from e

    @staticmethod
    def _user_path(prefix: str, user_id: str) -> str:
        return f"{prefix}/{quote(user_id, safe='')}"

    async def register(self, base_url: str, user_id: str, device_token: str) -> None:
        """Bind a device token to a user ID on the service.

        Raises:
            InvalidEndpoint, TransportFailure, ServerError
        """
        body = DeviceRegistration(user_id=user_id, device_token=device_token)
        logger.info(f"Registering device {device_token[:16]}... for user {user_id} at {base_url}")

        response = await self._request("POST", base_url, "/register", json=body.model_dump())

        logger.info(f"Registration response status: {response.status_code}")
        if response.status_code != 200:
            logger.debug(f"Registration response body: {response.text}")
            raise ServerError(response.status_code, response.text)

    async def fetch_diagnostics(self, base_url: str, user_id: str) -> UserDiagnostics:
        """Fetch the server-side diagnostics snapshot for a user.

        Raises:
            InvalidEndpoint, TransportFailure, ServerError, DecodingFailure
        """
        response = await self._request("GET", base_url, self._user_path("/diagnostics", user_id))

        if response.status_code != 200:
            raise ServerError(response.status_code, response.text)

        try:
            return UserDiagnostics.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Decoding error for diagnostics of user {user_id}: {e}")
            raise DecodingFailure(str(e)) from e

    async def trigger_manual_check(self, base_url: str, user_id: str) -> None:
        """Ask the service to re-check this user's games now. The body is ignored."""
        response = await self._request("GET", base_url, self._user_path("/check", user_id))

        if response.status_code != 200:
            raise ServerError(response.status_code, response.text)

    async def probe_health(self, base_url: str) -> ServerHealthStatus:
        """Probe GET /health and classify the result.

        Connectivity failures map to offline so callers can tell a dead
        network apart from a server that answered badly.
        """
        try:
            response = await self._request("GET", base_url, "/health")
        except InvalidEndpoint:
            return ServerHealthStatus.error("Invalid URL")
        except TransportFailure as e:
            if e.offline:
                return ServerHealthStatus.offline()
            return ServerHealthStatus.error(e.message)

        if response.status_code != 200:
            return ServerHealthStatus.error(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            data = None

        status = data.get("status") if isinstance(data, dict) else None
        if isinstance(status, str):
            return ServerHealthStatus.healthy(status)
        return ServerHealthStatus.healthy("OK")
