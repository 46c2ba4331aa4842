"""Error types raised by the notification client."""
from typing import Optional


class NotificationClientError(Exception):
    """Base class for failures talking to the notification service."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidEndpoint(NotificationClientError):
    """The configured base URL cannot be used to build a request."""

    def __init__(self, base_url: str):
        super().__init__(f"Invalid server URL: {base_url!r}")
        self.base_url = base_url


class TransportFailure(NotificationClientError):
    """The request never produced an HTTP response.

    offline is True for connectivity-level failures (connection refused,
    network unreachable, connection lost) and False for everything else.
    """

    def __init__(self, message: str, offline: bool = False):
        super().__init__(message)
        self.offline = offline


class ServerError(NotificationClientError):
    """The service answered with a status other than 200."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__(f"Server error: HTTP {status_code}")
        self.status_code = status_code
        self.body = body

    @property
    def is_server_side(self) -> bool:
        return self.status_code >= 500


class DecodingFailure(NotificationClientError):
    """A 200 response whose body does not match the expected shape."""

    def __init__(self, detail: str):
        super().__init__("Failed to decode server response")
        self.detail = detail


class StateError(Exception):
    """Local state does not allow the requested action."""


class MissingUserId(StateError):
    def __init__(self):
        super().__init__("No user ID configured. Please set your OGS user ID.")


class IncompleteBinding(StateError):
    def __init__(self):
        super().__init__("Missing User ID or device token")
