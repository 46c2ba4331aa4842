import json
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from ogs_notify.config import Settings
from ogs_notify.services.container import build_services
from ogs_notify.services.environment import EnvironmentSelector, ServerEnvironment
from ogs_notify.services.remote_client import NotificationServiceClient
from ogs_notify.store import MemoryKeyValueStore

LOCAL_URL = "http://local.test:8080"
PRODUCTION_URL = "https://prod.test"

BASE_URLS = {
    ServerEnvironment.LOCAL: LOCAL_URL,
    ServerEnvironment.PRODUCTION: PRODUCTION_URL,
}

SAMPLE_DIAGNOSTICS = {
    "user_id": "42",
    "device_token_registered": True,
    "device_token_preview": "abcd",
    "last_notification_time": 0,
    "monitored_games": [],
    "total_active_games": 0,
    "server_check_interval": "5m",
    "last_server_check_time": None,
}


class FakeNotificationService:
    """In-process stand-in for the notification service behind httpx.MockTransport.

    Routes are keyed by (method, path); each responder is called per request
    so responses are built fresh. Unrouted requests get a 404.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.transport = httpx.MockTransport(self.handle)

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body=None,
        content: Optional[bytes] = None,
        raises: Optional[Callable[[httpx.Request], Exception]] = None,
    ):
        def responder(request: httpx.Request) -> httpx.Response:
            if raises is not None:
                raise raises(request)
            if content is not None:
                return httpx.Response(status, content=content)
            if json_body is not None:
                return httpx.Response(status, json=json_body)
            return httpx.Response(status)

        self._routes[(method, path)] = responder

    def route_sequence(self, method: str, path: str, responses: List[httpx.Response]):
        """Serve the given responses in order, repeating the last one."""
        remaining = list(responses)

        def responder(request: httpx.Request) -> httpx.Response:
            response = remaining.pop(0) if len(remaining) > 1 else remaining[0]
            return httpx.Response(response.status_code, content=response.content)

        self._routes[(method, path)] = responder

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self._routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        return responder(request)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content)


@pytest.fixture
def fake_service():
    return FakeNotificationService()


@pytest.fixture
def client(fake_service):
    return NotificationServiceClient(timeout=5, transport=fake_service.transport)


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def environment(store, client):
    return EnvironmentSelector(store, client, BASE_URLS)


@pytest.fixture
def test_settings():
    return Settings(
        register_max_attempts=3,
        register_base_delay_seconds=0,
        check_settle_delay_seconds=0,
        check_poll_timeout_seconds=0,
        health_refresh_seconds=0,
    )


@pytest.fixture
def opened_urls():
    return []


@pytest.fixture
def services(store, client, test_settings, opened_urls):
    return build_services(
        store,
        client=client,
        config=test_settings,
        base_urls=BASE_URLS,
        opener=opened_urls.append,
    )
