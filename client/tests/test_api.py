"""Tests for the local control API."""
import httpx
import pytest
from fastapi.testclient import TestClient

from ogs_notify.main import create_app

from .conftest import SAMPLE_DIAGNOSTICS


@pytest.fixture
def api(services):
    with TestClient(create_app(services)) as test_client:
        yield test_client


def test_liveness(api):
    assert api.get("/health").json()["status"] == "healthy"


def test_status_before_anything_is_set(api):
    data = api.get("/api/status").json()

    assert data["binding"] == "needs_user_id"
    assert data["user_id"] is None
    assert data["has_device_token"] is False
    assert data["environment"]["name"] == "local"
    assert data["health"] is None


def test_set_user_then_token_registers_once(api, fake_service):
    fake_service.route("POST", "/register", json_body={"success": True})

    response = api.put("/api/user", json={"user_id": "1783478"})
    assert response.status_code == 200
    assert response.json()["state"] == "deferred"
    assert fake_service.requests == []

    response = api.post("/api/device-token", json={"device_token": "abcd1234"})
    assert response.status_code == 200
    assert response.json()["state"] == "registered"

    calls = fake_service.calls("POST", "/register")
    assert len(calls) == 1
    assert fake_service.body(calls[0]) == {"user_id": "1783478", "device_token": "abcd1234"}
    assert api.get("/api/status").json()["binding"] == "ready"


def test_registration_failure_is_reported_and_user_id_kept(api, fake_service):
    fake_service.route("POST", "/register", status=400)
    api.post("/api/device-token", json={"device_token": "abcd1234"})

    response = api.put("/api/user", json={"user_id": "1783478"})

    assert response.status_code == 502
    assert response.json()["detail"].startswith("User ID saved but server registration failed")
    assert api.get("/api/status").json()["user_id"] == "1783478"


def test_blank_user_id_is_rejected(api):
    response = api.put("/api/user", json={"user_id": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Please enter a valid User ID"


def test_reregister_without_token_conflicts(api):
    api.put("/api/user", json={"user_id": "1"})

    response = api.post("/api/registration")

    assert response.status_code == 409
    assert response.json()["error"] == "IncompleteBinding"


def test_reregister(api, fake_service):
    fake_service.route("POST", "/register")
    api.put("/api/user", json={"user_id": "1"})
    api.post("/api/device-token", json={"device_token": "tok"})

    response = api.post("/api/registration")

    assert response.status_code == 200
    assert len(fake_service.calls("POST", "/register")) == 2


def test_diagnostics_requires_user_id(api):
    response = api.get("/api/diagnostics")
    assert response.status_code == 400
    assert response.json()["error"] == "MissingUserId"


def test_diagnostics(api, fake_service):
    fake_service.route("GET", "/diagnostics/42", json_body=SAMPLE_DIAGNOSTICS)
    api.put("/api/user", json={"user_id": "42"})

    response = api.get("/api/diagnostics")

    assert response.status_code == 200
    assert response.json() == SAMPLE_DIAGNOSTICS


def test_diagnostics_decoding_failure(api, fake_service):
    fake_service.route("GET", "/diagnostics/42", json_body={"user_id": "42"})
    api.put("/api/user", json={"user_id": "42"})

    response = api.get("/api/diagnostics")

    assert response.status_code == 502
    assert response.json()["error"] == "DecodingFailure"


def test_manual_check(api, fake_service):
    fake_service.route("GET", "/check/42")
    fake_service.route("GET", "/diagnostics/42", json_body=SAMPLE_DIAGNOSTICS)
    api.put("/api/user", json={"user_id": "42"})

    response = api.post("/api/diagnostics/check")

    assert response.status_code == 200
    assert [r.url.path for r in fake_service.requests] == ["/check/42", "/diagnostics/42"]


def test_switch_environment_probes_new_server(api, fake_service):
    fake_service.route("GET", "/health", json_body={"status": "ok"})

    response = api.put("/api/environment", json={"environment": "production"})

    assert response.status_code == 200
    data = response.json()
    assert data["current"]["name"] == "production"
    assert data["health"]["state"] == "healthy"
    assert fake_service.requests[-1].url.host == "prod.test"
    assert fake_service.calls("POST", "/register") == []
    assert api.get("/api/environment").json()["current"]["name"] == "production"


def test_switch_to_unknown_environment(api):
    response = api.put("/api/environment", json={"environment": "staging"})
    assert response.status_code == 400


def test_health_offline(api, fake_service):
    fake_service.route(
        "GET", "/health",
        raises=lambda request: httpx.ConnectError("Connection refused", request=request),
    )

    data = api.get("/api/health").json()

    assert data["state"] == "offline"
    assert data["display_text"] == "Server: Offline"
    assert api.get("/api/status").json()["health"]["state"] == "offline"


def test_open_game_link(api, opened_urls):
    assert api.post("/api/links/open", json={"url": "ogs://game/555"}).json() == {
        "opened": True,
        "url": "https://online-go.com/game/555",
    }
    assert api.post("/api/links/open", json={"url": "ogs://notagame/555"}).json()["opened"] is False
    assert opened_urls == ["https://online-go.com/game/555"]


def test_notification_tap(api, opened_urls):
    payload = {"action": "open_game", "web_url": "https://online-go.com/game/9"}

    response = api.post("/api/notifications/tap", json={"payload": payload})

    assert response.json()["opened"] is True
    assert opened_urls == ["https://online-go.com/game/9"]


def test_play_game_opens_web_page(api, opened_urls):
    response = api.post("/api/games/555/open")

    assert response.json() == {"opened": True, "url": "https://online-go.com/game/555"}
    assert opened_urls == ["https://online-go.com/game/555"]


@pytest.mark.parametrize("game_id", ["abc", "0"])
def test_play_game_rejects_invalid_id(api, opened_urls, game_id):
    assert api.post(f"/api/games/{game_id}/open").status_code == 422
    assert opened_urls == []
