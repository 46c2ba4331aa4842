"""Tests for the diagnostics synchronizer."""
import httpx
import pytest

from ogs_notify.errors import DecodingFailure, MissingUserId, ServerError
from ogs_notify.models.local_state import USER_ID_KEY
from ogs_notify.schemas.diagnostics import GameInfo
from ogs_notify.services.diagnostics import DiagnosticsSynchronizer

from .conftest import SAMPLE_DIAGNOSTICS


def _snapshot(**overrides):
    body = dict(SAMPLE_DIAGNOSTICS)
    body.update(overrides)
    return body


@pytest.fixture
def synchronizer(store, client, environment):
    return DiagnosticsSynchronizer(store, client, environment, settle_delay=0.0625, poll_timeout=0.25)


@pytest.mark.asyncio
async def test_load_replaces_snapshot(synchronizer, fake_service):
    fake_service.route("GET", "/diagnostics/42", json_body=_snapshot(total_active_games=3))
    first = await synchronizer.load_diagnostics("42")

    fake_service.route("GET", "/diagnostics/42", json_body=_snapshot(total_active_games=0))
    second = await synchronizer.load_diagnostics("42")

    assert first.total_active_games == 3
    assert synchronizer.snapshot is second
    assert synchronizer.snapshot.total_active_games == 0


@pytest.mark.asyncio
async def test_failed_load_keeps_previous_snapshot(synchronizer, fake_service):
    fake_service.route("GET", "/diagnostics/42", json_body=_snapshot())
    previous = await synchronizer.load_diagnostics("42")

    fake_service.route("GET", "/diagnostics/42", json_body={"user_id": "42"})
    with pytest.raises(DecodingFailure):
        await synchronizer.load_diagnostics("42")

    assert synchronizer.snapshot is previous


@pytest.mark.asyncio
async def test_load_for_current_user_requires_user_id(synchronizer, fake_service):
    with pytest.raises(MissingUserId):
        await synchronizer.load_for_current_user()
    assert fake_service.requests == []


@pytest.mark.asyncio
async def test_load_for_current_user(synchronizer, store, fake_service):
    await store.set(USER_ID_KEY, "42")
    fake_service.route("GET", "/diagnostics/42", json_body=_snapshot())

    diagnostics = await synchronizer.load_for_current_user()

    assert diagnostics.user_id == "42"


@pytest.mark.asyncio
async def test_manual_check_then_refetch(synchronizer, fake_service):
    fake_service.route("GET", "/check/42", json_body={"ok": True})
    fake_service.route("GET", "/diagnostics/42", json_body=_snapshot(last_server_check_time=1700000000))

    diagnostics = await synchronizer.trigger_manual_check("42")

    paths = [r.url.path for r in fake_service.requests]
    assert paths == ["/check/42", "/diagnostics/42"]
    assert diagnostics.last_server_check_time == 1700000000


@pytest.mark.asyncio
async def test_manual_check_polls_until_server_check_advances(synchronizer, fake_service):
    fake_service.route("GET", "/diagnostics/42", json_body=_snapshot(last_server_check_time=100))
    await synchronizer.load_diagnostics("42")

    fake_service.route("GET", "/check/42")
    fake_service.route_sequence("GET", "/diagnostics/42", [
        httpx.Response(200, json=_snapshot(last_server_check_time=100)),
        httpx.Response(200, json=_snapshot(last_server_check_time=160)),
    ])

    diagnostics = await synchronizer.trigger_manual_check("42")

    assert diagnostics.last_server_check_time == 160
    assert len(fake_service.calls("GET", "/diagnostics/42")) == 3


@pytest.mark.asyncio
async def test_manual_check_gives_up_after_poll_timeout(synchronizer, fake_service):
    fake_service.route("GET", "/diagnostics/42", json_body=_snapshot(last_server_check_time=100))
    await synchronizer.load_diagnostics("42")
    fake_service.route("GET", "/check/42")

    diagnostics = await synchronizer.trigger_manual_check("42")

    assert diagnostics.last_server_check_time == 100
    # One initial load plus poll_timeout / settle_delay fetches
    assert len(fake_service.calls("GET", "/diagnostics/42")) == 1 + 4


@pytest.mark.asyncio
async def test_manual_check_failure_does_not_refetch(synchronizer, fake_service):
    fake_service.route("GET", "/check/42", status=500)

    with pytest.raises(ServerError):
        await synchronizer.trigger_manual_check("42")

    assert fake_service.calls("GET", "/diagnostics/42") == []


def test_game_urls():
    game = GameInfo(
        game_id=555,
        last_move_timestamp=1700000000000,
        current_player=1,
        is_your_turn=True,
        game_name="Test",
    )
    assert game.web_url == "https://online-go.com/game/555"
    assert game.app_url == "ogs://game/555"
    assert game.last_move_date.timestamp() == 1700000000
