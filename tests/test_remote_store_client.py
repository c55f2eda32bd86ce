"""Tests for the HTTP transport to the remote store."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from hoopsync.config import AppConfig, ConfigurationError
from hoopsync.errors import ProtocolError, RemoteStoreError, UnauthorizedError
from hoopsync.models import EndGameRequest
from hoopsync.services import RemoteStoreClient
from hoopsync.services.remote_store_client import unwrap_callback

from conftest import snapshot_payload


def make_response(text: str = "", status: int = 200):
    response = MagicMock()
    response.text = text
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status}")
    return response


def echo_callback(body: dict):
    """GET side effect that wraps ``body`` in whatever callback was requested."""
    def _get(url, params, timeout):
        return make_response(f"{params['callback']}({json.dumps(body)});")
    return _get


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(config, http):
    return RemoteStoreClient(config, http=http)


def test_post_sends_json_with_token_and_timeout(client, http):
    http.post.return_value = make_response()

    client.post(EndGameRequest("G1", reset_live=False))

    args, kwargs = http.post.call_args
    assert args[0] == "https://store.example/exec"
    assert json.loads(kwargs["data"]) == {
        "access_token": "secret", "action": "end_game", "game_id": "G1", "reset_live": False,
    }
    assert kwargs["timeout"] == client.config.write_timeout_sec


def test_post_failures_become_remote_store_errors(client, http):
    http.post.side_effect = requests.Timeout()
    with pytest.raises(RemoteStoreError, match="timed out"):
        client.post(EndGameRequest("G1"))

    http.post.side_effect = None
    http.post.return_value = make_response(status=500)
    with pytest.raises(RemoteStoreError):
        client.post(EndGameRequest("G1"))


def test_missing_token_fails_before_any_request(http):
    client = RemoteStoreClient(AppConfig(endpoint_url="https://store.example/exec"), http=http)
    with pytest.raises(ConfigurationError, match="token"):
        client.list_games()
    http.get.assert_not_called()


def test_snapshot_read_unwraps_callback(client, http):
    http.get.side_effect = echo_callback(snapshot_payload(home_pts=6, rows=[{"seq": 5}]))

    snapshot = client.get_live_snapshot("G1", 4)

    assert snapshot.home_pts == 6
    _, kwargs = http.get.call_args
    assert kwargs["params"]["view"] == "api"
    assert kwargs["params"]["action"] == "get_live_snapshot"
    assert kwargs["params"]["since_pbp_seq"] == "4"
    assert kwargs["timeout"] == client.config.read_timeout_sec


def test_unauthorized_read(client, http):
    http.get.side_effect = echo_callback({"ok": False, "error": "unauthorized token"})
    with pytest.raises(UnauthorizedError):
        client.list_games()


def test_read_timeouts_and_empty_bodies(client, http):
    http.get.side_effect = requests.ConnectionError("offline")
    with pytest.raises(RemoteStoreError, match="load error"):
        client.list_games()

    http.get.side_effect = None
    http.get.return_value = make_response("")
    with pytest.raises(RemoteStoreError, match="No response"):
        client.list_games()


def test_unwrap_callback_variants():
    assert unwrap_callback('cb_1({"ok": true})', "cb_1") == {"ok": True}
    assert unwrap_callback('/**/ cb_1({"ok": true});\n', "cb_1") == {"ok": True}
    assert unwrap_callback('{"ok": true}') == {"ok": True}
    with pytest.raises(ProtocolError):
        unwrap_callback('other({"ok": true})', "cb_1")
    with pytest.raises(ProtocolError):
        unwrap_callback("cb_1(<html>)", "cb_1")
