"""Tests for the local JSON API."""
import pytest

from hoopsync.errors import RemoteStoreError, UnauthorizedError
from hoopsync.ui.web_app import WebAppState, create_app

from conftest import AWAY_ROSTER, HOME_ROSTER, snapshot_payload


def _roster(entries):
    return [{"jersey": j, "name": n} for j, n in entries]


@pytest.fixture
def app_state(config, live, tmp_path):
    config.preferences_path = str(tmp_path / "prefs.json")
    return WebAppState(config, live_session=live)


@pytest.fixture
def client(app_state):
    app = create_app(app_state)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def started(client):
    response = client.post("/api/game/start", json={
        "game_id": "G1",
        "home_team": "James Monroe",
        "away_team": "Opponent",
        "home_roster": _roster(HOME_ROSTER),
        "away_roster": _roster(AWAY_ROSTER),
    })
    assert response.status_code == 200
    return response.get_json()["state"]


def test_health_and_options(client):
    assert client.get("/api/health").get_json()["success"]
    options = client.get("/api/options").get_json()
    assert "2M" in [e["code"] for e in options["events"]]
    assert options["periods"] == ["Q1", "Q2", "Q3", "Q4", "OT"]


def test_state_without_game(client):
    state = client.get("/api/state").get_json()["state"]
    assert state["open"] is False


def test_start_game_remembers_setup(client, app_state, started):
    assert started["session"]["role"] == "primary"
    prefs = client.get("/api/preferences").get_json()["preferences"]
    assert prefs["game_id"] == "G1"
    assert prefs["home_roster"][0] == {"jersey": "3", "name": "Hines"}


def test_start_game_with_bad_roster(client):
    response = client.post("/api/game/start", json={
        "game_id": "G1", "home_roster": _roster(HOME_ROSTER[:3]), "away_roster": _roster(AWAY_ROSTER),
    })
    assert response.status_code == 400
    assert not response.get_json()["success"]


def test_save_preferences_sets_token(client, app_state):
    response = client.post("/api/preferences", json={"access_token": "new-token", "home_team": "Monroe"})
    assert response.status_code == 200
    assert app_state.config.access_token == "new-token"
    assert app_state.preferences_service.load().home_team == "Monroe"


def test_stat_and_score(client, fake_client, started):
    response = client.post("/api/stat", json={"team": "home", "player_id": "H3", "event_type": "3M"})
    body = response.get_json()
    assert response.status_code == 200
    assert body["state"]["score"]["local"]["home"] == 3
    assert fake_client.actions()[-1] == "stat"


def test_stat_for_bench_player_rejected(client, started):
    response = client.post("/api/stat", json={"team": "home", "player_id": "H20", "event_type": "2M"})
    assert response.status_code == 400


def test_substitution(client, started):
    response = client.post("/api/substitution", json={"team": "home", "player_out": "H3", "player_in": "H20"})
    assert response.status_code == 200
    on_floor = [p["player_id"] for p in response.get_json()["state"]["lineup"]["home"]["on_floor"]]
    assert "H20" in on_floor and "H3" not in on_floor


def test_substitution_rejected(client, started):
    response = client.post("/api/substitution", json={"team": "home", "player_out": "H20", "player_in": "H21"})
    assert response.status_code == 400
    assert "not on the floor" in response.get_json()["error"]

    response = client.post("/api/substitution", json={"team": "home", "player_out": "H3"})
    assert response.status_code == 400


def test_clock_routes(client, started):
    client.post("/api/clock/start")
    response = client.post("/api/clock/set", json={"clock": "7:45"})
    assert response.get_json()["state"]["clock_display"] == "07:45"

    response = client.post("/api/clock/period", json={"period": "Q2"})
    session = response.get_json()["state"]["session"]
    assert (session["period"], session["clock_sec"], session["running"]) == ("Q2", 480, False)

    assert client.post("/api/clock/set", json={"clock": "abc"}).status_code == 400
    assert client.post("/api/clock/set", json={}).status_code == 400


def test_clock_route_without_game(client):
    assert client.post("/api/clock/start").status_code == 400


def test_join_as_secondary(client, fake_client, stored_game):
    fake_client.stored_game = stored_game
    response = client.post("/api/game/join", json={"game_id": "G1"})
    state = response.get_json()["state"]
    assert state["session"]["role"] == "secondary"
    assert state["clock_display"] == "05:00"

    response = client.post("/api/clock/start")
    assert response.get_json()["applied"] is False


def test_join_errors(client, fake_client):
    assert client.post("/api/game/join", json={}).status_code == 400
    assert client.post("/api/game/join", json={"game_id": "NOPE"}).status_code == 502


def test_games_unauthorized(client, fake_client):
    def reject():
        raise UnauthorizedError()

    fake_client.list_games = reject
    response = client.get("/api/games")
    assert response.status_code == 401
    assert response.get_json()["error"] == "Unauthorized (check token)"


def test_games_store_failure(client, fake_client):
    def fail():
        raise RemoteStoreError("list_games timed out")

    fake_client.list_games = fail
    assert client.get("/api/games").status_code == 502


def test_end_and_leave(client, fake_client, started):
    response = client.post("/api/game/end", json={"reset_live": False})
    assert response.get_json()["state"]["open"] is True
    assert fake_client.actions()[-2:] == ["set_playtime", "end_game"]

    response = client.post("/api/game/leave")
    assert response.get_json()["state"]["open"] is False


def test_state_reflects_polled_snapshot(client, app_state, fake_client, started):
    fake_client.snapshots.append(snapshot_payload(away_pts=5, rows=[{"seq": 1, "event_type": "3M"}]))
    app_state.live_session.sync.poll_once()

    state = client.get("/api/state").get_json()["state"]
    assert state["score"]["local"]["away"] == 5
    assert state["play_by_play"][0]["seq"] == 1
