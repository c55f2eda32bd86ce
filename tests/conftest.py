"""Shared fixtures for the HoopSync tests."""
from typing import Dict, List, Optional

import pytest

from hoopsync.config import AppConfig
from hoopsync.errors import RemoteStoreError
from hoopsync.models import StoredGame, Period
from hoopsync.models.api_messages import parse_live_snapshot
from hoopsync.services import ImmediateDispatcher, LiveGameSession

HOME_ROSTER = [("3", "Hines"), ("10", "Taylor"), ("12", "Miller"), ("13", "Surface"),
               ("33", "Mann"), ("20", "Comer"), ("21", "Gardinier")]
AWAY_ROSTER = [("1", "Ames"), ("2", "Bell"), ("4", "Cruz"), ("5", "Dunn"),
               ("7", "Eads"), ("8", "Ford")]


def snapshot_payload(
    game_id: str = "G1",
    period: str = "Q1",
    clock_sec: int = 480,
    home_pts: int = 0,
    away_pts: int = 0,
    on_floor_home: Optional[List[str]] = None,
    on_floor_away: Optional[List[str]] = None,
    playtime_home: Optional[Dict[str, int]] = None,
    playtime_away: Optional[Dict[str, int]] = None,
    rows: Optional[List[dict]] = None,
) -> dict:
    """Raw ``get_live_snapshot`` response body."""
    rows = rows or []
    return {
        "ok": True,
        "live": {
            "meta": {"game_id": game_id, "home_team": "James Monroe", "away_team": "Opponent",
                     "period": period, "clock_sec": clock_sec},
            "score": {"home_pts": home_pts, "away_pts": away_pts},
            "starters_home": [], "starters_away": [],
            "on_floor_home": on_floor_home or [],
            "on_floor_away": on_floor_away or [],
            "playtime_home": playtime_home or {},
            "playtime_away": playtime_away or {},
        },
        "pbp": {"rows": rows, "latest_seq": rows[-1]["seq"] if rows else 0},
    }


class FakeStoreClient:
    """Records writes and serves canned reads in place of the HTTP client."""

    def __init__(self):
        self.posts = []
        self.snapshot_calls = []
        self.snapshots: List[object] = []
        self.stored_game: Optional[StoredGame] = None
        self.games = []
        self.fail_posts = False

    def post(self, request):
        if self.fail_posts:
            raise RemoteStoreError("network down")
        self.posts.append(request)

    def actions(self) -> List[str]:
        return [r.ACTION for r in self.posts]

    def get_live_snapshot(self, game_id, since_pbp_seq):
        self.snapshot_calls.append((game_id, since_pbp_seq))
        item = self.snapshots.pop(0) if self.snapshots else RemoteStoreError("no snapshot queued")
        if isinstance(item, Exception):
            raise item
        return parse_live_snapshot(item)

    def get_game_state(self, game_id):
        if self.stored_game is None:
            raise RemoteStoreError("get_game_state failed")
        return self.stored_game

    def list_games(self):
        return list(self.games)


class ManualTask:
    """Periodic task stand-in that only runs when a test calls it."""
    created: List["ManualTask"] = []

    def __init__(self, name, interval, callback):
        self.name = name
        self.interval = interval
        self.callback = callback
        self.started = False
        self.stopped = False
        ManualTask.created.append(self)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def run_once(self):
        self.callback()


@pytest.fixture
def config():
    return AppConfig(endpoint_url="https://store.example/exec?x=1", access_token="secret")


@pytest.fixture
def fake_client():
    return FakeStoreClient()


@pytest.fixture
def live(config, fake_client):
    ManualTask.created = []
    session = LiveGameSession(config, client=fake_client, dispatcher=ImmediateDispatcher(),
                              task_factory=ManualTask)
    yield session
    session.leave()


@pytest.fixture
def primary(live):
    live.start_new_game("G1", "James Monroe", "Opponent", HOME_ROSTER, AWAY_ROSTER)
    return live


@pytest.fixture
def stored_game():
    return StoredGame(
        game_id="G1",
        home_team="James Monroe",
        away_team="Opponent",
        period=Period.Q2,
        clock_sec=300,
        starters_home=["H3", "H10", "H12", "H13", "H33"],
        starters_away=["A1", "A2", "A4", "A5", "A7"],
        playtime_home={"H3": 120},
        playtime_away=None,
        home_roster=[{"player_id": f"H{j}", "jersey": j, "name": n} for j, n in HOME_ROSTER],
        away_roster=[{"player_id": f"A{j}", "jersey": j, "name": n} for j, n in AWAY_ROSTER],
    )
