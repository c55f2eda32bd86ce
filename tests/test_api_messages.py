"""Tests for typed request bodies and response parsing."""

import pytest

from hoopsync.errors import LineupValidationError, ProtocolError, RemoteStoreError, UnauthorizedError
from hoopsync.models import (
    EndGameRequest, Period, ReadQuery, SetMetaRequest, SetStartersRequest, StatEvent, StatRequest
)
from hoopsync.models.api_messages import parse_game_state, parse_games, parse_live_snapshot

from conftest import snapshot_payload


def test_stat_payload_carries_all_fields():
    event = StatEvent(game_id="G1", period="Q1", clock_sec=470, team="James Monroe",
                      player_id="H3", event_type="2M", delta=1)
    payload = StatRequest(event).to_payload("secret")

    assert payload["access_token"] == "secret"
    assert payload["action"] == "stat"
    assert set(payload) == {
        "access_token", "action", "event_id", "ts_iso", "game_id", "period",
        "clock_sec", "team", "player_id", "event_type", "delta",
    }
    assert payload["event_id"] == event.event_id


def test_event_ids_are_unique():
    a = StatEvent("G1", "Q1", 480, "Home", "H3", "2M")
    b = StatEvent("G1", "Q1", 480, "Home", "H3", "2M")
    assert a.event_id != b.event_id


def test_meta_request_only_carries_audit_fields_when_reasoned():
    plain = SetMetaRequest("G1", "Home", "Away", "Q1", 300).to_payload("t")
    assert "reason" not in plain

    audited = SetMetaRequest("G1", "Home", "Away", "Q2", 480, meta_event_id="m1",
                             reason="quarter_change_reset").to_payload("t")
    assert audited["reason"] == "quarter_change_reset"
    assert audited["meta_event_id"] == "m1"


def test_end_game_and_starters_payloads():
    assert EndGameRequest("G1", reset_live=True).to_payload("t")["reset_live"] is True
    with pytest.raises(LineupValidationError):
        SetStartersRequest(("H1", "H2"), ("A1", "A2", "A3", "A4", "A5"))


def test_read_query_params():
    params = ReadQuery.live_snapshot("G1", 40).to_params("secret")
    assert params == {
        "view": "api", "action": "get_live_snapshot", "access_token": "secret",
        "game_id": "G1", "since_pbp_seq": "40",
    }


def test_parse_live_snapshot():
    snap = parse_live_snapshot(snapshot_payload(
        period="Q2", clock_sec=300, home_pts=4,
        on_floor_home=["H3", "H10", "H12", "H13", "H33"],
        playtime_home={"H3": "61"},
        rows=[{"seq": 41}, {"seq": 42}],
    ))
    assert snap.meta.period is Period.Q2
    assert snap.meta.clock_sec == 300
    assert snap.home_pts == 4
    assert snap.playtime_home == {"H3": 61}
    assert snap.latest_seq == 42
    assert [r.seq for r in snap.pbp_rows] == [41, 42]


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("live"),
        lambda d: d["live"]["meta"].update(period="Q7"),
        lambda d: d["live"]["meta"].update(clock_sec=-3),
        lambda d: d["live"]["score"].update(home_pts="lots"),
        lambda d: d["live"].update(on_floor_home="H3"),
        lambda d: d["pbp"].update(rows="41"),
    ],
)
def test_malformed_snapshots_raise_protocol_error(mutate):
    data = snapshot_payload()
    mutate(data)
    with pytest.raises(ProtocolError):
        parse_live_snapshot(data)


def test_not_ok_envelopes():
    with pytest.raises(UnauthorizedError, match="check token"):
        parse_games({"ok": False, "error": "Unauthorized"})
    with pytest.raises(RemoteStoreError, match="sheet missing"):
        parse_games({"ok": False, "error": "sheet missing"})
    with pytest.raises(ProtocolError):
        parse_games(["not", "an", "object"])


def test_parse_games_and_game_state():
    games = parse_games({"ok": True, "games": [
        {"game_id": "G1", "home_team": "JM", "away_team": "Opp", "period": "Q4",
         "clock_sec": 0, "archive_tab": " G1_archive "},
    ]})
    assert games[0].archive_tab == "G1_archive"
    assert games[0].clock_sec == 0

    stored = parse_game_state({"ok": True, "game": {"game_id": "G1", "period": "Q3"}}, default_clock_sec=480)
    assert stored.period is Period.Q3
    assert stored.clock_sec == 480
    assert stored.starters_home == []
    assert stored.playtime_home is None


def test_snapshot_skips_rows_without_seq():
    snap = parse_live_snapshot(snapshot_payload(home_pts=9, rows=[{"seq": 41}, {"seq": ""}, {"seq": 42}]))

    assert [r.seq for r in snap.pbp_rows] == [41, 42]
    assert snap.home_pts == 9


def test_parse_games_skips_rows_without_game_id():
    games = parse_games({"ok": True, "games": [
        {"home_team": "JM"}, {"game_id": "G2"}, "junk",
    ]})
    assert [g.game_id for g in games] == ["G2"]
