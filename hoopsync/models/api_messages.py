"""
Typed messages exchanged with the remote spreadsheet store.

Writes are one dataclass per ``action`` that renders its own JSON body.
Reads are parsed from the response envelope into explicit types; any shape
that does not match raises ``ProtocolError`` instead of leaking loosely
typed dictionaries into the reconciling components.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple, TypeVar

from ..errors import LineupValidationError, ProtocolError, RemoteStoreError, UnauthorizedError
from ..utils import FLOOR_SIZE, get_logger
from .events import StatEvent, SubEvent
from .game_session import Period
from .play_by_play import PlayByPlayEntry

log = get_logger(__name__)

T = TypeVar("T")


# ==================== Outbound writes ==================== #

@dataclass(frozen=True)
class WriteRequest:
    """Base class for fire-and-forget POST bodies."""
    ACTION: ClassVar[str] = ""

    def fields(self) -> Dict[str, Any]:
        raise NotImplementedError

    def to_payload(self, access_token: str) -> Dict[str, Any]:
        payload = {"access_token": access_token, "action": self.ACTION}
        payload.update(self.fields())
        return payload


@dataclass(frozen=True)
class InitGameRequest(WriteRequest):
    ACTION: ClassVar[str] = "init_game"
    game_id: str
    home_team: str
    away_team: str
    period: str
    clock_sec: int
    home_roster: Tuple[dict, ...]
    away_roster: Tuple[dict, ...]

    def fields(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "period": self.period,
            "clock_sec": self.clock_sec,
            "home_roster": [dict(p) for p in self.home_roster],
            "away_roster": [dict(p) for p in self.away_roster],
        }


@dataclass(frozen=True)
class SetStartersRequest(WriteRequest):
    ACTION: ClassVar[str] = "set_starters"
    starters_home: Tuple[str, ...]
    starters_away: Tuple[str, ...]

    def __post_init__(self):
        for team, ids in (("home", self.starters_home), ("away", self.starters_away)):
            if len(set(ids)) != FLOOR_SIZE or len(ids) != FLOOR_SIZE:
                raise LineupValidationError(f"Need exactly {FLOOR_SIZE} starters for {team}.")

    def fields(self) -> Dict[str, Any]:
        return {
            "starters_home": list(self.starters_home),
            "starters_away": list(self.starters_away),
        }


@dataclass(frozen=True)
class SetPlaytimeRequest(WriteRequest):
    ACTION: ClassVar[str] = "set_playtime"
    playtime_home: Dict[str, int] = field(default_factory=dict)
    playtime_away: Dict[str, int] = field(default_factory=dict)

    def fields(self) -> Dict[str, Any]:
        return {
            "playtime_home": dict(self.playtime_home),
            "playtime_away": dict(self.playtime_away),
        }


@dataclass(frozen=True)
class StatRequest(WriteRequest):
    ACTION: ClassVar[str] = "stat"
    event: StatEvent

    def fields(self) -> Dict[str, Any]:
        return self.event.to_fields()


@dataclass(frozen=True)
class SubRequest(WriteRequest):
    ACTION: ClassVar[str] = "sub"
    event: SubEvent

    def fields(self) -> Dict[str, Any]:
        return self.event.to_fields()


@dataclass(frozen=True)
class SetMetaRequest(WriteRequest):
    ACTION: ClassVar[str] = "set_meta"
    game_id: str
    home_team: str
    away_team: str
    period: str
    clock_sec: int
    meta_event_id: Optional[str] = None
    reason: Optional[str] = None

    def fields(self) -> Dict[str, Any]:
        data = {
            "game_id": self.game_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "period": self.period,
            "clock_sec": self.clock_sec,
        }
        if self.reason:
            data["meta_event_id"] = self.meta_event_id
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class EndGameRequest(WriteRequest):
    ACTION: ClassVar[str] = "end_game"
    game_id: str
    reset_live: bool = False

    def fields(self) -> Dict[str, Any]:
        return {"game_id": self.game_id, "reset_live": bool(self.reset_live)}


# ==================== Inbound reads ==================== #

@dataclass(frozen=True)
class ReadQuery:
    """Query parameters for one read action (``view=api`` is always set)."""
    action: str
    params: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def list_games(cls) -> "ReadQuery":
        return cls("list_games")

    @classmethod
    def game_state(cls, game_id: str) -> "ReadQuery":
        return cls("get_game_state", (("game_id", game_id),))

    @classmethod
    def live_snapshot(cls, game_id: str, since_pbp_seq: int) -> "ReadQuery":
        return cls("get_live_snapshot", (("game_id", game_id), ("since_pbp_seq", int(since_pbp_seq))))

    def to_params(self, access_token: str) -> Dict[str, str]:
        params = {"view": "api", "action": self.action, "access_token": access_token}
        for key, value in self.params:
            if value is not None:
                params[key] = str(value)
        return params


def check_envelope(data: Any, action: str) -> dict:
    """
    Validate the ``{ok, error?, ...}`` response envelope.

    Raises:
        ProtocolError: If the body is not an object
        UnauthorizedError: If the store rejected the token
        RemoteStoreError: For any other not-ok response
    """
    if not isinstance(data, dict):
        raise ProtocolError(f"{action}: response is not an object")
    if not data.get("ok"):
        message = str(data.get("error") or f"{action} failed")
        if "unauthorized" in message.lower():
            raise UnauthorizedError()
        raise RemoteStoreError(message)
    return data


def _parse_rows(rows: List[Any], parser: Callable[[Any], T], action: str) -> List[T]:
    """Parse list rows one by one; malformed rows are logged and skipped."""
    parsed: List[T] = []
    for row in rows:
        try:
            parsed.append(parser(row))
        except ProtocolError as e:
            log.warning("%s: skipping malformed row: %s", action, e)
    return parsed


def _as_int(value: Any, what: str, minimum: Optional[int] = 0) -> int:
    if isinstance(value, bool):
        raise ProtocolError(f"{what} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"{what} must be an integer, got {value!r}") from e
    if minimum is not None and number < minimum:
        raise ProtocolError(f"{what} must be >= {minimum}, got {number}")
    return number


def _as_period(value: Any, what: str = "period") -> Period:
    try:
        return Period.parse(value)
    except ValueError as e:
        raise ProtocolError(f"Unknown {what}: {value!r}") from e


def _as_id_list(value: Any, what: str) -> List[str]:
    if value is None or value == "":
        return []
    if not isinstance(value, list):
        raise ProtocolError(f"{what} must be a list")
    return [str(v) for v in value]


def _as_playtime(value: Any, what: str) -> Optional[Dict[str, int]]:
    if value is None or value == "":
        return None
    if not isinstance(value, dict):
        raise ProtocolError(f"{what} must be an object")
    return {str(k): _as_int(v, f"{what}[{k}]") for k, v in value.items()}


@dataclass(frozen=True)
class GameSummary:
    """A row of the previous-games list."""
    game_id: str
    home_team: str = ""
    away_team: str = ""
    period: Optional[str] = None
    clock_sec: Optional[int] = None
    date_iso: Optional[str] = None
    archive_tab: str = ""

    @staticmethod
    def from_json(row: Any) -> "GameSummary":
        if not isinstance(row, dict) or not row.get("game_id"):
            raise ProtocolError("Game row must be an object with a game_id")
        clock = row.get("clock_sec")
        return GameSummary(
            game_id=str(row["game_id"]),
            home_team=str(row.get("home_team") or ""),
            away_team=str(row.get("away_team") or ""),
            period=row.get("period") or None,
            clock_sec=int(clock) if isinstance(clock, (int, float)) and not isinstance(clock, bool) else None,
            date_iso=row.get("date_iso") or None,
            archive_tab=str(row.get("archive_tab") or "").strip(),
        )

    def to_json(self) -> dict:
        return {
            "game_id": self.game_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "period": self.period,
            "clock_sec": self.clock_sec,
            "date_iso": self.date_iso,
            "archive_tab": self.archive_tab,
        }


def parse_games(data: Any) -> List[GameSummary]:
    body = check_envelope(data, "list_games")
    games = body.get("games")
    if not isinstance(games, list):
        return []
    return _parse_rows(games, GameSummary.from_json, "list_games")


@dataclass(frozen=True)
class StoredGame:
    """Full saved state of one game, used to resume it."""
    game_id: str
    home_team: str
    away_team: str
    period: Period
    clock_sec: int
    starters_home: List[str] = field(default_factory=list)
    starters_away: List[str] = field(default_factory=list)
    playtime_home: Optional[Dict[str, int]] = None
    playtime_away: Optional[Dict[str, int]] = None
    home_roster: Optional[List[dict]] = None
    away_roster: Optional[List[dict]] = None
    archive_tab: str = ""


def parse_game_state(data: Any, default_clock_sec: int) -> StoredGame:
    body = check_envelope(data, "get_game_state")
    game = body.get("game")
    if not isinstance(game, dict) or not game.get("game_id"):
        raise ProtocolError("get_game_state: missing game")

    clock = game.get("clock_sec")
    clock_sec = _as_int(clock, "clock_sec") if clock not in (None, "") else default_clock_sec

    def _roster(key: str) -> Optional[List[dict]]:
        value = game.get(key)
        if isinstance(value, list) and all(isinstance(p, dict) for p in value):
            return value
        return None

    return StoredGame(
        game_id=str(game["game_id"]),
        home_team=str(game.get("home_team") or ""),
        away_team=str(game.get("away_team") or ""),
        period=_as_period(game.get("period") or "Q1"),
        clock_sec=clock_sec,
        starters_home=_as_id_list(game.get("starters_home"), "starters_home"),
        starters_away=_as_id_list(game.get("starters_away"), "starters_away"),
        playtime_home=_as_playtime(game.get("playtime_home"), "playtime_home"),
        playtime_away=_as_playtime(game.get("playtime_away"), "playtime_away"),
        home_roster=_roster("home_roster"),
        away_roster=_roster("away_roster"),
        archive_tab=str(game.get("archive_tab") or "").strip(),
    )


@dataclass(frozen=True)
class SnapshotMeta:
    game_id: str
    home_team: str
    away_team: str
    period: Period
    clock_sec: int


@dataclass(frozen=True)
class LiveSnapshot:
    """Point-in-time server view of the live game plus new log rows."""
    meta: SnapshotMeta
    home_pts: int
    away_pts: int
    starters_home: List[str] = field(default_factory=list)
    starters_away: List[str] = field(default_factory=list)
    on_floor_home: List[str] = field(default_factory=list)
    on_floor_away: List[str] = field(default_factory=list)
    playtime_home: Optional[Dict[str, int]] = None
    playtime_away: Optional[Dict[str, int]] = None
    pbp_rows: List[PlayByPlayEntry] = field(default_factory=list)
    latest_seq: int = 0

    def on_floor(self, team: str) -> List[str]:
        return self.on_floor_home if team == "home" else self.on_floor_away

    def playtime(self, team: str) -> Optional[Dict[str, int]]:
        return self.playtime_home if team == "home" else self.playtime_away


def parse_live_snapshot(data: Any) -> LiveSnapshot:
    """
    Parse a ``get_live_snapshot`` response.

    Raises:
        ProtocolError: If the ``live`` block or its meta/score are malformed
        UnauthorizedError / RemoteStoreError: For not-ok envelopes
    """
    body = check_envelope(data, "get_live_snapshot")
    live = body.get("live")
    if not isinstance(live, dict):
        raise ProtocolError("get_live_snapshot: missing live block")

    meta = live.get("meta")
    if not isinstance(meta, dict) or not meta.get("game_id"):
        raise ProtocolError("get_live_snapshot: missing meta")
    score = live.get("score")
    if not isinstance(score, dict):
        raise ProtocolError("get_live_snapshot: missing score")

    pbp = body.get("pbp") or {}
    if not isinstance(pbp, dict):
        raise ProtocolError("get_live_snapshot: pbp must be an object")
    rows = pbp.get("rows") or []
    if not isinstance(rows, list):
        raise ProtocolError("get_live_snapshot: pbp.rows must be a list")
    latest = pbp.get("latest_seq")

    return LiveSnapshot(
        meta=SnapshotMeta(
            game_id=str(meta["game_id"]),
            home_team=str(meta.get("home_team") or ""),
            away_team=str(meta.get("away_team") or ""),
            period=_as_period(meta.get("period")),
            clock_sec=_as_int(meta.get("clock_sec"), "clock_sec"),
        ),
        home_pts=_as_int(score.get("home_pts", 0), "home_pts"),
        away_pts=_as_int(score.get("away_pts", 0), "away_pts"),
        starters_home=_as_id_list(live.get("starters_home"), "starters_home"),
        starters_away=_as_id_list(live.get("starters_away"), "starters_away"),
        on_floor_home=_as_id_list(live.get("on_floor_home"), "on_floor_home"),
        on_floor_away=_as_id_list(live.get("on_floor_away"), "on_floor_away"),
        playtime_home=_as_playtime(live.get("playtime_home"), "playtime_home"),
        playtime_away=_as_playtime(live.get("playtime_away"), "playtime_away"),
        pbp_rows=_parse_rows(rows, PlayByPlayEntry.from_json, "get_live_snapshot"),
        latest_seq=_as_int(latest, "latest_seq") if latest not in (None, "") else 0,
    )
