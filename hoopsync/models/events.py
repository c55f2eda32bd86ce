"""
Immutable records of stat-keeper actions.

Each event is created once on a user action, carries a fresh ``event_id``
and the game time it was logged at, and is sent to the remote store once.
"""
import uuid
from dataclasses import dataclass, field
from typing import Optional

from ..utils import now_iso


def new_event_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class StatEvent:
    """A stat credited to one player (shot, rebound, foul, ...)."""
    game_id: str
    period: str
    clock_sec: int
    team: str
    player_id: str
    event_type: str
    delta: int = 1
    event_id: str = field(default_factory=new_event_id)
    ts_iso: str = field(default_factory=now_iso)

    def to_fields(self) -> dict:
        return {
            "event_id": self.event_id,
            "ts_iso": self.ts_iso,
            "game_id": self.game_id,
            "period": self.period,
            "clock_sec": self.clock_sec,
            "team": self.team,
            "player_id": self.player_id,
            "event_type": self.event_type,
            "delta": self.delta,
        }


@dataclass(frozen=True)
class SubEvent:
    """One player leaving the floor for another."""
    game_id: str
    period: str
    clock_sec: int
    team: str
    player_out: str
    player_in: str
    event_id: str = field(default_factory=new_event_id)
    ts_iso: str = field(default_factory=now_iso)

    def to_fields(self) -> dict:
        return {
            "event_id": self.event_id,
            "ts_iso": self.ts_iso,
            "game_id": self.game_id,
            "period": self.period,
            "clock_sec": self.clock_sec,
            "team": self.team,
            "player_out": self.player_out,
            "player_in": self.player_in,
        }


@dataclass(frozen=True)
class MetaEvent:
    """
    A change to the game clock or period.

    ``reason`` tags audited manual edits such as ``quarter_change_reset``;
    periodic clock publications carry no reason.
    """
    game_id: str
    period: str
    clock_sec: int
    reason: Optional[str] = None
    event_id: str = field(default_factory=new_event_id)
    ts_iso: str = field(default_factory=now_iso)
