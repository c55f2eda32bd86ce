"""
GameSession model for the HoopSync live stat-keeper client.

This module contains the identifying and clock state of one live game as
seen by a single stat-keeper client.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from ..utils import PERIOD_LENGTH_SEC


class Period(str, Enum):
    """Game periods in playing order."""
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"
    OT = "OT"

    @classmethod
    def parse(cls, value) -> "Period":
        """Accept a Period or its string code (case-insensitive)."""
        if isinstance(value, Period):
            return value
        return cls(str(value).strip().upper())


class Role(str, Enum):
    """Which side of the clock authority this client is on."""
    PRIMARY = "primary"
    SECONDARY = "secondary"


def default_game_id(today: Optional[date] = None) -> str:
    """Game id used when the keeper has not typed one, e.g. ``JM_2026-10-18_001``."""
    today = today or date.today()
    return f"JM_{today.isoformat()}_001"


@dataclass
class GameSession:
    """
    Represents one live game from the point of view of this client.

    Attributes:
        game_id: Stable key of the game in the remote store
        home_team: Display name of the home team
        away_team: Display name of the away team
        role: Primary (started the game) or Secondary (joined/resumed)
        period: Current period
        clock_sec: Seconds left in the period, counting down
        running: Whether this client's countdown is running
    """
    game_id: str
    home_team: str
    away_team: str
    role: Role
    period: Period = Period.Q1
    clock_sec: int = PERIOD_LENGTH_SEC
    running: bool = False

    @property
    def is_primary(self) -> bool:
        return self.role is Role.PRIMARY

    def team_name(self, team: str) -> str:
        return self.home_team if team == "home" else self.away_team

    def team_key(self, name_or_key: str) -> Optional[str]:
        """Map a team key or display name to ``"home"``/``"away"``."""
        if name_or_key in ("home", "away"):
            return name_or_key
        if name_or_key == self.home_team:
            return "home"
        if name_or_key == self.away_team:
            return "away"
        return None

    def to_json(self) -> dict:
        return {
            "game_id": self.game_id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "role": self.role.value,
            "period": self.period.value,
            "clock_sec": self.clock_sec,
            "running": self.running,
        }
