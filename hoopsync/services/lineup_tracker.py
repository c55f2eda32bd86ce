"""
Lineup service for the HoopSync live stat-keeper client.

Keeps each team's five on-floor players and validates substitutions and
starter selections against the roster.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..errors import LineupValidationError
from ..models import Player, Roster
from ..utils import FLOOR_SIZE
from ..utils.constants import TEAM_KEYS


@dataclass(frozen=True)
class SubResult:
    """Outcome of a substitution request."""
    ok: bool
    reason: str = ""


class LineupTracker:
    """
    On-floor / bench partition for both teams.

    Every mutation is all-or-nothing: a rejected request leaves the
    on-floor lists exactly as they were.
    """

    def __init__(self, rosters: Dict[str, Roster]):
        self._rosters: Dict[str, Roster] = {team: rosters[team] for team in TEAM_KEYS}
        self._on_floor: Dict[str, List[str]] = {team: [] for team in TEAM_KEYS}

    def _check_team(self, team: str) -> None:
        if team not in self._rosters:
            raise LineupValidationError(f"Unknown team: {team}")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def roster(self, team: str) -> Roster:
        self._check_team(team)
        return self._rosters[team]

    def on_floor(self, team: str) -> List[str]:
        self._check_team(team)
        return list(self._on_floor[team])

    def on_floor_players(self, team: str) -> List[Player]:
        roster = self.roster(team)
        return [roster.get(pid) for pid in self._on_floor[team] if pid in roster]

    def bench(self, team: str) -> List[Player]:
        roster = self.roster(team)
        on = set(self._on_floor[team])
        return [p for p in roster if p.player_id not in on]

    def is_set(self, team: str) -> bool:
        self._check_team(team)
        return len(self._on_floor[team]) == FLOOR_SIZE

    def is_on_floor(self, team: str, player_id: str) -> bool:
        self._check_team(team)
        return player_id in self._on_floor[team]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def validate_five(self, team: str, ids: Iterable[str]) -> List[str]:
        ids = list(ids)
        if len(ids) != FLOOR_SIZE:
            raise LineupValidationError(f"Need exactly {FLOOR_SIZE} starters for {team}, got {len(ids)}.")
        duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
        if duplicates:
            raise LineupValidationError(f"Duplicate starters for {team}: {', '.join(duplicates)}")
        missing = [pid for pid in ids if pid not in self._rosters[team]]
        if missing:
            raise LineupValidationError(f"Not on the {team} roster: {', '.join(missing)}")
        return ids

    def set_starters(self, team: str, ids: Iterable[str]) -> None:
        """
        Replace a team's on-floor set with its starting five.

        Raises:
            LineupValidationError: Unless ids are exactly five distinct
                                   roster members
        """
        self._check_team(team)
        self._on_floor[team] = self.validate_five(team, ids)

    def default_starters(self, team: str) -> List[str]:
        """First five players in roster order."""
        roster = self.roster(team)
        if len(roster) < FLOOR_SIZE:
            raise LineupValidationError(f"Need at least {FLOOR_SIZE} players on the {team} roster.")
        return roster.ids[:FLOOR_SIZE]

    def apply_sub(self, team: str, out_id: str, in_id: str) -> SubResult:
        """Swap ``out_id`` for ``in_id`` in the team's on-floor set."""
        if team not in self._rosters:
            return SubResult(False, f"Unknown team: {team}")

        current = self._on_floor[team]
        if out_id not in current:
            return SubResult(False, f"{out_id} is not on the floor")
        if in_id in current:
            return SubResult(False, f"{in_id} is already on the floor")
        if in_id not in self._rosters[team]:
            return SubResult(False, f"{in_id} is not on the {team} roster")

        updated = [in_id if pid == out_id else pid for pid in current]
        if len(set(updated)) != FLOOR_SIZE:
            return SubResult(False, f"Lineup for {team} must have {FLOOR_SIZE} players")

        self._on_floor[team] = updated
        return SubResult(True)

    def merge_on_floor(self, team: str, ids: Optional[Iterable[str]]) -> bool:
        """
        Adopt the server's on-floor list for a team.

        Any well-formed five replaces the local set; other shapes (empty,
        wrong size, unknown players) are ignored.

        Returns:
            True if the local set changed
        """
        if team not in self._rosters or ids is None:
            return False
        try:
            incoming = self.validate_five(team, ids)
        except LineupValidationError:
            return False
        if incoming == self._on_floor[team]:
            return False
        self._on_floor[team] = incoming
        return True

    def to_json(self) -> dict:
        return {
            team: {
                "on_floor": [p.to_json() for p in self.on_floor_players(team)],
                "bench": [p.to_json() for p in self.bench(team)],
            }
            for team in TEAM_KEYS
        }
