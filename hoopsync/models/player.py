"""
Player and roster models for the HoopSync live stat-keeper client.

A player's id is the team prefix followed by the jersey number, so the
same jersey can appear on both teams without colliding.
"""
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..errors import RosterValidationError
from ..utils.constants import TEAM_PREFIXES


@dataclass(frozen=True)
class Player:
    """A rostered player; immutable for the life of a session."""
    player_id: str
    jersey: str
    name: str

    def to_json(self) -> dict:
        return asdict(self)


class Roster:
    """
    Ordered, id-unique list of players for one team.

    Entries keep the order they were given in; the first five are the
    default starters.
    """

    def __init__(self, team: str, players: Iterable[Player] = ()):
        self.team = team
        self._players: Dict[str, Player] = {}
        for player in players:
            if player.player_id in self._players:
                raise RosterValidationError(
                    f"Duplicate player id {player.player_id} on {team} roster"
                )
            self._players[player.player_id] = player

    @classmethod
    def from_entries(
        cls,
        team: str,
        entries: Iterable[Union[Tuple[str, str], dict]],
    ) -> "Roster":
        """
        Build a roster from ``(jersey, name)`` pairs or player dictionaries.

        Dictionaries may carry ``jersey``/``name`` and optionally an explicit
        ``player_id`` (as returned by the remote store).

        Raises:
            RosterValidationError: If the team is unknown, a jersey is not
                                   numeric, or two entries share an id
        """
        if team not in TEAM_PREFIXES:
            raise RosterValidationError(f"Unknown team: {team}")
        prefix = TEAM_PREFIXES[team]

        players: List[Player] = []
        for entry in entries:
            if isinstance(entry, dict):
                jersey = str(entry.get("jersey", "")).strip()
                name = str(entry.get("name", "")).strip()
                player_id = str(entry.get("player_id") or f"{prefix}{jersey}")
            else:
                jersey, name = (str(part).strip() for part in entry)
                player_id = f"{prefix}{jersey}"
            if not jersey.isdigit():
                raise RosterValidationError(f"Jersey must be numeric: {jersey!r}")
            players.append(Player(player_id=player_id, jersey=jersey, name=name))
        return cls(team, players)

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._players

    def __iter__(self):
        return iter(self._players.values())

    def __len__(self) -> int:
        return len(self._players)

    def get(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    @property
    def ids(self) -> List[str]:
        return list(self._players.keys())

    def to_json(self) -> List[dict]:
        return [p.to_json() for p in self._players.values()]
