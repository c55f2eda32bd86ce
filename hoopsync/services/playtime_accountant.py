"""
Playtime service for the HoopSync live stat-keeper client.

Accrues clock seconds to the players on the floor and merges the server's
ledger without ever lowering a player's total.
"""
from typing import Dict, Iterable, Mapping, Optional

from ..models import Reconciled
from ..utils.constants import TEAM_KEYS

Ledger = Dict[str, int]


def merge_ledgers(local: Ledger, authoritative: Ledger) -> Ledger:
    """Adopt the server ledger, keeping the larger value per player."""
    merged = dict(local)
    for player_id, seconds in authoritative.items():
        merged[player_id] = max(int(seconds), merged.get(player_id, 0))
    return merged


class PlaytimeAccountant:
    """Per-team ``player_id -> seconds`` ledgers."""

    def __init__(self, player_ids: Optional[Mapping[str, Iterable[str]]] = None):
        self._ledgers: Dict[str, Reconciled[Ledger]] = {
            team: Reconciled({}, merge_ledgers) for team in TEAM_KEYS
        }
        if player_ids:
            self.reset(player_ids)

    def reset(self, player_ids: Mapping[str, Iterable[str]]) -> None:
        """Zero every rostered player's ledger entry."""
        for team in TEAM_KEYS:
            self._ledgers[team] = Reconciled(
                {pid: 0 for pid in player_ids.get(team, ())}, merge_ledgers
            )

    def tick(self, on_floor: Mapping[str, Iterable[str]]) -> None:
        """Credit one second to every on-floor player of both teams."""
        for team in TEAM_KEYS:
            ledger = self._ledgers[team].local
            for player_id in on_floor.get(team, ()):
                ledger[player_id] = ledger.get(player_id, 0) + 1

    def merge(self, team: str, mapping: Optional[Mapping[str, int]]) -> bool:
        """
        Merge a server ledger for one team.

        Returns:
            True if any local value changed
        """
        if team not in self._ledgers or mapping is None:
            return False
        return self._ledgers[team].merge({str(k): int(v) for k, v in mapping.items()})

    def seconds(self, team: str, player_id: str) -> int:
        return self._ledgers[team].local.get(player_id, 0)

    def ledger(self, team: str) -> Ledger:
        return dict(self._ledgers[team].local)

    def is_empty(self) -> bool:
        return all(not self._ledgers[team].local for team in TEAM_KEYS)

    def export(self) -> Dict[str, Ledger]:
        """Copy of both ledgers, safe to hand to another thread."""
        return {team: self.ledger(team) for team in TEAM_KEYS}
