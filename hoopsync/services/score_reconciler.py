"""
Score service for the HoopSync live stat-keeper client.

Scoring taps update the local score straight away; the next snapshot
overwrites it whenever the server disagrees.
"""
from typing import Dict

from ..models import Reconciled
from ..utils import POINT_VALUES
from ..utils.constants import TEAM_KEYS


def points_for(event_type: str, delta: int = 1) -> int:
    """Points credited by a stat; zero for non-scoring events or non-positive deltas."""
    if isinstance(delta, bool) or not isinstance(delta, int) or delta <= 0:
        return 0
    return POINT_VALUES.get(event_type, 0)


class ScoreReconciler:
    """Local (optimistic) and authoritative score for both teams."""

    def __init__(self, home: int = 0, away: int = 0):
        self._scores: Dict[str, Reconciled[int]] = {
            "home": Reconciled(max(0, home)),
            "away": Reconciled(max(0, away)),
        }

    def apply_local_delta(self, team: str, event_type: str, delta: int = 1) -> int:
        """
        Add the points of a scoring event to the local score.

        Returns:
            Points added (zero when the event does not score)
        """
        if team not in self._scores:
            return 0
        points = points_for(event_type, delta)
        if points:
            self._scores[team].local += points
        return points

    def merge(self, home_pts: int, away_pts: int) -> bool:
        """
        Adopt the snapshot score; the server wins on any divergence.

        Returns:
            True if the local score changed
        """
        changed_home = self._scores["home"].merge(max(0, int(home_pts)))
        changed_away = self._scores["away"].merge(max(0, int(away_pts)))
        return changed_home or changed_away

    @property
    def local(self) -> Dict[str, int]:
        return {team: self._scores[team].local for team in TEAM_KEYS}

    @property
    def authoritative(self) -> Dict[str, int]:
        return {team: self._scores[team].authoritative or 0 for team in TEAM_KEYS}

    def to_json(self) -> dict:
        return {"local": self.local, "authoritative": self.authoritative}
