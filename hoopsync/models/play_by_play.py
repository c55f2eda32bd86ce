"""
Play-by-play log rows pulled from the remote store.

The local log only ever appends rows newer than the last sequence number
seen and keeps a bounded trailing window.
"""
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional

from ..errors import ProtocolError
from ..utils import PBP_WINDOW

_KNOWN_FIELDS = ("ts_iso", "period", "clock_sec", "team", "player_id", "event_type", "delta")


@dataclass(frozen=True)
class PlayByPlayEntry:
    """One sequence-numbered row of the game log."""
    seq: int
    ts_iso: Optional[str] = None
    period: Optional[str] = None
    clock_sec: Optional[int] = None
    team: Optional[str] = None
    player_id: Optional[str] = None
    event_type: Optional[str] = None
    delta: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_json(row: dict) -> "PlayByPlayEntry":
        """
        Parse a row from the snapshot payload.

        Raises:
            ProtocolError: If the row is not an object or has no integer ``seq``
        """
        if not isinstance(row, dict):
            raise ProtocolError(f"Play-by-play row must be an object, got {type(row).__name__}")
        try:
            seq = int(row["seq"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProtocolError(f"Play-by-play row without a valid seq: {row!r}") from e

        def _opt_int(key: str) -> Optional[int]:
            value = row.get(key)
            if value is None or value == "":
                return None
            try:
                return int(value)
            except (TypeError, ValueError):
                return None

        return PlayByPlayEntry(
            seq=seq,
            ts_iso=row.get("ts_iso"),
            period=row.get("period"),
            clock_sec=_opt_int("clock_sec"),
            team=row.get("team"),
            player_id=row.get("player_id"),
            event_type=row.get("event_type"),
            delta=_opt_int("delta"),
            extra={k: v for k, v in row.items() if k != "seq" and k not in _KNOWN_FIELDS},
        )

    def to_json(self) -> dict:
        data = {
            "seq": self.seq,
            "ts_iso": self.ts_iso,
            "period": self.period,
            "clock_sec": self.clock_sec,
            "team": self.team,
            "player_id": self.player_id,
            "event_type": self.event_type,
            "delta": self.delta,
        }
        data.update(self.extra)
        return data


class PlayByPlayLog:
    """Append-only, bounded, in-order view of the game log."""

    def __init__(self, window: int = PBP_WINDOW):
        self._entries: Deque[PlayByPlayEntry] = deque(maxlen=max(1, window))
        self.last_seq = 0

    def append_new(self, entries: Iterable[PlayByPlayEntry]) -> List[PlayByPlayEntry]:
        """
        Append rows newer than the last seen sequence, in the order given.

        Rows with ``seq`` at or below the last recorded one are dropped, so a
        resent boundary row is harmless.

        Returns:
            The rows actually appended
        """
        appended: List[PlayByPlayEntry] = []
        for entry in entries:
            if entry.seq <= self.last_seq:
                continue
            self._entries.append(entry)
            self.last_seq = entry.seq
            appended.append(entry)
        return appended

    def clear(self) -> None:
        self._entries.clear()
        self.last_seq = 0

    @property
    def entries(self) -> List[PlayByPlayEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
