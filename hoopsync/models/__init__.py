"""
Models package for the HoopSync live stat-keeper client.

This package contains the core data models used throughout the application.
"""
from .game_session import GameSession, Period, Role, default_game_id
from .player import Player, Roster
from .events import StatEvent, SubEvent, MetaEvent
from .play_by_play import PlayByPlayEntry, PlayByPlayLog
from .reconciled import Reconciled, authoritative_wins
from .api_messages import (
    WriteRequest, InitGameRequest, SetStartersRequest, SetPlaytimeRequest,
    StatRequest, SubRequest, SetMetaRequest, EndGameRequest, ReadQuery,
    GameSummary, StoredGame, LiveSnapshot, SnapshotMeta
)

__all__ = [
    "GameSession", "Period", "Role", "default_game_id", "Player", "Roster",
    "StatEvent", "SubEvent", "MetaEvent", "PlayByPlayEntry", "PlayByPlayLog",
    "Reconciled", "authoritative_wins", "WriteRequest", "InitGameRequest",
    "SetStartersRequest", "SetPlaytimeRequest", "StatRequest", "SubRequest",
    "SetMetaRequest", "EndGameRequest", "ReadQuery", "GameSummary",
    "StoredGame", "LiveSnapshot", "SnapshotMeta"
]
