"""
Services package for the HoopSync live stat-keeper client.

This package contains service classes that handle business logic.
Includes factory for dependency injection.
"""
from .event_clock import EventClock
from .lineup_tracker import LineupTracker, SubResult
from .playtime_accountant import PlaytimeAccountant
from .score_reconciler import ScoreReconciler, points_for
from .remote_store_client import RemoteStoreClient
from .scheduler import RepeatingTask, ThreadDispatcher, ImmediateDispatcher
from .sync_engine import SyncEngine, GameComponents
from .live_session import LiveGameSession
from .preferences_service import PreferencesService, KeeperPreferences
from .service_factory import ServiceFactory

__all__ = [
    "EventClock", "LineupTracker", "SubResult", "PlaytimeAccountant",
    "ScoreReconciler", "points_for", "RemoteStoreClient", "RepeatingTask",
    "ThreadDispatcher", "ImmediateDispatcher", "SyncEngine", "GameComponents",
    "LiveGameSession", "PreferencesService", "KeeperPreferences", "ServiceFactory"
]
