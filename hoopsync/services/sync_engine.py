"""
Sync service for the HoopSync live stat-keeper client.

Drives the outbound fire-and-forget writes and the inbound snapshot poll,
and merges each snapshot into the clock, lineup, playtime and score
components according to this client's role.
"""
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..config import AppConfig, ConfigurationError
from ..errors import RemoteStoreError, UnauthorizedError, ValidationError
from ..models import (
    EndGameRequest, GameSession, GameSummary, InitGameRequest, LiveSnapshot,
    MetaEvent, Period, PlayByPlayEntry, PlayByPlayLog, SetMetaRequest,
    SetPlaytimeRequest, SetStartersRequest, StatEvent, StatRequest,
    StoredGame, SubEvent, SubRequest, WriteRequest
)
from ..utils import get_logger
from ..utils.constants import TEAM_KEYS
from .event_clock import EventClock
from .lineup_tracker import LineupTracker
from .playtime_accountant import PlaytimeAccountant
from .remote_store_client import RemoteStoreClient
from .scheduler import RepeatingTask
from .score_reconciler import ScoreReconciler

log = get_logger(__name__)


@dataclass
class GameComponents:
    """Component instances for one open game, owned by the session coordinator."""
    session: GameSession
    clock: EventClock
    lineup: LineupTracker
    playtime: PlaytimeAccountant
    score: ScoreReconciler
    pbp: PlayByPlayLog


class SyncEngine:
    """
    Outbound writes and the inbound poll loop for the open game.

    Callers hold ``lock`` while touching component state; network I/O is
    always done outside it.
    """

    def __init__(
        self,
        client: RemoteStoreClient,
        dispatcher,
        lock: threading.RLock,
        config: AppConfig,
        on_status: Optional[Callable[[str], None]] = None,
        task_factory: Callable[..., RepeatingTask] = RepeatingTask,
    ):
        self.client = client
        self.dispatcher = dispatcher
        self.lock = lock
        self.config = config
        self.on_status = on_status or (lambda message: None)
        self.task_factory = task_factory
        self._components: Optional[GameComponents] = None
        self._stopped = True
        self._poll_task: Optional[RepeatingTask] = None
        self.last_poll_error: Optional[str] = None
        self.polls_applied = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def attach(self, components: GameComponents) -> None:
        """Bind the engine to a newly opened game."""
        self.stop()
        self._components = components
        self._stopped = False
        self.last_poll_error = None
        self.polls_applied = 0

    def start_polling(self) -> None:
        if self._components is None:
            raise RuntimeError("No game attached")
        if self._poll_task is not None:
            self._poll_task.stop()
        self._poll_task = self.task_factory("poll", self.config.poll_interval_sec, self.poll_once)
        self._poll_task.start()

    def stop(self) -> None:
        """Stop polling; results of in-flight polls will be discarded."""
        self._stopped = True
        if self._poll_task is not None:
            self._poll_task.stop()
            self._poll_task = None

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def components(self) -> Optional[GameComponents]:
        return self._components

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------
    def poll_once(self) -> bool:
        """
        Fetch one snapshot and merge it.

        Every failure is caught here so the loop keeps its schedule.

        Returns:
            True if a snapshot was applied
        """
        with self.lock:
            components = self._components
            if self._stopped or components is None:
                return False
            game_id = components.session.game_id
            since = components.pbp.last_seq

        try:
            snapshot = self.client.get_live_snapshot(game_id, since)
        except UnauthorizedError as e:
            self.last_poll_error = str(e)
            self.on_status(str(e))
            log.warning("Snapshot poll for %s rejected: %s", game_id, e)
            return False
        except (RemoteStoreError, ValidationError, ConfigurationError) as e:
            self.last_poll_error = str(e)
            log.debug("Snapshot poll for %s failed: %s", game_id, e)
            return False

        with self.lock:
            if self._stopped or self._components is not components:
                log.debug("Discarding snapshot for %s; game was closed", game_id)
                return False
            applied = self.apply_snapshot(snapshot)
        if applied:
            self.last_poll_error = None
        return applied

    def apply_snapshot(self, snapshot: LiveSnapshot) -> bool:
        """
        Merge a snapshot into the attached components (lock must be held).

        Returns:
            False if the snapshot belongs to another game and was discarded
        """
        components = self._components
        if components is None:
            return False
        session = components.session
        if snapshot.meta.game_id != session.game_id:
            log.warning(
                "Discarding snapshot for %s while %s is open",
                snapshot.meta.game_id, session.game_id,
            )
            return False

        components.clock.apply_snapshot(snapshot.meta.period, snapshot.meta.clock_sec)
        if snapshot.meta.home_team:
            session.home_team = snapshot.meta.home_team
        if snapshot.meta.away_team:
            session.away_team = snapshot.meta.away_team

        for team in TEAM_KEYS:
            components.lineup.merge_on_floor(team, snapshot.on_floor(team))
            components.playtime.merge(team, snapshot.playtime(team))
        components.score.merge(snapshot.home_pts, snapshot.away_pts)

        self.append_play_by_play(snapshot.pbp_rows)
        self.polls_applied += 1
        return True

    def append_play_by_play(self, rows: List[PlayByPlayEntry]) -> List[PlayByPlayEntry]:
        if self._components is None:
            return []
        return self._components.pbp.append_new(rows)

    def list_games(self) -> List[GameSummary]:
        return self.client.list_games()

    def get_game_state(self, game_id: str) -> StoredGame:
        return self.client.get_game_state(game_id)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------
    def send(self, request: WriteRequest, done_message: str = "", failed_message: str = "") -> Future:
        """Issue a write without waiting for it; failures are logged, not retried."""
        return self.dispatcher.submit(self._deliver, [request], done_message, failed_message)

    def send_sequence(self, requests: List[WriteRequest], done_message: str = "", failed_message: str = "") -> Future:
        """Issue writes that must reach the store in order, as one background job."""
        return self.dispatcher.submit(self._deliver, list(requests), done_message, failed_message)

    def _deliver(self, requests: List[WriteRequest], done_message: str, failed_message: str) -> bool:
        for request in requests:
            try:
                self.client.post(request)
            except (RemoteStoreError, ConfigurationError) as e:
                log.warning("Write %s failed: %s", request.ACTION, e)
                if failed_message:
                    self.on_status(failed_message)
                return False
        if done_message:
            self.on_status(done_message)
        return True

    def _require(self) -> GameComponents:
        if self._components is None:
            raise RuntimeError("No game attached")
        return self._components

    def publish_init(self) -> Future:
        c = self._require()
        request = InitGameRequest(
            game_id=c.session.game_id,
            home_team=c.session.home_team,
            away_team=c.session.away_team,
            period=c.session.period.value,
            clock_sec=c.session.clock_sec,
            home_roster=tuple(c.lineup.roster("home").to_json()),
            away_roster=tuple(c.lineup.roster("away").to_json()),
        )
        return self.send(request, failed_message="Init failed. Check endpoint/token.")

    def starters_request(self) -> SetStartersRequest:
        c = self._require()
        return SetStartersRequest(
            starters_home=tuple(c.lineup.on_floor("home")),
            starters_away=tuple(c.lineup.on_floor("away")),
        )

    def playtime_request(self) -> SetPlaytimeRequest:
        ledgers = self._require().playtime.export()
        return SetPlaytimeRequest(playtime_home=ledgers["home"], playtime_away=ledgers["away"])

    def publish_starters(self) -> Future:
        """Send the starting fives followed by the (zeroed) playtime ledgers."""
        return self.send_sequence(
            [self.starters_request(), self.playtime_request()],
            done_message="Starters saved to sheet.",
            failed_message="Failed saving starters.",
        )

    def publish_playtime(self) -> Future:
        return self.send(self.playtime_request())

    def publish_stat(self, team: str, player_id: str, event_type: str, delta: int = 1) -> StatEvent:
        """Create and send a stat stamped with the server-confirmed game time."""
        c = self._require()
        period, clock_sec = c.clock.stamp()
        event = StatEvent(
            game_id=c.session.game_id,
            period=period,
            clock_sec=clock_sec,
            team=c.session.team_name(team),
            player_id=player_id,
            event_type=event_type,
            delta=delta,
        )
        self.send(StatRequest(event), failed_message="Publish failed (network?).")
        return event

    def publish_sub(self, team: str, player_out: str, player_in: str) -> SubEvent:
        c = self._require()
        period, clock_sec = c.clock.stamp()
        event = SubEvent(
            game_id=c.session.game_id,
            period=period,
            clock_sec=clock_sec,
            team=c.session.team_name(team),
            player_out=player_out,
            player_in=player_in,
        )
        self.send(SubRequest(event), failed_message="Sub publish failed.")
        return event

    def meta_request(self, event: Optional[MetaEvent] = None) -> SetMetaRequest:
        c = self._require()
        return SetMetaRequest(
            game_id=c.session.game_id,
            home_team=c.session.home_team,
            away_team=c.session.away_team,
            period=event.period if event else c.session.period.value,
            clock_sec=event.clock_sec if event else c.session.clock_sec,
            meta_event_id=event.event_id if event else None,
            reason=event.reason if event else None,
        )

    def publish_meta(self, event: Optional[MetaEvent] = None) -> Future:
        """Send the clock/meta; the clock waits for the store to echo it back."""
        request = self.meta_request(event)
        self._require().clock.note_published(Period.parse(request.period), request.clock_sec)
        return self.send(request)

    def publish_end(self, reset_live: bool = False) -> Future:
        """Push the final playtime, then archive the game."""
        c = self._require()
        return self.send_sequence(
            [self.playtime_request(), EndGameRequest(game_id=c.session.game_id, reset_live=reset_live)],
            done_message="Game archived. Open Previous Games → Generate Sheet.",
            failed_message="End game failed.",
        )
