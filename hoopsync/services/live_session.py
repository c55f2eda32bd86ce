"""
Live game session coordinator for the HoopSync live stat-keeper client.

Composes the clock, lineup, playtime, score and sync components for the
game this client has open, and exposes the operations a stat-keeper
performs: start or join a game, pick starters, run the clock, log stats
and substitutions, and end the game.
"""
import threading
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..config import AppConfig
from ..errors import (
    LineupValidationError, RemoteStoreError, RosterValidationError,
    UnauthorizedError, ValidationError
)
from ..models import (
    GameSession, GameSummary, MetaEvent, Period, PlayByPlayLog, Role, Roster,
    StatEvent, SubEvent
)
from ..utils import EVENT_TYPES, FLOOR_SIZE, fmt_mmss, get_logger
from ..utils.constants import TEAM_KEYS
from .event_clock import EventClock
from .lineup_tracker import LineupTracker, SubResult
from .playtime_accountant import PlaytimeAccountant
from .remote_store_client import RemoteStoreClient
from .scheduler import RepeatingTask, ThreadDispatcher
from .score_reconciler import ScoreReconciler
from .sync_engine import GameComponents, SyncEngine

log = get_logger(__name__)

RosterEntries = Sequence[Union[Tuple[str, str], dict]]


class LiveGameSession:
    """
    Session-level owner of all live game state.

    Every read or write of component state happens under ``self.lock``,
    which stands in for the single UI thread of a stat-keeping device.
    """

    def __init__(
        self,
        config: AppConfig,
        client: Optional[RemoteStoreClient] = None,
        dispatcher=None,
        task_factory: Callable[..., RepeatingTask] = RepeatingTask,
    ):
        self.config = config
        self.client = client or RemoteStoreClient(config)
        self.dispatcher = dispatcher or ThreadDispatcher()
        self.task_factory = task_factory
        self.lock = threading.RLock()
        self.sync = SyncEngine(
            self.client, self.dispatcher, self.lock, config,
            on_status=self._set_status, task_factory=task_factory,
        )
        self.status = ""
        self.last_archive_tab = ""
        self._components: Optional[GameComponents] = None
        self._tasks: List[RepeatingTask] = []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _set_status(self, message: str) -> None:
        with self.lock:
            self.status = message

    @property
    def is_open(self) -> bool:
        return self._components is not None

    @property
    def components(self) -> GameComponents:
        if self._components is None:
            raise ValidationError("No game is open.")
        return self._components

    def _team_key(self, team: str) -> str:
        key = self.components.session.team_key(team)
        if key is None:
            raise ValidationError(f"Unknown team: {team}")
        return key

    def _open(self, session: GameSession, rosters: Dict[str, Roster]) -> GameComponents:
        self.leave()
        lineup = LineupTracker(rosters)
        components = GameComponents(
            session=session,
            clock=EventClock(session, self.config.period_length_sec),
            lineup=lineup,
            playtime=PlaytimeAccountant({team: rosters[team].ids for team in TEAM_KEYS}),
            score=ScoreReconciler(),
            pbp=PlayByPlayLog(self.config.pbp_window),
        )
        self._components = components
        self.sync.attach(components)
        return components

    def _start_loops(self) -> None:
        """Start polling and the periodic tasks; any previous ones are stopped first."""
        self.sync.start_polling()
        for task in self._tasks:
            task.stop()
        self._tasks = [
            self.task_factory("clock", self.config.tick_interval_sec, self.tick),
            self.task_factory("playtime", self.config.playtime_publish_interval_sec, self.publish_playtime),
            self.task_factory("meta", self.config.meta_publish_interval_sec, self.publish_clock_meta),
        ]
        for task in self._tasks:
            task.start()

    @staticmethod
    def _build_rosters(home: RosterEntries, away: RosterEntries) -> Dict[str, Roster]:
        rosters = {
            "home": Roster.from_entries("home", home),
            "away": Roster.from_entries("away", away),
        }
        if any(len(r) < FLOOR_SIZE for r in rosters.values()):
            raise RosterValidationError(f"Need at least {FLOOR_SIZE} players per team in roster.")
        return rosters

    # ------------------------------------------------------------------
    # Game lifecycle
    # ------------------------------------------------------------------
    def start_new_game(
        self,
        game_id: str,
        home_team: str,
        away_team: str,
        home_roster: RosterEntries,
        away_roster: RosterEntries,
    ) -> GameSession:
        """
        Create a game on the store with this client as the Primary keeper.

        The first five of each roster are pre-selected as starters and all
        playtime starts at zero.

        Raises:
            ConfigurationError: If endpoint or token are missing
            RosterValidationError: If a roster is invalid or too short
        """
        self.config.require_remote()
        if not str(game_id or "").strip():
            raise ValidationError("Game ID is required.")
        rosters = self._build_rosters(home_roster, away_roster)

        with self.lock:
            session = GameSession(
                game_id=str(game_id).strip(),
                home_team=home_team,
                away_team=away_team,
                role=Role.PRIMARY,
                period=Period.Q1,
                clock_sec=self.config.period_length_sec,
            )
            components = self._open(session, rosters)
            for team in TEAM_KEYS:
                components.lineup.set_starters(team, components.lineup.default_starters(team))
            self.sync.publish_init()
            self.status = "Game initialized. Select starters…"
            log.info("Started game %s as primary", session.game_id)
            self._start_loops()
        return session

    def save_starters(self, home_ids: Sequence[str], away_ids: Sequence[str]) -> None:
        """
        Set both starting fives and publish them with zeroed playtime.

        Raises:
            LineupValidationError: Unless each team has exactly five valid
                                   starters; nothing changes on failure
        """
        with self.lock:
            components = self.components
            home_ids = components.lineup.validate_five("home", home_ids)
            away_ids = components.lineup.validate_five("away", away_ids)
            components.lineup.set_starters("home", home_ids)
            components.lineup.set_starters("away", away_ids)
            self.status = "Ready."
            self.sync.publish_starters()

    def join_game(
        self,
        game_id: str,
        home_roster: Optional[RosterEntries] = None,
        away_roster: Optional[RosterEntries] = None,
        archive_tab: str = "",
    ) -> GameSession:
        """
        Resume an existing game as a Secondary keeper.

        Rosters stored with the game take precedence over the ones passed in.

        Raises:
            ConfigurationError: If endpoint or token are missing
            RemoteStoreError: If the game cannot be loaded
            ValidationError: If the stored game or rosters are unusable
        """
        self.config.require_remote()
        self._set_status("Loading game…")
        try:
            stored = self.sync.get_game_state(game_id)
            rosters = self._build_rosters(
                stored.home_roster or home_roster or (),
                stored.away_roster or away_roster or (),
            )
        except (RemoteStoreError, ValidationError) as e:
            self._set_status(f"Resume failed: {e}")
            raise

        with self.lock:
            session = GameSession(
                game_id=stored.game_id,
                home_team=stored.home_team or "Home",
                away_team=stored.away_team or "Away",
                role=Role.SECONDARY,
                period=stored.period,
                clock_sec=stored.clock_sec,
                running=False,
            )
            components = self._open(session, rosters)
            for team, starters in (("home", stored.starters_home), ("away", stored.starters_away)):
                if not components.lineup.merge_on_floor(team, starters):
                    components.lineup.set_starters(team, components.lineup.default_starters(team))
            components.playtime.merge("home", stored.playtime_home)
            components.playtime.merge("away", stored.playtime_away)

            tab = (archive_tab or stored.archive_tab or "").strip()
            if tab:
                self.last_archive_tab = tab
            self.status = f"Resumed {session.game_id} @ {session.period.value} {fmt_mmss(session.clock_sec)}"
            log.info("Joined game %s as secondary", session.game_id)
            self._start_loops()
        return session

    def list_games(self) -> List[GameSummary]:
        """
        Previous games for the resume screen.

        Raises:
            UnauthorizedError: With an actionable "check token" message
            RemoteStoreError: For any other failure
        """
        self.config.require_remote()
        try:
            return self.sync.list_games()
        except UnauthorizedError:
            self._set_status("Unauthorized (check token)")
            raise

    def leave(self) -> None:
        """Close the game locally; in-flight poll results are discarded."""
        with self.lock:
            self.sync.stop()
            for task in self._tasks:
                task.stop()
            self._tasks = []
            if self._components is not None:
                log.info("Left game %s", self._components.session.game_id)
            self._components = None

    def end_game(self, reset_live: bool = False) -> None:
        """Publish final playtime and archive the game; optionally close it."""
        with self.lock:
            if self._components is None:
                raise ValidationError("No game is open.")
            self.status = "Ending game…"
            self.sync.publish_end(reset_live)
        if reset_live:
            self.leave()

    def shutdown(self) -> None:
        self.leave()
        self.dispatcher.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------
    def tick(self) -> None:
        """One wall-clock second: count down and credit on-floor playtime."""
        with self.lock:
            if self._components is None:
                return
            c = self._components
            if c.clock.tick():
                c.playtime.tick({team: c.lineup.on_floor(team) for team in TEAM_KEYS})

    def start_clock(self) -> bool:
        with self.lock:
            return self.components.clock.start()

    def stop_clock(self) -> bool:
        """Stop the clock; a running→stopped change publishes the clock and playtime at once."""
        with self.lock:
            clock = self.components.clock
            was_running = clock.running
            if not clock.stop():
                return False
            if was_running:
                self.sync.publish_meta()
                self.sync.publish_playtime()
            return True

    def toggle_clock(self) -> bool:
        with self.lock:
            if self.components.clock.running:
                return self.stop_clock()
            return self.start_clock()

    def _publish_edit(self, event: Optional[MetaEvent]) -> Optional[MetaEvent]:
        if event is None:
            self.status = "Clock is controlled by the primary keeper."
        else:
            self.sync.publish_meta(event)
        return event

    def set_period(self, period: Union[Period, str]) -> Optional[MetaEvent]:
        with self.lock:
            clock = self.components.clock
            was_running = clock.running
            event = self._publish_edit(clock.set_period(period))
            if event is not None and was_running:
                self.sync.publish_playtime()
            return event

    def set_clock(self, value: Union[int, str]) -> Optional[MetaEvent]:
        with self.lock:
            return self._publish_edit(self.components.clock.set_clock_sec(value))

    def adjust_clock(self, delta_sec: int) -> Optional[MetaEvent]:
        with self.lock:
            return self._publish_edit(self.components.clock.adjust_clock(delta_sec))

    # ------------------------------------------------------------------
    # Periodic publications
    # ------------------------------------------------------------------
    def publish_playtime(self) -> None:
        with self.lock:
            if self._components is None or self._components.playtime.is_empty():
                return
            self.sync.publish_playtime()

    def publish_clock_meta(self) -> None:
        """Keep the store's clock following the Primary's countdown."""
        with self.lock:
            if self._components is None or not self._components.session.is_primary:
                return
            self.sync.publish_meta()

    # ------------------------------------------------------------------
    # Stats and substitutions
    # ------------------------------------------------------------------
    def record_stat(self, team: str, player_id: str, event_type: str, delta: int = 1) -> StatEvent:
        """
        Log a stat for an on-floor player.

        The local score moves before the write is issued; the next snapshot
        corrects it if the store disagrees.

        Raises:
            ValidationError: For an unknown team or event type
            LineupValidationError: If the player is not on the floor
        """
        with self.lock:
            c = self.components
            key = self._team_key(team)
            if event_type not in EVENT_TYPES:
                raise ValidationError(f"Unknown event type: {event_type}")
            if isinstance(delta, bool) or not isinstance(delta, int):
                raise ValidationError(f"Delta must be an integer: {delta!r}")
            if not c.lineup.is_on_floor(key, player_id):
                raise LineupValidationError(f"{player_id} is not on the floor for {c.session.team_name(key)}")

            c.score.apply_local_delta(key, event_type, delta)
            event = self.sync.publish_stat(key, player_id, event_type, delta)
            self.status = (
                f"Logged {event_type} — {c.session.team_name(key)} {player_id} "
                f"@ {event.period} {fmt_mmss(event.clock_sec)}"
            )
            return event

    def substitute(self, team: str, player_out: str, player_in: str) -> Tuple[SubResult, Optional[SubEvent]]:
        """Apply a substitution locally and publish it when accepted."""
        with self.lock:
            c = self.components
            key = self._team_key(team)
            result = c.lineup.apply_sub(key, player_out, player_in)
            if not result.ok:
                self.status = f"Sub rejected: {result.reason}"
                return result, None
            event = self.sync.publish_sub(key, player_out, player_in)
            self.status = (
                f"SUB {c.session.team_name(key)}: {player_out} → {player_in} "
                f"@ {event.period} {fmt_mmss(event.clock_sec)}"
            )
            return result, event

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def get_state(self) -> dict:
        """JSON-ready view of the open game for the front end."""
        with self.lock:
            if self._components is None:
                return {"open": False, "status": self.status, "last_archive_tab": self.last_archive_tab}
            c = self._components
            return {
                "open": True,
                "status": self.status,
                "last_archive_tab": self.last_archive_tab,
                "session": c.session.to_json(),
                "clock_display": fmt_mmss(c.session.clock_sec),
                "score": c.score.to_json(),
                "lineup": c.lineup.to_json(),
                "playtime": c.playtime.export(),
                "play_by_play": [entry.to_json() for entry in c.pbp.entries],
                "last_seq": c.pbp.last_seq,
                "last_poll_error": self.sync.last_poll_error,
            }
