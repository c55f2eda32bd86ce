"""Game clock service for the HoopSync live stat-keeper client."""

from typing import Optional, Tuple, Union

from ..errors import ClockInputError
from ..models import GameSession, MetaEvent, Period
from ..utils import PERIOD_LENGTH_SEC, get_logger, parse_mmss
from ..utils.constants import REASON_MANUAL_CLOCK_EDIT, REASON_QUARTER_CHANGE

log = get_logger(__name__)


class EventClock:
    """
    Service for the period/countdown state machine of one session.

    Only a Primary may run or edit the clock. A Secondary mirrors whatever
    the latest snapshot says and never counts down on its own.
    """

    def __init__(self, session: GameSession, period_length_sec: int = PERIOD_LENGTH_SEC):
        self.session = session
        self.period_length_sec = period_length_sec
        self._authoritative: Optional[Tuple[Period, int]] = None
        self._published: Optional[Tuple[Period, int]] = None

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def period(self) -> Period:
        return self.session.period

    @property
    def clock_sec(self) -> int:
        return self.session.clock_sec

    @property
    def running(self) -> bool:
        return self.session.running

    @property
    def is_primary(self) -> bool:
        return self.session.is_primary

    @property
    def authoritative(self) -> Optional[Tuple[Period, int]]:
        return self._authoritative

    @property
    def awaiting_echo(self) -> bool:
        return self._published is not None

    def stamp(self) -> Tuple[str, int]:
        """
        Game time to record on an outgoing stat or sub.

        Uses the last server-confirmed period/clock so keepers logging the
        same moment agree, falling back to the local clock before the first
        snapshot arrives.
        """
        period, clock_sec = self._authoritative or (self.session.period, self.session.clock_sec)
        return period.value, clock_sec

    # ------------------------------------------------------------------
    # Core clock controls
    # ------------------------------------------------------------------
    def _ignored(self, what: str) -> bool:
        if self.is_primary:
            return False
        log.debug("Ignoring %s from secondary keeper on %s", what, self.session.game_id)
        return True

    def start(self) -> bool:
        """Start the countdown. Returns False when ignored."""
        if self._ignored("start"):
            return False
        self.session.running = True
        return True

    def stop(self) -> bool:
        """Stop the countdown. Returns False when ignored."""
        if self._ignored("stop"):
            return False
        self.session.running = False
        return True

    def toggle(self) -> bool:
        return self.stop() if self.session.running else self.start()

    def tick(self) -> bool:
        """
        Advance the countdown by one second.

        The clock floors at zero and never rolls into the next period.

        Returns:
            True if a second was actually taken off the clock
        """
        if not self.session.running or self.session.clock_sec <= 0:
            return False
        self.session.clock_sec -= 1
        return True

    # ------------------------------------------------------------------
    # Audited edits
    # ------------------------------------------------------------------
    def set_period(self, period: Union[Period, str]) -> Optional[MetaEvent]:
        """
        Move to another period, resetting and stopping the clock.

        Returns:
            The audit event to publish, or None when ignored

        Raises:
            ClockInputError: If the period code is unknown
        """
        if self._ignored("period change"):
            return None
        try:
            new_period = Period.parse(period)
        except ValueError as e:
            raise ClockInputError(f"Unknown period: {period!r}") from e

        self.session.period = new_period
        self.session.clock_sec = self.period_length_sec
        self.session.running = False
        return self._audit(REASON_QUARTER_CHANGE)

    def set_clock_sec(self, value: Union[int, str]) -> Optional[MetaEvent]:
        """
        Set the clock directly, from seconds or an ``MM:SS`` string.

        Raises:
            ClockInputError: If the value is negative or unparseable
        """
        if self._ignored("clock edit"):
            return None
        self.session.clock_sec = self.parse_clock_value(value)
        return self._audit(REASON_MANUAL_CLOCK_EDIT)

    def adjust_clock(self, delta_sec: int) -> Optional[MetaEvent]:
        """Nudge the clock by a few seconds, floored at zero."""
        if self._ignored("clock adjustment"):
            return None
        if isinstance(delta_sec, bool) or not isinstance(delta_sec, int):
            raise ClockInputError(f"Clock adjustment must be whole seconds: {delta_sec!r}")
        self.session.clock_sec = max(0, self.session.clock_sec + delta_sec)
        return self._audit(REASON_MANUAL_CLOCK_EDIT)

    @staticmethod
    def parse_clock_value(value: Union[int, str]) -> int:
        if isinstance(value, bool):
            raise ClockInputError(f"Invalid clock value: {value!r}")
        if isinstance(value, int):
            seconds = value
        elif isinstance(value, str) and value.strip().isdigit():
            seconds = int(value.strip())
        elif isinstance(value, str):
            try:
                seconds = parse_mmss(value)
            except ValueError as e:
                raise ClockInputError(str(e)) from e
        else:
            raise ClockInputError(f"Invalid clock value: {value!r}")
        if seconds < 0:
            raise ClockInputError("Clock cannot be negative")
        return seconds

    def _audit(self, reason: str) -> MetaEvent:
        return MetaEvent(
            game_id=self.session.game_id,
            period=self.session.period.value,
            clock_sec=self.session.clock_sec,
            reason=reason,
        )

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------
    def note_published(self, period: Period, clock_sec: int) -> None:
        """Remember the period/clock a Primary just sent to the store."""
        if self.is_primary:
            self._published = (period, clock_sec)

    def apply_snapshot(self, period: Period, clock_sec: int) -> bool:
        """
        Merge the server's period/clock into local state.

        A Primary only adopts it while stopped, and only once the store
        echoes the last value the Primary published, so a live countdown or
        a just-stopped clock is never rewound by a stale poll. A Secondary
        always adopts it and is forced to stopped.

        Returns:
            True if local period/clock were replaced
        """
        self._authoritative = (period, clock_sec)

        if self.is_primary:
            if self.session.running:
                return False
            if self._published is not None:
                if self._published != (period, clock_sec):
                    log.debug(
                        "Ignoring stale clock %s %s on %s; waiting for %s %s",
                        period.value, clock_sec, self.session.game_id,
                        self._published[0].value, self._published[1],
                    )
                    return False
                self._published = None
        else:
            self.session.running = False

        self.session.period = period
        self.session.clock_sec = clock_sec
        return True
