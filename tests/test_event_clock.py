import unittest

from hoopsync.errors import ClockInputError
from hoopsync.models import GameSession, Period, Role
from hoopsync.services import EventClock


def make_clock(role: Role = Role.PRIMARY, **kwargs) -> EventClock:
    session = GameSession(game_id="G1", home_team="James Monroe", away_team="Opponent", role=role, **kwargs)
    return EventClock(session)


class EventClockTests(unittest.TestCase):
    def test_five_ticks_from_eight_minutes(self) -> None:
        clock = make_clock()
        self.assertEqual((clock.period, clock.clock_sec), (Period.Q1, 480))

        self.assertTrue(clock.start())
        for _ in range(5):
            clock.tick()

        self.assertEqual(clock.clock_sec, 475)
        self.assertTrue(clock.running)

    def test_tick_floors_at_zero_and_keeps_period(self) -> None:
        clock = make_clock(clock_sec=3)
        clock.start()
        advanced = [clock.tick() for _ in range(10)]

        self.assertEqual(clock.clock_sec, 0)
        self.assertEqual(advanced.count(True), 3)
        self.assertEqual(clock.period, Period.Q1)

    def test_tick_does_nothing_while_stopped(self) -> None:
        clock = make_clock()
        self.assertFalse(clock.tick())
        self.assertEqual(clock.clock_sec, 480)

    def test_secondary_cannot_touch_clock(self) -> None:
        clock = make_clock(role=Role.SECONDARY, period=Period.Q3, clock_sec=200)

        self.assertFalse(clock.start())
        self.assertFalse(clock.toggle())
        self.assertIsNone(clock.set_period("Q4"))
        self.assertIsNone(clock.set_clock_sec(60))
        self.assertIsNone(clock.adjust_clock(-1))
        # Malformed input from a secondary is ignored, not raised
        self.assertIsNone(clock.set_clock_sec("garbage"))

        self.assertEqual((clock.period, clock.clock_sec, clock.running), (Period.Q3, 200, False))

    def test_period_change_resets_and_stops(self) -> None:
        clock = make_clock(clock_sec=100)
        clock.start()

        event = clock.set_period("q2")

        self.assertEqual(clock.period, Period.Q2)
        self.assertEqual(clock.clock_sec, 480)
        self.assertFalse(clock.running)
        self.assertEqual(event.reason, "quarter_change_reset")
        self.assertEqual((event.period, event.clock_sec), ("Q2", 480))

        with self.assertRaises(ClockInputError):
            clock.set_period("Q9")

    def test_manual_clock_edits(self) -> None:
        clock = make_clock()

        event = clock.set_clock_sec("7:45")
        self.assertEqual(clock.clock_sec, 465)
        self.assertEqual(event.reason, "manual_clock_edit")

        clock.set_clock_sec("90")
        self.assertEqual(clock.clock_sec, 90)

        clock.adjust_clock(-100)
        self.assertEqual(clock.clock_sec, 0)
        clock.adjust_clock(1)
        self.assertEqual(clock.clock_sec, 1)

        for bad in (-1, "7:75", "abc", True, 1.5):
            with self.assertRaises(ClockInputError):
                clock.set_clock_sec(bad)
        self.assertEqual(clock.clock_sec, 1)

    def test_primary_applies_snapshot_only_while_stopped(self) -> None:
        clock = make_clock()
        clock.start()
        clock.tick()

        self.assertFalse(clock.apply_snapshot(Period.Q1, 480))
        self.assertEqual(clock.clock_sec, 479)
        self.assertTrue(clock.running)

        clock.stop()
        self.assertTrue(clock.apply_snapshot(Period.Q1, 470))
        self.assertEqual(clock.clock_sec, 470)

    def test_secondary_always_applies_and_stops(self) -> None:
        clock = make_clock(role=Role.SECONDARY)
        clock.session.running = True

        self.assertTrue(clock.apply_snapshot(Period.Q2, 300))

        self.assertFalse(clock.running)
        self.assertEqual(clock.period, Period.Q2)
        self.assertEqual(clock.clock_sec, 300)

    def test_stamp_uses_confirmed_clock(self) -> None:
        clock = make_clock()
        self.assertEqual(clock.stamp(), ("Q1", 480))

        clock.start()
        clock.apply_snapshot(Period.Q1, 470)
        for _ in range(4):
            clock.tick()

        self.assertEqual(clock.clock_sec, 476)
        self.assertEqual(clock.stamp(), ("Q1", 470))

    def test_primary_waits_for_published_clock_echo(self) -> None:
        clock = make_clock()
        clock.start()
        for _ in range(3):
            clock.tick()
        clock.stop()
        clock.note_published(Period.Q1, 477)

        self.assertFalse(clock.apply_snapshot(Period.Q1, 480))
        self.assertEqual(clock.clock_sec, 477)
        self.assertTrue(clock.awaiting_echo)

        self.assertTrue(clock.apply_snapshot(Period.Q1, 477))
        self.assertFalse(clock.awaiting_echo)
        self.assertTrue(clock.apply_snapshot(Period.Q1, 470))
        self.assertEqual(clock.clock_sec, 470)

    def test_secondary_ignores_published_marker(self) -> None:
        clock = make_clock(role=Role.SECONDARY)
        clock.note_published(Period.Q1, 477)

        self.assertFalse(clock.awaiting_echo)
        self.assertTrue(clock.apply_snapshot(Period.Q1, 480))


if __name__ == "__main__":
    unittest.main()
