import unittest
from parameterized import parameterized

from tabsak.base import TempoEvent
from tabsak.errors import TabSAKValueError
from tabsak.tempo_map import TempoMap


class TempoMapTestCase(unittest.TestCase):
    def setUp(self):
        # Deliberately out of order, with a duplicate at tick 960
        self.tempo_map = TempoMap.build([
            TempoEvent(1920, 90.0),
            TempoEvent(0, 120.0),
            TempoEvent(960, 100.0),
            TempoEvent(960, 140.0),
        ])

    def test_default_tempo(self):
        """
        With no tempo events, the tempo is 120 BPM everywhere
        """
        tempo_map = TempoMap.build([])
        self.assertEqual(len(tempo_map), 1)
        for tick in (0, 1, 479, 100000):
            self.assertEqual(tempo_map.bpm_at_tick(tick), 120.0)

    def test_duplicates_keep_last(self):
        self.assertEqual([e.start_time for e in self.tempo_map], [0, 960, 1920])
        self.assertEqual(self.tempo_map.bpm_at_tick(960), 140.0)

    @parameterized.expand([
        (0, 120.0),
        (959, 120.0),
        (960, 140.0),
        (1919, 140.0),
        (1920, 90.0),
        (50000, 90.0),
    ])
    def test_bpm_at_tick(self, tick, bpm):
        self.assertEqual(self.tempo_map.bpm_at_tick(tick), bpm)

    def test_right_continuity(self):
        """
        Every tick from one event up to the next gets that event's tempo
        """
        events = self.tempo_map.events
        for e, next_e in zip(events, events[1:]):
            for tick in range(e.start_time, next_e.start_time, 37):
                self.assertEqual(self.tempo_map.bpm_at_tick(tick), e.bpm)

    def test_before_first_event(self):
        tempo_map = TempoMap.build([TempoEvent(480, 75.0), TempoEvent(960, 150.0)])
        self.assertEqual(tempo_map.bpm_at_tick(0), 75.0)
        self.assertEqual(tempo_map.bpm_at_tick(479), 75.0)

    def test_monotone_lookup(self):
        """
        Increasing the tick never goes back to an earlier event's tempo
        """
        seen = []
        for tick in range(0, 3000, 10):
            bpm = self.tempo_map.bpm_at_tick(tick)
            if len(seen) == 0 or seen[-1] != bpm:
                seen.append(bpm)
        self.assertEqual(seen, [e.bpm for e in self.tempo_map])

    def test_seconds(self):
        # One beat at 120 BPM is half a second
        self.assertAlmostEqual(self.tempo_map.tick_to_seconds(480, 480), 0.5)
        # Two beats at 120, then two beats at 140
        expected = 1.0 + 2 * 60.0 / 140.0
        self.assertAlmostEqual(self.tempo_map.tick_to_seconds(1920, 480), expected)
        # Spanning all three tempos
        expected = 1.0 + 2 * 60.0 / 140.0 + 60.0 / 90.0
        self.assertAlmostEqual(self.tempo_map.seconds_between(0, 2400, 480), expected)
        self.assertAlmostEqual(self.tempo_map.seconds_between(2400, 0, 480), -expected)
        self.assertEqual(self.tempo_map.seconds_between(700, 700, 480), 0.0)

    def test_seconds_inside_segment(self):
        self.assertAlmostEqual(self.tempo_map.seconds_between(1000, 1240, 480), 0.5 * 60.0 / 140.0)

    def test_illegal_values(self):
        with self.assertRaises(TabSAKValueError):
            TempoMap.build([TempoEvent(0, 0.0)])
        with self.assertRaises(TabSAKValueError):
            self.tempo_map.seconds_between(0, 480, 0)


if __name__ == '__main__':
    unittest.main(failfast=False)
