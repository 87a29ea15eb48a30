import unittest
from parameterized import parameterized

from tabsak.base import BeatMarker, TextEvent, TextSegment, MeasureText
from tabsak.tempo_map import TempoMap
from tabsak.timeline import build_timeline
from tabsak import lyrics

PPQ = 480


def make_timeline(n_measures):
    markers = [BeatMarker(i * PPQ, i % 4 == 0) for i in range(4 * n_measures)]
    return build_timeline(markers, TempoMap.build([]), PPQ)


class ParseLyricsTestCase(unittest.TestCase):
    @parameterized.expand([
        (['Hel-', 'lo', 'world'], 'Hello world'),
        (['All#', 'the^', 'way%'], 'All the way'),
        (['Ex=', 'Girl-', 'friend'], 'Ex-Girlfriend'),
        (['Whoa', '+', '+', 'yeah'], 'Whoa yeah'),
        (['lo+', 've'], 'love'),
        (['', 'one', ''], 'one'),
        (['dang-'], 'dang'),
        ([], ''),
    ])
    def test_parse_lyrics(self, raw, expected):
        self.assertEqual(lyrics.parse_lyrics(raw), expected)


class GroupTextTestCase(unittest.TestCase):
    def setUp(self):
        self.timeline = make_timeline(3)

    def test_gap_splits_segments(self):
        """
        A gap of a full beat starts a new segment; a shorter gap does not
        """
        events = [TextEvent(0, 'Hel-'), TextEvent(120, 'lo'), TextEvent(600, 'world')]
        result = lyrics.group_text_segments(events, self.timeline)
        self.assertEqual(result, [MeasureText(0, [TextSegment(0, 'Hello'), TextSegment(600, 'world')])])

    def test_short_gap_merges(self):
        events = [TextEvent(0, 'Hel-'), TextEvent(120, 'lo'), TextEvent(599, 'world')]
        result = lyrics.group_text_segments(events, self.timeline)
        self.assertEqual(result, [MeasureText(0, [TextSegment(0, 'Hello world')])])

    def test_measures_without_text(self):
        events = [TextEvent(2000, 'two'), TextEvent(4000, 'three')]
        result = lyrics.group_text_segments(events, self.timeline)
        self.assertEqual([mt.measure_index for mt in result], [1, 2])
        self.assertEqual(result[0].segments, [TextSegment(2000, 'two')])

    def test_segments_do_not_cross_measures(self):
        events = [TextEvent(1800, 'a-'), TextEvent(1950, 'cross')]
        result = lyrics.group_text_segments(events, self.timeline)
        self.assertEqual(result, [MeasureText(0, [TextSegment(1800, 'a')]),
                                  MeasureText(1, [TextSegment(1950, 'cross')])])

    def test_outside_measures_dropped(self):
        events = [TextEvent(-10, 'early'), TextEvent(100, 'in'), TextEvent(99999, 'late')]
        result = lyrics.group_text_segments(events, self.timeline)
        self.assertEqual(result, [MeasureText(0, [TextSegment(100, 'in')])])

    def test_unsorted_events(self):
        events = [TextEvent(120, 'lo'), TextEvent(0, 'Hel-')]
        result = lyrics.group_text_segments(events, self.timeline)
        self.assertEqual(result, [MeasureText(0, [TextSegment(0, 'Hello')])])

    def test_empty_text_dropped(self):
        events = [TextEvent(0, '+'), TextEvent(960, 'sing')]
        result = lyrics.group_text_segments(events, self.timeline)
        self.assertEqual(result, [MeasureText(0, [TextSegment(960, 'sing')])])

    def test_custom_normalize(self):
        events = [TextEvent(0, 'a'), TextEvent(100, 'b')]
        result = lyrics.group_text_segments(events, self.timeline, normalize='|'.join)
        self.assertEqual(result[0].segments, [TextSegment(0, 'a|b')])

    def test_empty_timeline(self):
        timeline = build_timeline([BeatMarker(0, False)], TempoMap.build([]), PPQ)
        self.assertEqual(lyrics.group_text_segments([TextEvent(0, 'x')], timeline), [])


if __name__ == '__main__':
    unittest.main(failfast=False)
