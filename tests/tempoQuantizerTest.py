import math
import unittest
from parameterized import parameterized

from tabsak.base import BeatMarker, TempoEvent, QuantizedTempo
from tabsak.tempo_map import TempoMap
from tabsak.timeline import Timeline, build_timeline, ideal_duration
from tabsak import tempo_quantizer as tq

PPQ = 480


def make_timeline(n_measures, tempo_events=(), beats_per_measure=4):
    markers = [BeatMarker(i * PPQ, i % beats_per_measure == 0) for i in range(n_measures * beats_per_measure)]
    return build_timeline(markers, TempoMap.build(tempo_events), PPQ)


class TempoQuantizerTestCase(unittest.TestCase):
    def test_empty_timeline(self):
        timeline = Timeline([], [], PPQ)
        self.assertEqual(tq.quantize_tempos(timeline), [QuantizedTempo(0, 120, 4)])

    def test_single_measure(self):
        result = tq.quantize_tempos(make_timeline(1, [TempoEvent(0, 96.0)]))
        self.assertEqual(result, [QuantizedTempo(0, 96, 4)])

    def test_integer_tempo_is_sparse(self):
        """
        Only the first measure and measures with a new tempo carry a tempo
        """
        timeline = make_timeline(4, [TempoEvent(0, 100.0), TempoEvent(3 * 4 * PPQ, 110.0)])
        result = tq.quantize_tempos(timeline)
        self.assertEqual([r.bpm for r in result], [100, None, None, 110])
        self.assertEqual([r.measure_index for r in result], [0, 1, 2, 3])
        self.assertEqual(tq.quantized_bpms(timeline), [100, 100, 100, 110])

    def test_tempo_change_follows_raw_start(self):
        """
        The last measure starts after the change to 60 BPM even though its precise start is
        still in the 120 BPM part of the song
        """
        markers = [BeatMarker(i * PPQ, i in (0, 4, 7)) for i in range(11)]
        timeline = build_timeline(markers, TempoMap.build([TempoEvent(0, 120.0), TempoEvent(2400, 60.0)]), PPQ)
        self.assertLess(timeline.measures[2].precise_start_time, 2400)
        self.assertEqual(tq.quantized_bpms(timeline), [120, 120, 60])
        self.assertEqual([r.bpm for r in tq.quantize_tempos(timeline)], [120, None, 60])

    def test_beats_per_measure_carried(self):
        result = tq.quantize_tempos(make_timeline(2, beats_per_measure=3))
        self.assertEqual([r.beats_per_measure for r in result], [3, 3])

    @parameterized.expand([
        (120.4,),
        (99.6,),
        (133.33,),
        (87.5,),
    ])
    def test_drift_is_bounded(self, bpm):
        """
        Rounding alternates so that the integer tempo timeline never falls far behind or
        ahead of the precise timeline
        """
        timeline = make_timeline(64, [TempoEvent(0, bpm)])
        bpms = tq.quantized_bpms(timeline)
        self.assertTrue(all(b in (math.floor(bpm), math.ceil(bpm)) for b in bpms))
        drift = 0.0
        max_step = 0.0
        for m, q in zip(timeline.measures, bpms):
            step = ideal_duration(4, PPQ, q) - ideal_duration(4, PPQ, m.bpm)
            max_step = max(max_step, abs(step))
            drift += step
            # Once a measure is past the threshold, the next one pulls it back
            self.assertLess(abs(drift), tq.DRIFT_THRESHOLD + max_step)

    def test_drift_carries_forward(self):
        """
        A tempo just above an integer rounds down until the drift forces a round up
        """
        timeline = make_timeline(8, [TempoEvent(0, 120.2)])
        bpms = tq.quantized_bpms(timeline)
        self.assertEqual(bpms[0], 120)
        self.assertIn(121, bpms)
        # Each measure at 120 instead of 120.2 loses 1920 * 30 * (1/120 - 1/120.2) ticks,
        # about 1.6, so the very next measure must round up
        self.assertEqual(bpms[1], 121)

    def test_no_drift_for_integer_tempo(self):
        bpms = tq.quantized_bpms(make_timeline(16, [TempoEvent(0, 140.0)]))
        self.assertEqual(bpms, [140] * 16)

    @parameterized.expand([
        (100.5, 0.0, 101),
        (100.49, 0.0, 100),
        (100.2, 0.6, 101),
        (100.8, -0.6, 100),
        (100.0, 5.0, 100),
        (0.2, 0.0, 1),
    ])
    def test_round_bpm(self, bpm, drift, expected):
        self.assertEqual(tq.round_bpm(bpm, drift), expected)


if __name__ == '__main__':
    unittest.main(failfast=False)
