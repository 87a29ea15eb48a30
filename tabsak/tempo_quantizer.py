import math
import logging
from tabsak.base import *
from tabsak.timeline import ideal_duration

""" Integer tempos for notation, with drift control """

logger = logging.getLogger(__name__)

# Accumulated drift, in precise ticks, before the rounding direction is forced
DRIFT_THRESHOLD = 0.5


def round_bpm(bpm, drift):
    """
    Rounds a tempo to an integer.  Normally this is round-to-nearest, but once the quantized
    timeline has drifted more than DRIFT_THRESHOLD ticks behind the precise timeline the tempo
    is rounded up, and once it has drifted that far ahead it is rounded down.

    :param bpm: precise tempo
    :type bpm: float
    :param drift: accumulated drift (quantized minus precise), in precise ticks
    :type drift: float
    :return: integer tempo, at least 1
    :rtype: int
    """
    if drift > DRIFT_THRESHOLD:
        q = math.ceil(bpm)
    elif drift < -DRIFT_THRESHOLD:
        q = math.floor(bpm)
    else:
        q = math.floor(bpm + 0.5)
    return max(int(q), 1)


def quantized_bpms(timeline):
    """
    Integer tempo for every measure in the timeline.  The rounding error of each measure is
    carried forward and used to bias the rounding of the next one, which keeps the integer
    tempo timeline within about half a tick of the precise one.

    :param timeline: beat timeline
    :type timeline: timeline.Timeline
    :return: integer tempo for each measure
    :rtype: list of int
    """
    ret_val = []
    drift = 0.0
    for m in timeline.measures:
        q = round_bpm(m.bpm, drift)
        # Drift is measured against the raw-start tempo, not the lagging precise timeline
        drift += ideal_duration(m.beats_per_measure, timeline.ticks_per_beat, q) \
            - ideal_duration(m.beats_per_measure, timeline.ticks_per_beat, m.bpm)
        ret_val.append(q)
    logger.debug("Quantized %d measure tempos; final drift %.3f ticks", len(ret_val), drift)
    return ret_val


def quantize_tempos(timeline):
    """
    Quantizes the tempo of every measure for notation.  Tempo markings are sparse:  only the
    first measure and measures where the integer tempo changes carry a tempo; all the others
    have a tempo of None.  An empty timeline produces a single default measure.

    :param timeline: beat timeline
    :type timeline: timeline.Timeline
    :return: quantized tempo for each measure
    :rtype: list of QuantizedTempo
    """
    if len(timeline.measures) == 0:
        return [QuantizedTempo(0, constants.DEFAULT_BPM, constants.DEFAULT_BEATS_PER_MEASURE)]

    ret_val = []
    last_bpm = None
    for i, (m, q) in enumerate(zip(timeline.measures, quantized_bpms(timeline))):
        ret_val.append(QuantizedTempo(i, q if q != last_bpm else None, m.beats_per_measure))
        last_bpm = q
    return ret_val
