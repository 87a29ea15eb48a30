import bisect
import collections
import logging
import more_itertools as moreit
from tabsak.base import *
from tabsak.tempo_map import TempoMap

""" Measures and beats derived from a song's beat track """

logger = logging.getLogger(__name__)


class Measure(collections.namedtuple('Measure', ['start_time', 'end_time', 'beats_per_measure', 'bpm',
                                                 'precise_start_time', 'precise_end_time'])):
    """
    A measure on the beat timeline.

    start_time and end_time come straight from the beat markers.  The precise times are
    tempo-weighted positions accumulated from the start of the song, kept as floats so that
    rounding never builds up from one measure to the next.
    """
    __slots__ = ()

    @property
    def duration(self):
        return self.end_time - self.start_time

    @property
    def precise_duration(self):
        return self.precise_end_time - self.precise_start_time


class Timeline:
    """
    The complete beat timeline of a song:  its measures, the beat markers they were built
    from, and the tick resolution.  A timeline is not changed once it has been built.
    """

    def __init__(self, measures, beat_markers, ticks_per_beat, tempo_map=None):
        self.measures = tuple(measures)  #: Measures, in order
        self.beat_markers = tuple(beat_markers)  #: Beat markers, in order
        self.ticks_per_beat = float(ticks_per_beat)  #: Ticks per quarter note
        self.tempo_map = tempo_map if tempo_map is not None else TempoMap()  #: Tempo changes for the song
        self._starts = [m.start_time for m in self.measures]

    def __len__(self):
        return len(self.measures)

    def measure_index_at(self, tick):
        """
        Finds the index of the measure that contains the given time

        :param tick: time in ticks
        :type tick: int
        :return: zero-based measure index, or None if the time is outside every measure
        :rtype: int
        """
        pos = bisect.bisect_right(self._starts, tick) - 1
        if pos < 0:
            return None
        m = self.measures[pos]
        if m.start_time <= tick < m.end_time:
            return pos
        return None

    def measure_at(self, tick):
        """
        Finds the measure that contains the given time

        :param tick: time in ticks
        :type tick: int
        :return: measure containing the time, or None
        :rtype: Measure
        """
        i = self.measure_index_at(tick)
        return None if i is None else self.measures[i]

    def total_duration(self):
        """
        Returns the total duration of the timeline in ticks

        :return: end time of the last measure
        :rtype: int
        """
        if len(self.measures) == 0:
            return 0
        return self.measures[-1].end_time

    def beat_times(self):
        """
        Real time of every beat marker in the song

        :return: time of each beat in seconds
        :rtype: list of float
        """
        return [self.tempo_map.tick_to_seconds(b.start_time, self.ticks_per_beat) for b in self.beat_markers]

    def __str__(self):
        ret_val = "Timeline: %d measures, %d beat notes\n" % (len(self.measures), len(self.beat_markers))
        elapsed_seconds = 0.0
        for i, m in enumerate(self.measures):
            ret_val += "Measure %d: %d/%d time, %.1f BPM, ticks %d-%d\n" \
                % (i + 1, m.beats_per_measure, 4, m.bpm, m.start_time, m.end_time)
            ticks_per_second = self.ticks_per_beat * m.bpm / 60.0
            beat_number = 1
            for b in self.beat_markers:
                if m.start_time <= b.start_time < m.end_time:
                    beat_seconds = elapsed_seconds + (b.start_time - m.start_time) / ticks_per_second
                    ret_val += "  * Beat %d: %.6f\n" % (beat_number, beat_seconds)
                    beat_number += 1
            elapsed_seconds += m.duration / ticks_per_second
        return ret_val


# --------------------------------------------------------------------------------------
#
#  Timeline construction
#
# --------------------------------------------------------------------------------------

def classify_beat_marker(start_time, key):
    """
    Turns a note from the beat track into a beat marker

    :param start_time: time of the note in ticks
    :type start_time: int
    :param key: MIDI note number
    :type key: int
    :return: beat marker
    :rtype: BeatMarker
    """
    if key == constants.DOWNBEAT_KEY:
        return BeatMarker(start_time, True)
    elif key == constants.BEAT_KEY:
        return BeatMarker(start_time, False)
    raise InvalidBeatMarker(start_time, key)


def beat_markers_from_notes(note_events):
    """
    Converts the notes of a beat track into beat markers.  Notes that are not beat markers
    are reported and skipped.

    :param note_events: (start_time, key) pairs from the beat track
    :type note_events: iterable of tuple
    :return: beat markers sorted by time
    :rtype: list of BeatMarker
    """
    beat_markers = []
    for start_time, key in note_events:
        try:
            beat_markers.append(classify_beat_marker(start_time, key))
        except InvalidBeatMarker as e:
            logger.warning("Skipping note: %s", e)
    beat_markers.sort(key=lambda b: b.start_time)
    return beat_markers


def build_timeline(beat_markers, tempo_map, ticks_per_beat):
    """
    Builds the measure timeline from the beat markers.  Every downbeat starts a new measure,
    which holds all the beats up to the next downbeat.

    :param beat_markers: beat markers from the beat track
    :type beat_markers: iterable of BeatMarker
    :param tempo_map: tempo changes for the song
    :type tempo_map: TempoMap
    :param ticks_per_beat: ticks per quarter note
    :type ticks_per_beat: int or float
    :return: timeline
    :rtype: Timeline
    """
    beat_markers = sorted(beat_markers, key=lambda b: b.start_time)
    if len(beat_markers) == 0:
        raise MissingBeatTrack("No beat markers found")
    if ticks_per_beat <= 0:
        raise TabSAKValueError("Illegal ticks per beat %s" % ticks_per_beat)

    measures = measures_from_beats(beat_markers, tempo_map, ticks_per_beat)
    measures = precise_measure_timing(measures, tempo_map, ticks_per_beat)
    logger.debug("Built timeline with %d measures from %d beat markers", len(measures), len(beat_markers))
    return Timeline(measures, beat_markers, ticks_per_beat, tempo_map)


def measures_from_beats(beat_markers, tempo_map, ticks_per_beat):
    """
    Groups sorted beat markers into measures.  The precise times are left at zero; they are
    filled in by precise_measure_timing().

    :param beat_markers: beat markers sorted by time
    :type beat_markers: list of BeatMarker
    :param tempo_map: tempo changes for the song
    :type tempo_map: TempoMap
    :param ticks_per_beat: ticks per quarter note
    :type ticks_per_beat: int or float
    :return: measures
    :rtype: list of Measure
    """
    measure_starts = [i for i, b in enumerate(beat_markers) if b.is_downbeat]
    if len(measure_starts) == 0:
        logger.warning("Beat track has no downbeats; no measures created")
        return []

    measures = []
    # The last measure runs to the end of the beat markers
    for start_idx, end_idx in moreit.pairwise(measure_starts + [len(beat_markers)]):
        beats_in_measure = end_idx - start_idx
        start_time = beat_markers[start_idx].start_time
        if end_idx < len(beat_markers):
            end_time = beat_markers[end_idx].start_time
        elif beats_in_measure > 1:
            # For the last measure, extrapolate from the average beat length within it
            average_beat_length = (beat_markers[end_idx - 1].start_time - start_time) / (beats_in_measure - 1)
            end_time = start_time + int(beats_in_measure * average_beat_length)
        else:
            end_time = start_time + int(ticks_per_beat)  # Assume a quarter note
        measures.append(Measure(start_time, end_time, beats_in_measure, tempo_map.bpm_at_tick(start_time), 0., 0.))
    return measures


def ideal_duration(beats_per_measure, ticks_per_beat, bpm):
    """
    Tempo-weighted length of a measure, in the units of the precise timeline

    :param beats_per_measure: beats in the measure
    :type beats_per_measure: int
    :param ticks_per_beat: ticks per quarter note
    :type ticks_per_beat: int or float
    :param bpm: tempo
    :type bpm: float
    :return: measure length
    :rtype: float
    """
    return beats_per_measure * ticks_per_beat * (60.0 / bpm)


def precise_measure_timing(measures, tempo_map, ticks_per_beat):
    """
    Calculates the high-precision start and end of each measure.

    The duration of each measure comes from its beat count and the tempo in effect at the
    accumulated precise time, rather than at the measure's own beat marker, so that each
    measure starts exactly where the previous one ended.

    :param measures: measures with raw tick bounds
    :type measures: list of Measure
    :param tempo_map: tempo changes for the song
    :type tempo_map: TempoMap
    :param ticks_per_beat: ticks per quarter note
    :type ticks_per_beat: int or float
    :return: measures with precise times filled in
    :rtype: list of Measure
    """
    if len(measures) == 0:
        return []
    ret_val = []
    current_precise_time = float(measures[0].start_time)
    for m in measures:
        bpm = tempo_map.bpm_at_tick(int(current_precise_time))
        measure_duration = ideal_duration(m.beats_per_measure, ticks_per_beat, bpm)
        precise_start_time = current_precise_time
        current_precise_time += measure_duration
        ret_val.append(m._replace(precise_start_time=precise_start_time, precise_end_time=current_precise_time))
    return ret_val


def default_timeline(ticks_per_beat=constants.DEFAULT_MIDI_PPQN, tempo_map=None):
    """
    A single-measure timeline for songs without a beat track:  one measure of
    DEFAULT_BEATS_PER_MEASURE beats starting at tick 0.

    :param ticks_per_beat: ticks per quarter note
    :type ticks_per_beat: int or float
    :param tempo_map: tempo changes for the song; the default tempo if not given
    :type tempo_map: TempoMap
    :return: timeline
    :rtype: Timeline
    """
    if tempo_map is None:
        tempo_map = TempoMap()
    beats = constants.DEFAULT_BEATS_PER_MEASURE
    markers = [BeatMarker(int(i * ticks_per_beat), i == 0) for i in range(beats)]
    return build_timeline(markers, tempo_map, ticks_per_beat)
