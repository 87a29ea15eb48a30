import collections
import logging
from tabsak.base import *
from tabsak import grid
from tabsak import timeline as tl
from tabsak.tempo_quantizer import quantize_tempos

""" Assembly of the bar index and notation tracks handed to a score writer """

logger = logging.getLogger(__name__)

BarIndexEntry = collections.namedtuple('BarIndexEntry', ['bar_id', 'tempo', 'time_signature'])
NotationBar = collections.namedtuple('NotationBar', ['bar_id', 'slots'])


class NotationTrack:
    def __init__(self, name, bars=None):
        self.name = name  #: Track name
        self.bars = bars if bars is not None else []  #: List of NotationBar, one per measure

    def __len__(self):
        return len(self.bars)

    def count_notes(self):
        return sum(len(s.elements) for b in self.bars for s in b.slots)

    def __str__(self):
        ret_val = "Track: %s\n" % self.name
        return ret_val + '\n'.join("Bar %d: %s" % (b.bar_id, ' | '.join(str(s) for s in b.slots)) for b in self.bars)


class Score:
    def __init__(self, metadata, bar_index, tracks, timeline):
        self.metadata = metadata  #: Song metadata dictionary
        self.bar_index = bar_index  #: List of BarIndexEntry, one per bar
        self.tracks = tracks  #: List of NotationTrack
        self.timeline = timeline  #: Timeline the bars were built from

    def num_bars(self):
        return len(self.bar_index)


def build_bar_index(timeline):
    """
    Creates the bar index:  one entry per measure with the integer tempo where it changes
    and the time signature on the first bar and on every bar not in 4/4.

    :param timeline: beat timeline
    :type timeline: timeline.Timeline
    :return: bar index entries
    :rtype: list of BarIndexEntry
    """
    ret_val = []
    for qt in quantize_tempos(timeline):
        time_signature = None
        if qt.measure_index == 0 or qt.beats_per_measure != constants.DEFAULT_BEATS_PER_MEASURE:
            time_signature = (qt.beats_per_measure, constants.QUARTER_NOTE)
        ret_val.append(BarIndexEntry(qt.measure_index + 1, qt.bpm, time_signature))
    return ret_val


def _bars_to_track(name, bar_slots):
    return NotationTrack(name, [NotationBar(i + 1, slots) for i, slots in enumerate(bar_slots)])


def build_note_track(name, onsets, timeline, quantizer=None):
    """
    Creates a notation track from a track's onsets

    :param name: track name
    :type name: str
    :param onsets: onsets for the track
    :type onsets: iterable of grid.TimedOnset
    :param timeline: beat timeline
    :type timeline: timeline.Timeline
    :param quantizer: grid quantizer; the default one if None
    :type quantizer: grid.GridQuantizer
    :return: notation track
    :rtype: NotationTrack
    """
    return _bars_to_track(name, grid.bars_from_onsets(onsets, timeline, quantizer))


def build_text_track(name, measure_texts, timeline, quantizer=None):
    """
    Creates a notation track from per-measure text segments.  Each segment is placed on the
    grid at its starting time, just like a note.

    :param name: track name
    :type name: str
    :param measure_texts: text segments grouped by measure
    :type measure_texts: list of MeasureText
    :param timeline: beat timeline
    :type timeline: timeline.Timeline
    :param quantizer: grid quantizer; the default one if None
    :type quantizer: grid.GridQuantizer
    :return: notation track
    :rtype: NotationTrack
    """
    onsets = [grid.TextOnset(s.start_time, s.text) for mt in measure_texts for s in mt.segments]
    return build_note_track(name, onsets, timeline, quantizer)


def build_score(song, onset_tracks, quantizer=None, lyrics_track_name='Lyrics'):
    """
    Builds the complete notation tree for a song.  If the song has no beat track, a single
    default measure is used instead.

    :param song: song to convert
    :type song: SongSource
    :param onset_tracks: onsets for each instrument track, by track name
    :type onset_tracks: dict of str: iterable of grid.TimedOnset
    :param quantizer: grid quantizer; the default one if None
    :type quantizer: grid.GridQuantizer
    :param lyrics_track_name: name for the lyrics track
    :type lyrics_track_name: str
    :return: score
    :rtype: Score
    """
    metadata = song.metadata()
    try:
        timeline = song.timeline()
        measure_texts = song.lyrics_by_measure()
    except MissingBeatTrack as e:
        logger.warning("%s; using a single default measure", e)
        timeline = tl.default_timeline(metadata.get('ppq', constants.DEFAULT_MIDI_PPQN))
        measure_texts = []
    if len(timeline.measures) == 0:
        logger.warning("Timeline has no measures; using a single default measure")
        timeline = tl.default_timeline(timeline.ticks_per_beat, timeline.tempo_map)
        measure_texts = []

    tracks = []
    if len(measure_texts) > 0:
        tracks.append(build_text_track(lyrics_track_name, measure_texts, timeline, quantizer))
    for name, onsets in onset_tracks.items():
        tracks.append(build_note_track(name, onsets, timeline, quantizer))

    return Score(metadata, build_bar_index(timeline), tracks, timeline)
