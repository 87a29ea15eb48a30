import logging
import mido
from tabsak.base import *
from tabsak import grid
from tabsak.lyrics import group_text_segments
from tabsak.tempo_map import TempoMap
from tabsak.timeline import beat_markers_from_notes, build_timeline

logger = logging.getLogger(__name__)


def track_name(midi_track):
    """
    Gets a track's name from its first track_name (or, failing that, text) meta message

    :param midi_track: midi track
    :type midi_track: mido.MidiTrack
    :return: track name, or '' if the track has none
    :rtype: str
    """
    for msg in midi_track:
        if msg.type == 'track_name':
            return msg.name.strip()
        if msg.type == 'text':
            return msg.text.strip()
    return ''


def absolute_messages(midi_track):
    """
    Walks a track, converting delta times to absolute times

    :param midi_track: midi track
    :type midi_track: mido.MidiTrack
    :return: generator of (absolute time in ticks, message)
    """
    current_time = 0
    for msg in midi_track:
        current_time += msg.time
        yield current_time, msg


class MidiNoteOnset(grid.TimedOnset):
    """
    A note from a MIDI track.  It is rendered with the MIDI note number as the fret, which
    is how percussion tablature marks drum pads.
    """

    def __init__(self, start_time, note_num, velocity=100):
        self.start_time = start_time  #: In ticks since tick 0
        self.note_num = note_num  #: MIDI note number
        self.velocity = velocity  #: MIDI velocity 0-127

    def tick(self):
        return self.start_time

    def render(self):
        if not 0 <= self.note_num <= 127:
            raise NotationRenderError("Illegal note number %d" % self.note_num)
        return grid.NotatedNote(self.note_num, 1)

    def __repr__(self):
        return "MidiNoteOnset(%d, %d, %d)" % (self.start_time, self.note_num, self.velocity)


class MidiSong(SongSource):
    """
    A MIDI file in the Rock Band layout:  a BEAT track marking every beat, tempo changes in
    any track, and lyrics in the PART VOCALS track.  MIDI messages are read with the `mido`_
    library.

    Options:
        * **beat_track** (str) name of the beat track (default 'BEAT')
        * **vocals_track** (str) name of the track holding lyrics (default 'PART VOCALS')

    .. _mido: https://mido.readthedocs.io/en/latest/
    """
    @classmethod
    def cts_type(cls):
        return 'MIDI'

    def __init__(self, midi_file, **kwargs):
        """
        :param midi_file: parsed midi file
        :type midi_file: mido.MidiFile
        :param kwargs: options
        """
        SongSource.__init__(self)
        self.set_options(**kwargs)
        ppq = midi_file.ticks_per_beat
        if ppq <= 0 or ppq & constants.SMPTE_DIVISION_FLAG:
            raise UnsupportedTimeResolution("Unsupported time format (division 0x%04X); "
                                            "expected ticks per quarter note" % ppq)
        self.midi_file = midi_file  #: The mido MIDI file
        self.ppq = ppq  #: Ticks per quarter note
        self._timeline = None

    @classmethod
    def from_file(cls, filename, **kwargs):
        """
        Opens a MIDI file

        :param filename: MIDI filename
        :type filename: str
        :return: song
        :rtype: MidiSong
        """
        try:
            midi_file = mido.MidiFile(filename)
        except (OSError, EOFError) as e:
            raise TabSAKIOError("Unable to read MIDI file %s: %s" % (filename, e)) from e
        return cls(midi_file, **kwargs)

    def find_track(self, name):
        """
        Finds a track by name

        :param name: track name
        :type name: str
        :return: the first track with that name, or None
        :rtype: mido.MidiTrack
        """
        return next((t for t in self.midi_file.tracks if track_name(t) == name), None)

    def track_names(self):
        return [track_name(t) for t in self.midi_file.tracks]

    def tempo_events(self):
        """
        Gets the tempo changes from ALL tracks

        :return: tempo changes
        :rtype: list of TempoEvent
        """
        tempo_events = []
        for track in self.midi_file.tracks:
            for current_time, msg in absolute_messages(track):
                if msg.type == 'set_tempo':
                    tempo_events.append(TempoEvent(current_time, mido.tempo2bpm(msg.tempo)))
        return tempo_events

    def tempo_map(self):
        return TempoMap.build(self.tempo_events())

    def beat_markers(self):
        """
        Gets the beat markers from the beat track.  Notes that are not beat markers are
        reported and skipped.

        :return: beat markers sorted by time; empty if there is no beat track
        :rtype: list of BeatMarker
        """
        beat_track = self.find_track(self.get_option('beat_track', constants.BEAT_TRACK_NAME))
        if beat_track is None:
            return []
        # Some MIDI devices use a note_on with velocity of 0 to turn notes off.
        notes = [(t, msg.note) for t, msg in absolute_messages(beat_track)
                 if msg.type == 'note_on' and msg.velocity > 0]
        return beat_markers_from_notes(notes)

    def text_events(self):
        """
        Gets the timed lyric fragments from the vocals track.  Text events in brackets are
        animation markers, not lyrics, and are ignored.

        :return: lyric fragments in time order
        :rtype: list of TextEvent
        """
        vocal_track = self.find_track(self.get_option('vocals_track', constants.VOCALS_TRACK_NAME))
        if vocal_track is None:
            return []
        text_events = []
        for current_time, msg in absolute_messages(vocal_track):
            if msg.type == 'lyrics':
                text_events.append(TextEvent(current_time, msg.text))
            elif msg.type == 'text' and len(msg.text) > 0 and msg.text[0] != '[':
                text_events.append(TextEvent(current_time, msg.text))
        logger.info("Extracted %d lyric events", len(text_events))
        return text_events

    def note_onsets(self, name):
        """
        Gets every note start in a track as an onset

        :param name: track name
        :type name: str
        :return: onsets in time order; empty if there is no such track
        :rtype: list of MidiNoteOnset
        """
        midi_track = self.find_track(name)
        if midi_track is None:
            return []
        return [MidiNoteOnset(t, msg.note, msg.velocity) for t, msg in absolute_messages(midi_track)
                if msg.type == 'note_on' and msg.velocity > 0]

    def timeline(self):
        """
        Builds the measure timeline from the beat track

        :return: timeline
        :rtype: timeline.Timeline
        """
        if self._timeline is None:
            beat_markers = self.beat_markers()
            if len(beat_markers) == 0:
                raise MissingBeatTrack("No beat markers found in track '%s'"
                                       % self.get_option('beat_track', constants.BEAT_TRACK_NAME))
            self._timeline = build_timeline(beat_markers, self.tempo_map(), self.ppq)
        return self._timeline

    def metadata(self):
        ret_val = SongMetadata(ppq=self.ppq)
        if len(self.midi_file.tracks) > 0:
            ret_val.name = track_name(self.midi_file.tracks[0])
        return ret_val.as_dict()

    def lyrics_by_measure(self):
        text_events = self.text_events()
        if len(text_events) == 0:
            return []
        return group_text_segments(text_events, self.timeline())
