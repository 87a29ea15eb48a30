import collections
from dataclasses import dataclass, field
from fractions import Fraction
from tabsak.errors import *
from tabsak import constants


# Named tuple types for several lists throughout
TempoEvent = collections.namedtuple('Tempo', ['start_time', 'bpm'])
BeatMarker = collections.namedtuple('BeatMarker', ['start_time', 'is_downbeat'])
TextEvent = collections.namedtuple('Text', ['start_time', 'text'])
TextSegment = collections.namedtuple('TextSegment', ['start_time', 'text'])
MeasureText = collections.namedtuple('MeasureText', ['measure_index', 'segments'])
QuantizedTempo = collections.namedtuple('QuantizedTempo', ['measure_index', 'bpm', 'beats_per_measure'])


@dataclass
class SongMetadata:
    ppq: int = constants.DEFAULT_MIDI_PPQN  #: PPQ = Pulses Per Quarter = ticks/quarter note
    name: str = ''  #: Song name
    artist: str = ''  #: Performing artist
    album: str = ''  #: Album
    extensions: dict = field(default_factory=dict)  #: Allows arbitrary state to be passed

    def as_dict(self):
        """
        Metadata as a flat dictionary of non-empty values

        :return: metadata
        :rtype: dict
        """
        ret_val = {k: v for k, v in (('name', self.name), ('artist', self.artist), ('album', self.album)) if v}
        ret_val['ppq'] = self.ppq
        ret_val.update(self.extensions)
        return ret_val


class TabSAKBase:
    @classmethod
    def cts_type(cls):
        return 'TabSAKBase'

    def __init__(self):
        self._options = {}

    def get_option(self, arg, default=None):
        """
        Get an option

        :param arg: option name
        :type arg: str
        :param default: default value
        :type default: type of option
        :return: value of option
        :rtype: option type
        """
        if arg in self._options:
            return self._options[arg]
        return default

    def get_options(self):
        """
        Get a dictionary of all current options

        :return: options
        :rtype: dict
        """
        return self._options

    def set_options(self, **kwargs):
        """
        Set options.  All option keywords are converted to lowercase.

        :param kwargs: options
        :type kwargs: keyword options
        """
        for op, val in kwargs.items():
            self._options[op.lower()] = val


class SongSource(TabSAKBase):
    """
    Common interface for every kind of song file that can supply a beat timeline.

    The notation code only talks to songs through these three methods, so each input
    format implements them once.
    """
    @classmethod
    def cts_type(cls):
        return 'Source'

    def __init__(self):
        TabSAKBase.__init__(self)

    def timeline(self):
        """
        Builds the measure timeline for the song

        :return: timeline
        :rtype: timeline.Timeline
        """
        raise TabSAKNotImplemented("Timeline extraction not implemented")

    def metadata(self):
        """
        Song information such as the name

        :return: metadata
        :rtype: dict
        """
        raise TabSAKNotImplemented("Metadata extraction not implemented")

    def lyrics_by_measure(self):
        """
        Lyrics grouped into per-measure text segments

        :return: lyrics for each measure that has any
        :rtype: list of MeasureText
        """
        raise TabSAKNotImplemented("Lyrics extraction not implemented")


# --------------------------------------------------------------------------------------
#
#  Utility functions
#
# --------------------------------------------------------------------------------------


def grid_duration_to_note_name(duration_code, locale='US'):
    """
    Converts a grid duration code (1 = whole, 8 = eighth, ...) to a note name

    :param duration_code: denominator of the note value
    :type duration_code: int
    :param locale: 'US' or 'UK'
    :type locale: str
    :return: note description
    :rtype: str
    """
    if duration_code not in constants.GRID_DURATIONS:
        raise TabSAKValueError("Illegal grid duration %d" % duration_code)
    return constants.DURATIONS[locale.upper()][Fraction(4, duration_code)]
