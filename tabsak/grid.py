import abc
import collections
import logging
from tabsak.base import *

""" Placement of note onsets on a regular grid of slots within each bar """

logger = logging.getLogger(__name__)

# Rendered elements that go into grid slots
NotatedNote = collections.namedtuple('NotatedNote', ['fret', 'string'])
NotatedText = collections.namedtuple('NotatedText', ['text'])


class GridSlot(collections.namedtuple('GridSlot', ['duration', 'elements'])):
    """
    One slot of a bar's grid.  duration is the denominator of the slot's note value
    (1 = whole, 8 = eighth, ...) and elements holds the rendered notes sounding in the slot.
    A slot with no elements is a rest.
    """
    __slots__ = ()

    @property
    def is_rest(self):
        return len(self.elements) == 0

    def __str__(self):
        if self.is_rest:
            return "%s rest" % grid_duration_to_note_name(self.duration)
        return "%s: %s" % (grid_duration_to_note_name(self.duration), ', '.join(str(e) for e in self.elements))


class TimedOnset(abc.ABC):
    """
    Anything with a position in time that can be drawn in a grid slot.  Instrument-specific
    note types implement this; the grid quantizer only ever sees the two methods below.
    """

    @abc.abstractmethod
    def tick(self):
        """
        :return: absolute time of the onset, in ticks
        :rtype: int
        """

    @abc.abstractmethod
    def render(self):
        """
        Converts the onset to the element placed in its grid slot.  Raises
        NotationRenderError if the onset cannot be notated.
        """


class TextOnset(TimedOnset):
    """
    A piece of text, such as a lyric, placed on the grid like a note
    """

    def __init__(self, start_time, text):
        self.start_time = start_time
        self.text = text

    def tick(self):
        return self.start_time

    def render(self):
        return NotatedText(self.text)

    def __repr__(self):
        return "TextOnset(%d, %r)" % (self.start_time, self.text)


# --------------------------------------------------------------------------------------
#
#  Grid quantization
#
# --------------------------------------------------------------------------------------

def nearest_slot(offset, slot_width, subdivisions):
    """
    Finds the slot nearest to an offset.  Halfway points go to the later slot; offsets past
    the last slot go to the last slot.

    :param offset: offset from the start of the bar, in ticks
    :type offset: int
    :param slot_width: width of a slot, in ticks
    :type slot_width: Fraction
    :param subdivisions: number of slots in the bar
    :type subdivisions: int
    :return: slot index
    :rtype: int
    """
    j = int((offset + slot_width / 2) // slot_width)
    return min(max(j, 0), subdivisions - 1)


def grid_error(offsets, bar_duration, subdivisions):
    """
    Places every offset in its nearest slot of an evenly divided bar and measures how far
    the offsets are from their slots.

    :param offsets: onset offsets from the start of the bar, in ticks
    :type offsets: list of int
    :param bar_duration: bar length in ticks
    :type bar_duration: int
    :param subdivisions: number of slots in the bar
    :type subdivisions: int
    :return: (total error in ticks, slot index for each offset)
    :rtype: tuple of (Fraction, list of int)
    """
    slot_width = Fraction(bar_duration, subdivisions)
    slots = [nearest_slot(t, slot_width, subdivisions) for t in offsets]
    total_error = sum((abs(t - j * slot_width) for t, j in zip(offsets, slots)), Fraction(0))
    return (total_error, slots)


def choose_subdivision(offsets, bar_duration, candidates=constants.GRID_SUBDIVISIONS):
    """
    Chooses the coarsest grid that fits the offsets.  Candidates are tried coarsest first,
    and the first one that places every offset exactly is used.  If none is exact, the
    finest candidate is used, with each offset in its nearest slot.

    :param offsets: onset offsets from the start of the bar, in ticks
    :type offsets: list of int
    :param bar_duration: bar length in ticks
    :type bar_duration: int
    :param candidates: subdivision counts to try
    :type candidates: sequence of int
    :return: (chosen subdivision count, slot index for each offset)
    :rtype: tuple of (int, list of int)
    """
    if len(candidates) == 0:
        raise TabSAKValueError("No grid subdivisions to choose from")
    for subdivisions in sorted(candidates):
        e, slots = grid_error(offsets, bar_duration, subdivisions)
        if e == 0:  # Perfect quantization!  We are done.
            return (subdivisions, slots)
    logger.debug("No exact grid for bar of %d ticks; using %d slots with error %s",
                 bar_duration, subdivisions, e)
    return (subdivisions, slots)


class GridQuantizer(TabSAKBase):
    """
    Quantizes the onsets in a bar to the coarsest regular grid that fits them.

    Options:
        * **subdivisions** (tuple of int) candidate slot counts per bar (default (8, 16, 32, 64))
    """
    @classmethod
    def cts_type(cls):
        return 'GridQuantizer'

    def __init__(self, **kwargs):
        TabSAKBase.__init__(self)
        self.set_options(**kwargs)
        if len(self.subdivisions) == 0:
            raise TabSAKValueError("At least one grid subdivision is required")
        for s in self.subdivisions:
            if s not in constants.GRID_DURATIONS:
                raise TabSAKValueError("Unsupported grid subdivision %d" % s)

    @property
    def subdivisions(self):
        return tuple(sorted(self.get_option('subdivisions', constants.GRID_SUBDIVISIONS)))

    def quantize(self, onsets, bar_duration, bar_start=0):
        """
        Builds the slots for one bar.  A bar without onsets is a single whole rest.  Onsets
        that land in the same slot are kept together as a chord.

        :param onsets: onsets in the bar
        :type onsets: iterable of TimedOnset
        :param bar_duration: bar length in ticks
        :type bar_duration: int
        :param bar_start: absolute time of the start of the bar, in ticks
        :type bar_start: int
        :return: slots covering the whole bar
        :rtype: list of GridSlot
        """
        if bar_duration <= 0:
            raise TabSAKValueError("Illegal bar duration %d" % bar_duration)
        onsets = sorted(onsets, key=lambda o: o.tick())
        if len(onsets) == 0:
            return [GridSlot(constants.WHOLE_NOTE, ())]

        offsets = [o.tick() - bar_start for o in onsets]
        subdivisions, slot_indexes = choose_subdivision(offsets, bar_duration, self.subdivisions)

        slot_contents = [[] for _ in range(subdivisions)]
        for onset, j in zip(onsets, slot_indexes):
            try:
                slot_contents[j].append(onset.render())
            except NotationRenderError as e:
                logger.warning("Skipping onset at time %d: %s", onset.tick(), e)
        return [GridSlot(subdivisions, tuple(c)) for c in slot_contents]


def quantize_bar(onsets, bar_duration, bar_start=0):
    """
    Quantizes one bar with the default grid candidates

    :param onsets: onsets in the bar
    :type onsets: iterable of TimedOnset
    :param bar_duration: bar length in ticks
    :type bar_duration: int
    :param bar_start: absolute time of the start of the bar, in ticks
    :type bar_start: int
    :return: slots covering the whole bar
    :rtype: list of GridSlot
    """
    return GridQuantizer().quantize(onsets, bar_duration, bar_start)


def bars_from_onsets(onsets, timeline, quantizer=None):
    """
    Groups onsets into the timeline's measures and quantizes every measure

    :param onsets: onsets for a whole track
    :type onsets: iterable of TimedOnset
    :param timeline: beat timeline
    :type timeline: timeline.Timeline
    :param quantizer: quantizer to use; a default GridQuantizer if None
    :type quantizer: GridQuantizer
    :return: slots for each measure
    :rtype: list of list of GridSlot
    """
    if quantizer is None:
        quantizer = GridQuantizer()
    bar_onsets = [[] for _ in timeline.measures]
    for o in onsets:
        i = timeline.measure_index_at(o.tick())
        if i is None:
            logger.debug("Onset at time %d is outside every measure", o.tick())
            continue
        bar_onsets[i].append(o)
    return [quantizer.quantize(notes, m.duration, m.start_time) for m, notes in zip(timeline.measures, bar_onsets)]
