import bisect
import logging
from tabsak.base import *

""" Tempo lookup over a song's tempo changes """

logger = logging.getLogger(__name__)


class TempoMap:
    """
    Ordered table of tempo changes for a song.

    Tempo changes may be found in any track, so callers gather them all and hand them over
    in any order.  The map answers two questions:  which tempo applies at a given tick, and
    how much real time passes between two ticks.
    """

    def __init__(self, tempo_events=()):
        """
        :param tempo_events: tempo changes, in any order
        :type tempo_events: iterable of TempoEvent
        """
        events = sorted((TempoEvent(int(e.start_time), float(e.bpm)) for e in tempo_events),
                        key=lambda e: e.start_time)
        # Eliminate redundant tempo changes, keeping the last one found at each time
        deduped = []
        for e in events:
            if e.bpm <= 0:
                raise TabSAKValueError("Illegal tempo %f at time %d" % (e.bpm, e.start_time))
            if deduped and deduped[-1].start_time == e.start_time:
                deduped[-1] = e
            else:
                deduped.append(e)
        if len(deduped) == 0:
            logger.debug("No tempo events found; assuming %d BPM", constants.DEFAULT_BPM)
            deduped.append(TempoEvent(0, float(constants.DEFAULT_BPM)))
        self._events = tuple(deduped)
        self._times = [e.start_time for e in self._events]

    @classmethod
    def build(cls, tempo_events):
        """
        Builds a tempo map from scattered tempo change events

        :param tempo_events: tempo changes from all tracks
        :type tempo_events: iterable of TempoEvent
        :return: tempo map
        :rtype: TempoMap
        """
        return cls(tempo_events)

    @property
    def events(self):
        return self._events

    def __len__(self):
        return len(self._events)

    def __iter__(self):
        return iter(self._events)

    def __getitem__(self, i):
        return self._events[i]

    def bpm_at_tick(self, tick):
        """
        Finds the tempo in effect at a given time.  Before the first tempo change, the first
        tempo is used.

        :param tick: time in ticks
        :type tick: int
        :return: tempo in beats per minute
        :rtype: float
        """
        pos = bisect.bisect_right(self._times, tick)
        return self._events[max(pos - 1, 0)].bpm

    def seconds_between(self, start_tick, end_tick, ticks_per_beat):
        """
        Real time elapsed between two ticks, following every tempo change in between.

        :param start_tick: start time in ticks
        :type start_tick: int
        :param end_tick: end time in ticks
        :type end_tick: int
        :param ticks_per_beat: ticks per quarter note
        :type ticks_per_beat: int or float
        :return: elapsed time in seconds (negative if end_tick is before start_tick)
        :rtype: float
        """
        if ticks_per_beat <= 0:
            raise TabSAKValueError("Illegal ticks per beat %s" % ticks_per_beat)
        if end_tick < start_tick:
            return -self.seconds_between(end_tick, start_tick, ticks_per_beat)

        total_seconds = 0.0
        current_tick = start_tick
        for e in self._events:
            if e.start_time <= start_tick:
                continue
            next_tick = min(e.start_time, end_tick)
            if current_tick < next_tick:
                bpm = self.bpm_at_tick(current_tick)
                total_seconds += (next_tick - current_tick) / ticks_per_beat * 60.0 / bpm
            current_tick = next_tick
            if current_tick >= end_tick:
                break

        # Handle remaining ticks after the last tempo change
        if current_tick < end_tick:
            bpm = self.bpm_at_tick(current_tick)
            total_seconds += (end_tick - current_tick) / ticks_per_beat * 60.0 / bpm

        return total_seconds

    def tick_to_seconds(self, tick, ticks_per_beat):
        """
        Converts an absolute time in ticks to seconds from the start of the song

        :param tick: time in ticks
        :type tick: int
        :param ticks_per_beat: ticks per quarter note
        :type ticks_per_beat: int or float
        :return: time in seconds
        :rtype: float
        """
        return self.seconds_between(0, tick, ticks_per_beat)

    def __str__(self):
        return '\n'.join("tick %6d: %.3f BPM" % (e.start_time, e.bpm) for e in self._events)
