import logging
from tabsak.base import *

""" Lyric text cleanup and grouping of text fragments into measures """

logger = logging.getLogger(__name__)

# Markers that may trail a lyric syllable:  non-pitched (#, ^) and range divider (%)
LYRIC_TRAILING_MARKERS = ('#', '^', '%')


def parse_lyrics(raw_lyrics):
    """
    Converts Rock Band style vocal lyric syllables into readable text.

    The vocal charts spread words over several events with these conventions:
        * Multi-syllable words:  "Hel-" "lo" becomes "Hello"
        * Slides (several notes per syllable):  a lone "+" is dropped, and a syllable ending
          in "+" continues into the next one
        * Non-pitched and range markers:  "All#", "All^" and "word%" lose the marker
        * Real hyphens are written as "=":  "Ex=" "Girl-" "friend" becomes "Ex-Girlfriend"

    :param raw_lyrics: lyric syllables in time order
    :type raw_lyrics: iterable of str
    :return: words separated by single spaces
    :rtype: str
    """
    words = []
    current_word = ''
    for lyric in raw_lyrics:
        if lyric == '' or lyric == '+':
            continue

        cleaned = lyric
        for marker in LYRIC_TRAILING_MARKERS:
            if cleaned.endswith(marker):
                cleaned = cleaned[:-1]

        is_slide = cleaned.endswith('+')
        if is_slide:
            cleaned = cleaned[:-1].strip()

        # "=" is a hyphen that stays in the word, "-" only joins syllables
        is_continued = cleaned.endswith('-') or cleaned.endswith('=')
        if cleaned.endswith('-'):
            cleaned = cleaned[:-1].strip()
        cleaned = cleaned.replace('=', '-')

        current_word += cleaned
        if not is_continued and not is_slide:
            if current_word != '':
                words.append(current_word)
            current_word = ''

    if current_word != '':
        words.append(current_word)
    return ' '.join(words)


def group_text_segments(text_events, timeline, normalize=parse_lyrics):
    """
    Groups timed text fragments by measure.  Inside a measure, fragments are merged into a
    single segment until there is a gap of at least one beat between two fragments, which
    starts a new segment.  Fragments outside every measure are dropped, and measures with no
    text are left out of the result.

    :param text_events: timed text fragments
    :type text_events: iterable of TextEvent
    :param timeline: beat timeline
    :type timeline: timeline.Timeline
    :param normalize: converts the raw fragments of one segment to its text
    :type normalize: callable
    :return: segments for each measure with text, in measure order
    :rtype: list of MeasureText
    """
    if len(timeline.measures) == 0:
        return []

    measure_groups = [[] for _ in timeline.measures]
    for e in text_events:
        i = timeline.measure_index_at(e.start_time)
        if i is not None:
            measure_groups[i].append(e)

    ret_val = []
    for i, events in enumerate(measure_groups):
        if len(events) == 0:
            continue
        events.sort(key=lambda e: e.start_time)
        segments = []
        current = [events[0]]
        for e in events[1:]:
            if e.start_time - current[-1].start_time >= timeline.ticks_per_beat:
                segments.append(_make_segment(current, normalize))
                current = []
            current.append(e)
        segments.append(_make_segment(current, normalize))
        segments = [s for s in segments if s.text != '']
        if len(segments) > 0:
            ret_val.append(MeasureText(i, segments))

    logger.info("Grouped text into %d measures", len(ret_val))
    return ret_val


def _make_segment(events, normalize):
    return TextSegment(events[0].start_time, normalize([e.text for e in events if e.text != '']))
