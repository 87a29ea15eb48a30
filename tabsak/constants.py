# Constants for TabSAK
#

from fractions import Fraction


# Version information.  Update BUILD_VERSION with every significant bugfix;
# update MINOR_VERSION with every feature addition
MAJOR_VERSION = 0
MINOR_VERSION = 1
BUILD_VERSION = 0

TABSAK_VERSION = f"{MAJOR_VERSION}.{MINOR_VERSION}.{BUILD_VERSION}"
TABSAK_RELEASE = f"{MAJOR_VERSION}.{MINOR_VERSION}"

DEFAULT_MIDI_PPQN = 480
DEFAULT_BPM = 120
DEFAULT_BEATS_PER_MEASURE = 4

# Beat track markers: C-1 is a downbeat, C#-1 is any other beat
BEAT_TRACK_NAME = 'BEAT'
DOWNBEAT_KEY = 12
BEAT_KEY = 13

VOCALS_TRACK_NAME = 'PART VOCALS'

# A MIDI division with the high bit set is SMPTE timing, not ticks per quarter note
SMPTE_DIVISION_FLAG = 0x8000

# Candidate subdivisions of a bar, coarsest first
GRID_SUBDIVISIONS = (8, 16, 32, 64)

# Notated durations, as the denominator of the note value
WHOLE_NOTE = 1
HALF_NOTE = 2
QUARTER_NOTE = 4
EIGHTH_NOTE = 8
SIXTEENTH_NOTE = 16
THIRTY_SECOND_NOTE = 32
SIXTY_FOURTH_NOTE = 64

GRID_DURATIONS = (WHOLE_NOTE, EIGHTH_NOTE, SIXTEENTH_NOTE, THIRTY_SECOND_NOTE, SIXTY_FOURTH_NOTE)

# Durations are defined in terms of quarter notes
DURATIONS = {
    'US': {
        Fraction(4, 1): 'whole', Fraction(2, 1): 'half', Fraction(1, 1): 'quarter',
        Fraction(1, 2): 'eighth', Fraction(1, 4): 'sixteenth', Fraction(1, 8): 'thirty-second',
        Fraction(1, 16): 'sixty-fourth'
    },
    'UK': {
        Fraction(4, 1): 'semibreve', Fraction(2, 1): 'minim', Fraction(1, 1): 'crochet',
        Fraction(1, 2): 'quaver', Fraction(1, 4): 'semiquaver', Fraction(1, 8): 'demisemiquaver',
        Fraction(1, 16): 'hemidemisemiquaver'
    }
}
