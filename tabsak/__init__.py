from .constants import TABSAK_VERSION as __version__
from .tempo_map import TempoMap
from .timeline import Timeline, Measure, build_timeline
from .tempo_quantizer import quantize_tempos
from .grid import GridQuantizer, GridSlot, TimedOnset
from .lyrics import group_text_segments
from .notation import build_score
from .midi import MidiSong
