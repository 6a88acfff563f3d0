"""NoteBender - harmonica and circle-of-fifths music theory engine.

Usage:
    python -m notebender layout --key G
    python -m notebender tab C4 E5 Bb4 --key C
    python -m notebender scale C --mode dorian
    python -m notebender pitch 440 466.2
    python -m notebender transpose song.musicxml --key A
"""

from .harmonica import Layout, LayoutCache, Technique, generate_layout, harmonica_key
from .model import Interval, Note, nearest_note, parse_note, transpose
from .modes import ChordQuality, ModeView, derive_scale
from .pitch import PitchReading, freq_to_note_and_cents
from .tablature import TabToken, resolve
from .transpose import NoValidTransposition, TransposeFilters, find_transposition

__all__ = [
    "ChordQuality",
    "Interval",
    "Layout",
    "LayoutCache",
    "ModeView",
    "NoValidTransposition",
    "Note",
    "PitchReading",
    "TabToken",
    "Technique",
    "TransposeFilters",
    "derive_scale",
    "find_transposition",
    "freq_to_note_and_cents",
    "generate_layout",
    "harmonica_key",
    "nearest_note",
    "parse_note",
    "resolve",
    "transpose",
]
