"""Diatonic modes, triads and circle-of-fifths chord-quality mapping.

Pure functions; ``ScaleCache`` is an optional caller-owned memo.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .model import (
    MAJOR_3RD,
    MINOR_3RD,
    PERFECT_5TH,
    TRITONE,
    UNISON,
    Note,
    NoteLike,
    simplify,
    to_note,
    transpose,
)

MAJOR_SCALE_INTERVALS: Tuple[str, ...] = ("P1", "M2", "M3", "P4", "P5", "M6", "M7")

# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Mode:
    """A diatonic mode and its harmonica position."""
    name: str
    degree: int               # degree of the parent major scale (1-7)
    harmonica_position: str   # display label, e.g. "2nd"
    harmonica_order: int      # display sort key


MODES: Tuple[Mode, ...] = (
    Mode("Ionian", 1, "1st", 1),
    Mode("Mixolydian", 5, "2nd", 2),
    Mode("Dorian", 2, "3rd", 3),
    Mode("Aeolian", 6, "4th", 4),
    Mode("Phrygian", 3, "5th", 5),
    Mode("Locrian", 7, "6th", 6),
    Mode("Lydian", 4, "12th", 12),
)

_MODES_BY_NAME: Dict[str, Mode] = {m.name.lower(): m for m in MODES}


def get_mode(name) -> Optional[Mode]:
    """Look up a mode by name (case-insensitive)."""
    if isinstance(name, Mode):
        return name
    if not isinstance(name, str):
        return None
    return _MODES_BY_NAME.get(name.strip().lower())


def modes_by_harmonica_order() -> List[Mode]:
    return sorted(MODES, key=lambda m: m.harmonica_order)


# ---------------------------------------------------------------------------
# Chord quality
# ---------------------------------------------------------------------------


class ChordQuality(Enum):
    MAJOR = "major"
    MINOR = "minor"
    DIMINISHED = "diminished"
    UNCLASSIFIED = "unclassified"


TRIAD_TEMPLATES: Dict[frozenset, ChordQuality] = {
    frozenset({UNISON, MAJOR_3RD, PERFECT_5TH}): ChordQuality.MAJOR,
    frozenset({UNISON, MINOR_3RD, PERFECT_5TH}): ChordQuality.MINOR,
    frozenset({UNISON, MINOR_3RD, TRITONE}): ChordQuality.DIMINISHED,
}

_QUALITY_SUFFIX: Dict[ChordQuality, str] = {
    ChordQuality.MAJOR: "M",
    ChordQuality.MINOR: "m",
    ChordQuality.DIMINISHED: "dim",
}


def classify_triad(notes: Sequence[Note]) -> ChordQuality:
    """Classify a root-position triad by its intervals above the first note."""
    if not notes:
        return ChordQuality.UNCLASSIFIED
    root = notes[0].chroma
    intervals = frozenset((n.chroma - root) % 12 for n in notes)
    return TRIAD_TEMPLATES.get(intervals, ChordQuality.UNCLASSIFIED)


def chord_symbol(root: Note, quality: ChordQuality) -> str:
    """Chord symbol such as ``CM``, ``Dm`` or ``Bdim`` ("" if unclassified)."""
    suffix = _QUALITY_SUFFIX.get(quality)
    if suffix is None:
        return ""
    return root.pitch_class + suffix


@dataclass(frozen=True)
class Triad:
    root: Note
    notes: Tuple[Note, Note, Note]
    quality: ChordQuality

    @property
    def symbol(self) -> str:
        return chord_symbol(self.root, self.quality)


# ---------------------------------------------------------------------------
# Scales and triads
# ---------------------------------------------------------------------------


def _pitch_class_of(value: NoteLike) -> Optional[Note]:
    note = to_note(value)
    if note is None:
        return None
    return Note(letter=note.letter, alteration=note.alteration)


def major_scale(root: NoteLike) -> Optional[List[Note]]:
    """Seven pitch classes of the major scale on ``root`` (None if invalid)."""
    tonic = _pitch_class_of(root)
    if tonic is None:
        return None
    return [transpose(tonic, iv) for iv in MAJOR_SCALE_INTERVALS]


def mode_tonic(root: NoteLike, mode) -> Optional[Note]:
    """Tonic of ``mode`` taken from the major scale on ``root``.

    Dorian from C resolves to D, Mixolydian from C to G.
    """
    m = get_mode(mode)
    parent = major_scale(root)
    if m is None or parent is None:
        return None
    return parent[m.degree - 1]


def mode_scale(root: NoteLike, mode) -> Optional[List[Note]]:
    """The seven notes of ``mode`` starting on its tonic."""
    m = get_mode(mode)
    parent = major_scale(root)
    if m is None or parent is None:
        return None
    start = m.degree - 1
    return parent[start:] + parent[:start]


def build_triads(scale: Sequence[Note]) -> List[Triad]:
    """Stack thirds on every degree of a 7-note scale (wrapping within it)."""
    size = len(scale)
    triads = []
    for i in range(size):
        notes = (scale[i], scale[(i + 2) % size], scale[(i + 4) % size])
        triads.append(Triad(root=scale[i], notes=notes, quality=classify_triad(notes)))
    return triads


def quality_map(triads: Sequence[Triad]) -> Dict[int, ChordQuality]:
    """Chord quality per chroma (0-11) for the circle display.

    A triad root always takes its triad's quality; third and fifth only
    fill chromas that are still unclassified.
    """
    result = {chroma: ChordQuality.UNCLASSIFIED for chroma in range(12)}
    for triad in triads:
        root = triad.root.chroma
        result[root] = triad.quality
        for note in triad.notes:
            chroma = note.chroma
            if chroma != root and result[chroma] is ChordQuality.UNCLASSIFIED:
                result[chroma] = triad.quality
    return result


def scale_degree(note: NoteLike, scale: Sequence[Note]) -> Optional[int]:
    """1-based degree of ``note`` in ``scale`` by chroma, or None."""
    n = to_note(note)
    if n is None:
        return None
    for idx, s in enumerate(scale):
        if s.chroma == n.chroma:
            return idx + 1
    return None


def circle_of_fifths(start: NoteLike = "C") -> Optional[List[Note]]:
    """Twelve pitch classes stacked by perfect fifths, simplified for display."""
    note = _pitch_class_of(start)
    if note is None:
        return None
    names = []
    for _ in range(12):
        names.append(simplify(note))
        note = transpose(note, "P5")
    return names


# ---------------------------------------------------------------------------
# Derived view
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CirclePosition:
    note: Note
    quality: ChordQuality
    is_tonic: bool
    degree: Optional[int]


@dataclass(frozen=True)
class ModeView:
    """Everything derived from a (root, mode) selection."""
    root: Note
    mode: Mode
    tonic: Note
    scale: Tuple[Note, ...]
    triads: Tuple[Triad, ...]
    qualities: Dict[int, ChordQuality]

    def circle(self) -> List[CirclePosition]:
        return [
            CirclePosition(
                note=note,
                quality=self.qualities[note.chroma],
                is_tonic=note.chroma == self.tonic.chroma,
                degree=scale_degree(note, self.scale),
            )
            for note in circle_of_fifths()
        ]


def derive_scale(root: NoteLike, mode="Ionian") -> Optional[ModeView]:
    """Tonic, scale, triads and quality map for ``root`` and ``mode``.

    Returns None for an unknown mode or a root that is not a note name.
    """
    m = get_mode(mode)
    pc = _pitch_class_of(root)
    if m is None or pc is None:
        return None
    scale = mode_scale(pc, m)
    triads = build_triads(scale)
    return ModeView(
        root=pc,
        mode=m,
        tonic=scale[0],
        scale=tuple(scale),
        triads=tuple(triads),
        qualities=quality_map(triads),
    )


def circle_view(root: NoteLike, mode="Ionian") -> Optional[List[CirclePosition]]:
    view = derive_scale(root, mode)
    return view.circle() if view is not None else None


class ScaleCache:
    """Caller-owned memo of mode views keyed by (root, mode)."""

    def __init__(self) -> None:
        self._views: Dict[Tuple[str, str], ModeView] = {}

    def get(self, root: NoteLike, mode="Ionian") -> Optional[ModeView]:
        pc = _pitch_class_of(root)
        m = get_mode(mode)
        if pc is None or m is None:
            return None
        cache_key = (pc.name, m.name)
        view = self._views.get(cache_key)
        if view is None:
            view = derive_scale(pc, m)
            self._views[cache_key] = view
        return view

    def __len__(self) -> int:
        return len(self._views)
