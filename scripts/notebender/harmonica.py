"""Diatonic 10-hole harmonica layout (Richter tuning) for an arbitrary key.

The blow/draw interval tables and the per-hole technique capabilities are
fixed properties of the instrument; only the absolute pitches move with the
key. Every bend, overblow and overdraw entry is the base reed pitch of its
row flattened by the technique's depth.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

from .model import Note, NoteLike, same_pitch, to_note, transpose

NUM_HOLES = 10

# ---------------------------------------------------------------------------
# Key table (label -> reference note tuned to hole 1 blow)
# ---------------------------------------------------------------------------

HARMONICA_KEYS: Dict[str, str] = {
    "C": "C4",
    "D": "D4",
    "E": "E4",
    "F": "F4",
    "G": "G3",
    "A": "A3",
    "B": "B3",
    "Db": "Db4",
    "Eb": "Eb4",
    "F#": "F#4",
    "Ab": "Ab3",
    "Bb": "Bb3",
}

DEFAULT_KEY = "C4"

# ---------------------------------------------------------------------------
# Interval tables (hole 1..10)
# ---------------------------------------------------------------------------

BLOW_INTERVALS: Tuple[str, ...] = (
    "P1", "M3", "P5", "P8", "M10", "P12", "P15", "M17", "P19", "P22",
)
DRAW_INTERVALS: Tuple[str, ...] = (
    "M2", "P5", "M7", "M9", "P11", "M13", "M14", "M16", "P18", "M20",
)

# ---------------------------------------------------------------------------
# Technique capability sets (1-based holes)
# ---------------------------------------------------------------------------

WHOLE_STEP_BLOW_BEND_HOLES: FrozenSet[int] = frozenset({10})
HALF_STEP_BLOW_BEND_HOLES: FrozenSet[int] = frozenset({8, 9, 10})
OVERBLOW_HOLES: FrozenSet[int] = frozenset({1, 4, 5, 6})
HALF_STEP_DRAW_BEND_HOLES: FrozenSet[int] = frozenset({1, 2, 3, 4, 6})
OVERDRAW_HOLES: FrozenSet[int] = frozenset({7, 9, 10})
WHOLE_STEP_DRAW_BEND_HOLES: FrozenSet[int] = frozenset({2, 3})
ONE_AND_HALF_STEP_DRAW_BEND_HOLES: FrozenSet[int] = frozenset({3})

# Combined rows as displayed: bends and over-techniques share a row.
BLOW_BEND_OVERBLOW_HOLES = HALF_STEP_BLOW_BEND_HOLES | OVERBLOW_HOLES
DRAW_BEND_OVERDRAW_HOLES = HALF_STEP_DRAW_BEND_HOLES | OVERDRAW_HOLES


class Technique(Enum):
    """Playing technique for a single hole."""
    BLOW = "blow"
    WHOLE_STEP_BLOW_BEND = "whole_step_blow_bend"
    HALF_STEP_BLOW_BEND = "half_step_blow_bend"
    OVERBLOW = "overblow"
    DRAW = "draw"
    HALF_STEP_DRAW_BEND = "half_step_draw_bend"
    OVERDRAW = "overdraw"
    WHOLE_STEP_DRAW_BEND = "whole_step_draw_bend"
    ONE_AND_HALF_STEP_DRAW_BEND = "one_and_half_step_draw_bend"

    @property
    def is_blow(self) -> bool:
        return self in _BLOW_TECHNIQUES

    @property
    def is_over(self) -> bool:
        return self in (Technique.OVERBLOW, Technique.OVERDRAW)

    @property
    def bend_depth(self) -> int:
        """Bend depth in half steps (0 for plain notes and over-techniques)."""
        return _BEND_DEPTH.get(self, 0)


_BLOW_TECHNIQUES = frozenset({
    Technique.BLOW,
    Technique.WHOLE_STEP_BLOW_BEND,
    Technique.HALF_STEP_BLOW_BEND,
    Technique.OVERBLOW,
})

_BEND_DEPTH: Dict[Technique, int] = {
    Technique.HALF_STEP_BLOW_BEND: 1,
    Technique.WHOLE_STEP_BLOW_BEND: 2,
    Technique.HALF_STEP_DRAW_BEND: 1,
    Technique.WHOLE_STEP_DRAW_BEND: 2,
    Technique.ONE_AND_HALF_STEP_DRAW_BEND: 3,
}


def row_technique(row: str, hole: int) -> Optional[Technique]:
    """Technique a layout row entry stands for at a given hole."""
    if row == "blow":
        return Technique.BLOW
    if row == "draw":
        return Technique.DRAW
    if row == "whole_step_blow_bend" and hole in WHOLE_STEP_BLOW_BEND_HOLES:
        return Technique.WHOLE_STEP_BLOW_BEND
    if row == "half_step_blow_bend":
        if hole in OVERBLOW_HOLES:
            return Technique.OVERBLOW
        if hole in HALF_STEP_BLOW_BEND_HOLES:
            return Technique.HALF_STEP_BLOW_BEND
    if row == "half_step_draw_bend":
        if hole in OVERDRAW_HOLES:
            return Technique.OVERDRAW
        if hole in HALF_STEP_DRAW_BEND_HOLES:
            return Technique.HALF_STEP_DRAW_BEND
    if row == "whole_step_draw_bend" and hole in WHOLE_STEP_DRAW_BEND_HOLES:
        return Technique.WHOLE_STEP_DRAW_BEND
    if row == "one_and_half_step_draw_bend" and hole in ONE_AND_HALF_STEP_DRAW_BEND_HOLES:
        return Technique.ONE_AND_HALF_STEP_DRAW_BEND
    return None


# Resolver priority within a hole.
ROW_PRIORITY: Tuple[str, ...] = (
    "blow",
    "whole_step_blow_bend",
    "half_step_blow_bend",
    "draw",
    "half_step_draw_bend",
    "whole_step_draw_bend",
    "one_and_half_step_draw_bend",
)

# Top-to-bottom order of the rendered grid (hole numbers sit between blow and draw).
DISPLAY_ROWS: Tuple[str, ...] = (
    "whole_step_blow_bend",
    "half_step_blow_bend",
    "blow",
    "draw",
    "half_step_draw_bend",
    "whole_step_draw_bend",
    "one_and_half_step_draw_bend",
)

ROW_LABELS: Dict[str, str] = {
    "whole_step_blow_bend": "Whole Step Blow Bend",
    "half_step_blow_bend": "Overblow + Half Step Blow Bend",
    "blow": "Blow",
    "draw": "Draw",
    "half_step_draw_bend": "Half Step Draw Bend + Overdraw",
    "whole_step_draw_bend": "Whole Step Draw Bend",
    "one_and_half_step_draw_bend": "1.5 Step Draw Bend",
}


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

Row = Tuple[Optional[Note], ...]


@dataclass(frozen=True)
class Layout:
    """Every pitch a harmonica in ``key`` can produce, per hole (index 0 = hole 1)."""
    key: Note
    blow: Row
    draw: Row
    whole_step_blow_bend: Row
    half_step_blow_bend: Row
    half_step_draw_bend: Row
    whole_step_draw_bend: Row
    one_and_half_step_draw_bend: Row

    def row(self, name: str) -> Row:
        if name not in ROW_LABELS:
            raise KeyError(f"Unknown layout row: {name}")
        return getattr(self, name)

    def rows(self) -> List[Tuple[str, Row]]:
        """Rows in display order."""
        return [(name, self.row(name)) for name in DISPLAY_ROWS]

    def note(self, hole: int, technique: Technique) -> Optional[Note]:
        """Pitch produced by ``technique`` on ``hole`` (None if not playable)."""
        if not 1 <= hole <= NUM_HOLES:
            return None
        for name in ROW_PRIORITY:
            if row_technique(name, hole) is technique:
                return self.row(name)[hole - 1]
        return None

    def cells(self) -> Iterator[Tuple[int, Technique, Note]]:
        """Yield (hole, technique, note) in resolver priority order."""
        for hole in range(1, NUM_HOLES + 1):
            for name in ROW_PRIORITY:
                note = self.row(name)[hole - 1]
                if note is None:
                    continue
                yield hole, row_technique(name, hole), note


def harmonica_key(value: Optional[NoteLike]) -> Optional[Note]:
    """Resolve a key label ("G", "Bb") or explicit note ("G4") to the key note."""
    if isinstance(value, Note):
        return value if value.octave is not None else None
    if not isinstance(value, str):
        return None
    label = value.strip()
    for name, note_name in HARMONICA_KEYS.items():
        if name.lower() == label.lower():
            return to_note(note_name)
    note = to_note(label)
    if note is None or note.octave is None:
        return None
    return note


def _flatten(note: Note, hole: int, holes: FrozenSet[int], interval: str) -> Optional[Note]:
    return transpose(note, interval) if hole in holes else None


def generate_layout(key: NoteLike) -> Optional[Layout]:
    """Build the full hole layout for a harmonica in ``key``.

    Returns None if ``key`` is neither a key label nor a note with an octave.
    """
    root = harmonica_key(key)
    if root is None:
        return None

    blow = tuple(transpose(root, iv) for iv in BLOW_INTERVALS)
    draw = tuple(transpose(root, iv) for iv in DRAW_INTERVALS)
    holes = range(1, NUM_HOLES + 1)

    return Layout(
        key=root,
        blow=blow,
        draw=draw,
        whole_step_blow_bend=tuple(
            _flatten(n, h, WHOLE_STEP_BLOW_BEND_HOLES, "-M2") for h, n in zip(holes, blow)
        ),
        half_step_blow_bend=tuple(
            _flatten(n, h, BLOW_BEND_OVERBLOW_HOLES, "-m2") for h, n in zip(holes, blow)
        ),
        half_step_draw_bend=tuple(
            _flatten(n, h, DRAW_BEND_OVERDRAW_HOLES, "-m2") for h, n in zip(holes, draw)
        ),
        whole_step_draw_bend=tuple(
            _flatten(n, h, WHOLE_STEP_DRAW_BEND_HOLES, "-M2") for h, n in zip(holes, draw)
        ),
        one_and_half_step_draw_bend=tuple(
            _flatten(n, h, ONE_AND_HALF_STEP_DRAW_BEND_HOLES, "-m3") for h, n in zip(holes, draw)
        ),
    )


class LayoutCache:
    """Caller-owned memo of layouts keyed by key name."""

    def __init__(self) -> None:
        self._layouts: Dict[str, Layout] = {}

    def get(self, key: NoteLike) -> Optional[Layout]:
        root = harmonica_key(key)
        if root is None:
            return None
        layout = self._layouts.get(root.name)
        if layout is None:
            layout = generate_layout(root)
            self._layouts[root.name] = layout
        return layout

    def __len__(self) -> int:
        return len(self._layouts)

    def clear(self) -> None:
        self._layouts.clear()


def matching_cells(layout: Layout, note: Optional[Note]) -> List[Tuple[int, Technique]]:
    """All (hole, technique) pairs on ``layout`` that sound ``note``."""
    return [
        (hole, technique)
        for hole, technique, cell in layout.cells()
        if same_pitch(cell, note)
    ]
