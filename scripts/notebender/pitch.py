"""Frequency -> nearest note + cents conversion for live pitch feedback.

The converter is pure and never filters on clarity; the clarity threshold
belongs to the capture side and lives in :class:`ClarityGate`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from .model import Note, nearest_note

DEFAULT_MIN_CLARITY = 0.95
CENTS_WINDOW = 50.0
MARKER_MAX_OFFSET = 8.0


@dataclass(frozen=True)
class PitchReading:
    """One analysis frame matched to its nearest note."""
    note: Note
    pitch_class: str
    cents: float
    frequency: float
    clarity: Optional[float] = None

    @property
    def in_tune_window(self) -> bool:
        """False when cents fall outside +/-50 and the match should be re-checked."""
        return abs(self.cents) <= CENTS_WINDOW


def freq_to_note_and_cents(
    freq: float, clarity: Optional[float] = None,
) -> Optional[PitchReading]:
    """Nearest note and signed cents deviation for ``freq``.

    Cents are ``1200 * log2(freq / f_nearest)`` and are not clamped.
    Returns None for non-positive or non-finite frequencies.
    """
    note = nearest_note(freq)
    if note is None:
        return None
    base = note.frequency
    if not base:
        return None
    return PitchReading(
        note=note,
        pitch_class=note.pitch_class,
        cents=1200 * math.log2(freq / base),
        frequency=float(freq),
        clarity=clarity,
    )


class ClarityGate:
    """Capture-side filter: only samples clearer than ``min_clarity`` pass."""

    def __init__(self, min_clarity: float = DEFAULT_MIN_CLARITY) -> None:
        if not 0.0 <= min_clarity <= 1.0:
            raise ValueError(f"min_clarity must be in [0, 1], got {min_clarity}")
        self.min_clarity = min_clarity

    def accept(self, freq: float, clarity: float) -> Optional[PitchReading]:
        if clarity is None or not clarity > self.min_clarity:
            return None
        return freq_to_note_and_cents(freq, clarity)


def read_stream(
    samples: Iterable[Tuple[float, float]],
    gate: Optional[ClarityGate] = None,
) -> Iterator[Optional[PitchReading]]:
    """Map (frequency, clarity) samples to readings, one result per tick."""
    gate = gate or ClarityGate()
    for freq, clarity in samples:
        yield gate.accept(freq, clarity)


def marker_offset(cents: float, max_offset: float = MARKER_MAX_OFFSET) -> float:
    """Display offset of the tuning marker (positive = down), clamped.

    Cosmetic only; note matching never looks at this value.
    """
    offset = -(cents / CENTS_WINDOW) * max_offset
    return max(-max_offset, min(max_offset, offset))
