"""Semantic note and interval model.

Notes keep their spelling (letter + alteration) so transposition by a
letter-based interval yields the conventional name (F + P4 = Bb), while every
pitch comparison in the package goes through the semitone index (``midi``).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional, Union

# ---------------------------------------------------------------------------
# Pitch constants
# ---------------------------------------------------------------------------

A4_FREQUENCY = 440.0
A4_MIDI = 69

LETTERS = "CDEFGAB"
LETTER_PC = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NOTE_NAMES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# ---------------------------------------------------------------------------
# Interval constants (semitones)
# ---------------------------------------------------------------------------

UNISON = 0
MINOR_2ND = 1
MAJOR_2ND = 2
MINOR_3RD = 3
MAJOR_3RD = 4
PERFECT_4TH = 5
TRITONE = 6
PERFECT_5TH = 7
OCTAVE = 12

# Semitones of each diatonic step above the unison (major scale).
_STEP_SEMITONES = [0, 2, 4, 5, 7, 9, 11]
# Unison, fourth and fifth take P/A/d; the rest take M/m/A/d.
_PERFECTABLE_STEPS = frozenset({0, 3, 4})

# (diatonic number, quality) for each simple semitone distance.
_SIMPLE_INTERVALS = [
    (1, "P"), (2, "m"), (2, "M"), (3, "m"), (3, "M"), (4, "P"),
    (5, "d"), (5, "P"), (6, "m"), (6, "M"), (7, "m"), (7, "M"),
]

_NOTE_RE = re.compile(r"^([A-Ga-g])(#+|b+|x)?(-?\d+)?$")
_INTERVAL_RE = re.compile(r"^(-?)(P|M|m|A+|d+)(\d+)$")


# ---------------------------------------------------------------------------
# Note / Interval
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Note:
    """A spelled note. ``octave`` is None for a bare pitch class."""
    letter: str
    alteration: int = 0
    octave: Optional[int] = None

    @property
    def accidental(self) -> str:
        if self.alteration > 0:
            return "#" * self.alteration
        return "b" * -self.alteration

    @property
    def pitch_class(self) -> str:
        return self.letter + self.accidental

    @property
    def name(self) -> str:
        if self.octave is None:
            return self.pitch_class
        return f"{self.pitch_class}{self.octave}"

    @property
    def chroma(self) -> int:
        """Pitch class number 0-11 (C=0)."""
        return (LETTER_PC[self.letter] + self.alteration) % 12

    @property
    def midi(self) -> Optional[int]:
        """Semitone index in MIDI numbering (C4 = 60)."""
        if self.octave is None:
            return None
        return _midi_of(self.letter, self.alteration, self.octave)

    @property
    def frequency(self) -> Optional[float]:
        """Equal-tempered frequency in Hz (A4 = 440)."""
        midi = self.midi
        if midi is None:
            return None
        return A4_FREQUENCY * 2 ** ((midi - A4_MIDI) / 12)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Interval:
    """A signed interval: diatonic number (never 0) plus semitone size."""
    number: int
    semitones: int

    @property
    def direction(self) -> int:
        return 1 if self.number > 0 else -1

    @property
    def steps(self) -> int:
        """Signed count of letter steps spanned."""
        return (abs(self.number) - 1) * self.direction

    @property
    def name(self) -> str:
        steps = abs(self.number) - 1
        simple = steps % 7
        base = _STEP_SEMITONES[simple] + OCTAVE * (steps // 7)
        alt = abs(self.semitones) - base
        if simple in _PERFECTABLE_STEPS:
            if alt == 0:
                quality = "P"
            elif alt > 0:
                quality = "A" * alt
            else:
                quality = "d" * -alt
        else:
            if alt == 0:
                quality = "M"
            elif alt == -1:
                quality = "m"
            elif alt > 0:
                quality = "A" * alt
            else:
                quality = "d" * (-alt - 1)
        sign = "-" if self.number < 0 else ""
        return f"{sign}{quality}{abs(self.number)}"

    def __str__(self) -> str:
        return self.name


IntervalLike = Union[Interval, str, int]
NoteLike = Union[Note, str]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _midi_of(letter: str, alteration: int, octave: int) -> int:
    return (octave + 1) * 12 + LETTER_PC[letter] + alteration


def parse_note(name: str) -> Optional[Note]:
    """Parse a note name such as ``C``, ``c#4``, ``Bb3`` or ``F##2``.

    Returns None for anything that is not a note name.
    """
    if not isinstance(name, str):
        return None
    m = _NOTE_RE.match(name.strip())
    if not m:
        return None
    letter, acc, octave = m.groups()
    if not acc:
        alteration = 0
    elif acc == "x":
        alteration = 2
    elif acc[0] == "#":
        alteration = len(acc)
    else:
        alteration = -len(acc)
    return Note(
        letter=letter.upper(),
        alteration=alteration,
        octave=int(octave) if octave is not None else None,
    )


def to_note(value: Optional[NoteLike]) -> Optional[Note]:
    """Coerce a Note or note name to a Note (None if invalid)."""
    if isinstance(value, Note):
        return value
    if value is None:
        return None
    return parse_note(value)


def parse_interval(name: str) -> Optional[Interval]:
    """Parse an interval name such as ``M3``, ``P5``, ``-m2`` or ``M17``."""
    if not isinstance(name, str):
        return None
    m = _INTERVAL_RE.match(name.strip())
    if not m:
        return None
    sign_str, quality, number_str = m.groups()
    number = int(number_str)
    if number < 1:
        return None
    steps = number - 1
    simple = steps % 7
    base = _STEP_SEMITONES[simple] + OCTAVE * (steps // 7)
    perfectable = simple in _PERFECTABLE_STEPS
    if quality == "P":
        if not perfectable:
            return None
        alt = 0
    elif quality == "M":
        if perfectable:
            return None
        alt = 0
    elif quality == "m":
        if perfectable:
            return None
        alt = -1
    elif quality[0] == "A":
        alt = len(quality)
    else:
        alt = -len(quality) if perfectable else -(len(quality) + 1)
    sign = -1 if sign_str else 1
    return Interval(number=sign * number, semitones=sign * (base + alt))


def interval_from_semitones(semitones: int) -> Interval:
    """Conventionally spelled interval for a signed semitone count."""
    sign = -1 if semitones < 0 else 1
    octaves, rem = divmod(abs(semitones), OCTAVE)
    number, _ = _SIMPLE_INTERVALS[rem]
    return Interval(number=sign * (number + 7 * octaves), semitones=semitones)


def _coerce_interval(interval: IntervalLike) -> Interval:
    if isinstance(interval, Interval):
        return interval
    if isinstance(interval, int):
        return interval_from_semitones(interval)
    parsed = parse_interval(interval)
    if parsed is None:
        raise ValueError(f"Invalid interval name: {interval!r}")
    return parsed


def semitones_of(interval: IntervalLike) -> int:
    return _coerce_interval(interval).semitones


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


def transpose(note: Note, interval: IntervalLike) -> Note:
    """Transpose a note, keeping letter-correct spelling.

    ``semitone_index(transpose(n, i)) == semitone_index(n) + semitones_of(i)``
    holds for every note with an octave.
    """
    iv = _coerce_interval(interval)
    octave = note.octave if note.octave is not None else 4
    letter_abs = LETTERS.index(note.letter) + 7 * octave + iv.steps
    new_octave, letter_idx = divmod(letter_abs, 7)
    new_letter = LETTERS[letter_idx]
    target = _midi_of(note.letter, note.alteration, octave) + iv.semitones
    alteration = target - _midi_of(new_letter, 0, new_octave)
    return Note(
        letter=new_letter,
        alteration=alteration,
        octave=new_octave if note.octave is not None else None,
    )


def pitch_class(note: Note) -> str:
    return note.pitch_class


def semitone_index(note: Note) -> Optional[int]:
    return note.midi


def frequency(note: Note) -> Optional[float]:
    return note.frequency


def same_pitch(a: Optional[Note], b: Optional[Note]) -> bool:
    """True if both notes sound the same pitch (spelling ignored)."""
    if a is None or b is None:
        return False
    if a.midi is None or b.midi is None:
        return False
    return a.midi == b.midi


def from_midi(midi: int, prefer_sharps: bool = True) -> Note:
    """Build a note from a MIDI number, spelled with sharps or flats."""
    names = NOTE_NAMES if prefer_sharps else FLAT_NOTE_NAMES
    pc = parse_note(names[midi % 12])
    return Note(letter=pc.letter, alteration=pc.alteration, octave=midi // 12 - 1)


_AWKWARD_SPELLINGS = frozenset({("E", 1), ("B", 1), ("F", -1), ("C", -1)})


def simplify(note: Note) -> Note:
    """Respell to the simplest enharmonic, keeping sharp/flat direction.

    E# -> F, Cb -> B, F## -> G, Ebb -> D; plain and single-accidental
    spellings are returned unchanged.
    """
    if abs(note.alteration) <= 1 and (note.letter, note.alteration) not in _AWKWARD_SPELLINGS:
        return note
    prefer_sharps = note.alteration > 0
    if note.midi is not None:
        return from_midi(note.midi, prefer_sharps=prefer_sharps)
    names = NOTE_NAMES if prefer_sharps else FLAT_NOTE_NAMES
    return parse_note(names[note.chroma])


def nearest_note(freq: float) -> Optional[Note]:
    """Nearest equal-tempered note (sharp spelling) to a frequency.

    Returns None for non-positive, non-finite or non-numeric input.
    """
    if isinstance(freq, bool) or not isinstance(freq, (int, float)):
        return None
    if not math.isfinite(freq) or freq <= 0:
        return None
    midi = math.floor(A4_MIDI + 12 * math.log2(freq / A4_FREQUENCY) + 0.5)
    return from_midi(midi)
