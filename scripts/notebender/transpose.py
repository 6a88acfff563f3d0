"""Auto-transpose search: find a shift that makes a whole melody playable."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .harmonica import Layout, generate_layout
from .model import Note, NoteLike, to_note, transpose
from .tablature import TabToken, resolve

DEFAULT_SEARCH_LIMIT = 36


class NoValidTransposition(LookupError):
    """No offset in the search range makes every note playable."""

    def __init__(self, limit: int, filters: "TransposeFilters") -> None:
        self.limit = limit
        self.filters = filters
        super().__init__(
            f"Couldn't find a transposition within +/-{limit} semitones "
            f"matching the selected filters ({filters.describe()})."
        )


@dataclass(frozen=True)
class TransposeFilters:
    """Techniques a player wants to avoid."""
    exclude_over: bool = True
    exclude_bends: bool = False

    def describe(self) -> str:
        parts = []
        if self.exclude_over:
            parts.append("no overblow/overdraw")
        if self.exclude_bends:
            parts.append("no bends")
        return ", ".join(parts) or "no filters"


@dataclass(frozen=True)
class Transposition:
    """A successful search result."""
    offset: int
    tokens: Tuple[Optional[TabToken], ...]  # None for rests


def violates(token: TabToken, filters: TransposeFilters) -> bool:
    if filters.exclude_over and token.over:
        return True
    if filters.exclude_bends and token.is_bend:
        return True
    return False


def candidate_offsets(limit: int = DEFAULT_SEARCH_LIMIT) -> Iterator[int]:
    """0, -1, +1, -2, +2, ... up to +/-limit."""
    yield 0
    for magnitude in range(1, limit + 1):
        yield -magnitude
        yield magnitude


def _shift(note: Note, offset: int) -> Note:
    return transpose(note, offset) if offset else note


def _annotate(
    notes: Sequence[Optional[NoteLike]], layout: Layout, offset: int,
) -> List[Optional[TabToken]]:
    tokens = []
    for value in notes:
        note = to_note(value)
        if note is None or note.midi is None:
            tokens.append(None)
            continue
        tokens.append(resolve(layout.key, _shift(note, offset), layout=layout))
    return tokens


def annotate(
    notes: Sequence[Optional[NoteLike]],
    key: NoteLike,
    offset: int = 0,
) -> List[Optional[TabToken]]:
    """Token for every note after shifting by ``offset`` (None if unplayable).

    Every entry is None when ``key`` is not a valid harmonica key.
    """
    layout = generate_layout(key)
    if layout is None:
        return [None] * len(notes)
    return _annotate(notes, layout, offset)


def find_transposition(
    notes: Sequence[Optional[NoteLike]],
    key: NoteLike,
    filters: TransposeFilters = TransposeFilters(),
    limit: int = DEFAULT_SEARCH_LIMIT,
    on_reject: Optional[Callable[[int, Note, Optional[TabToken]], None]] = None,
) -> Optional[Transposition]:
    """Smallest-magnitude offset for which every note resolves within ``filters``.

    Entries that are None or not note names (rests) are skipped. A note
    without an octave has no pitch to place and fails every candidate. A
    candidate is abandoned at its first failing note; ``on_reject`` is told
    which one.

    Returns None when ``key`` is not a valid harmonica key.

    Raises:
        NoValidTransposition: if every offset in [-limit, +limit] fails.
    """
    layout = generate_layout(key)
    if layout is None:
        return None
    pitched = [n for n in (to_note(v) for v in notes) if n is not None]

    for offset in candidate_offsets(limit):
        for note in pitched:
            token = resolve(layout.key, _shift(note, offset), layout=layout)
            if token is None or violates(token, filters):
                if on_reject is not None:
                    on_reject(offset, note, token)
                break
        else:
            return Transposition(offset=offset, tokens=tuple(_annotate(notes, layout, offset)))

    raise NoValidTransposition(limit, filters)
