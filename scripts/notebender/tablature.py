"""Note -> harmonica tablature resolution.

Token format: signed hole number (negative = draw), one ``'`` per half step
of bend, and a trailing ``o`` for overblows/overdraws, e.g. ``4``, ``-3''``,
``10''``, ``6o``, ``-7o``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .harmonica import NUM_HOLES, Layout, Technique, generate_layout, harmonica_key
from .model import NoteLike, same_pitch, to_note

BEND_MARK = "'"
OVER_MARK = "o"

_TOKEN_RE = re.compile(r"^(-?)(\d+)('*)(o?)$")


@dataclass(frozen=True)
class TabToken:
    """One tablature token."""
    hole: int
    blow: bool
    bends: int = 0
    over: bool = False

    @classmethod
    def for_cell(cls, hole: int, technique: Technique) -> "TabToken":
        return cls(
            hole=hole,
            blow=technique.is_blow,
            bends=technique.bend_depth,
            over=technique.is_over,
        )

    @property
    def is_bend(self) -> bool:
        return self.bends > 0

    @property
    def technique(self) -> Technique:
        if self.blow:
            if self.over:
                return Technique.OVERBLOW
            return {
                0: Technique.BLOW,
                1: Technique.HALF_STEP_BLOW_BEND,
                2: Technique.WHOLE_STEP_BLOW_BEND,
            }[self.bends]
        if self.over:
            return Technique.OVERDRAW
        return {
            0: Technique.DRAW,
            1: Technique.HALF_STEP_DRAW_BEND,
            2: Technique.WHOLE_STEP_DRAW_BEND,
            3: Technique.ONE_AND_HALF_STEP_DRAW_BEND,
        }[self.bends]

    def __str__(self) -> str:
        hole = self.hole if self.blow else -self.hole
        suffix = OVER_MARK if self.over else ""
        return f"{hole}{BEND_MARK * self.bends}{suffix}"


def parse_token(text: str) -> Optional[TabToken]:
    """Parse a token string back into a TabToken (None if malformed)."""
    m = _TOKEN_RE.match(text.strip()) if isinstance(text, str) else None
    if not m:
        return None
    sign, hole_str, ticks, over = m.groups()
    hole = int(hole_str)
    if not 1 <= hole <= NUM_HOLES:
        return None
    token = TabToken(hole=hole, blow=not sign, bends=len(ticks), over=bool(over))
    if token.over and token.bends:
        return None
    if token.bends > (2 if token.blow else 3):
        return None
    return token


def resolve(
    key: NoteLike,
    target: Optional[NoteLike],
    layout: Optional[Layout] = None,
) -> Optional[TabToken]:
    """Find the hole/technique that plays ``target`` on a harmonica in ``key``.

    Holes are scanned 1..10; within a hole the order is blow, whole-step
    blow bend, half-step blow bend/overblow, draw, half-step draw
    bend/overdraw, whole-step draw bend, 1.5-step draw bend. The first pitch
    match wins. Returns None when the target is invalid or unreachable.
    """
    note = to_note(target)
    if note is None or note.midi is None:
        return None
    if layout is None:
        root = harmonica_key(key)
        if root is None:
            return None
        layout = generate_layout(root)
    for hole, technique, cell in layout.cells():
        if same_pitch(cell, note):
            return TabToken.for_cell(hole, technique)
    return None


def tab_for_note_name(key: str, note_name: str) -> Optional[str]:
    """String-in/string-out form of :func:`resolve`."""
    token = resolve(key, note_name)
    return str(token) if token is not None else None
