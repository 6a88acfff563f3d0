# /// script
# requires-python = ">=3.10"
# dependencies = [
#     "mcp[cli]>=1.0.0",
# ]
# ///
"""NoteBender MCP Server: harmonica tabs, modes and pitch matching.

Exposes the notebender engine as tools: hole layouts, note-to-tab
resolution, mode/triad derivation, frequency conversion and auto-transpose.
Layouts and mode views are memoized per process.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to sys.path for notebender imports.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))

from mcp.server.fastmcp import FastMCP

from scripts.notebender.harmonica import LayoutCache, harmonica_key
from scripts.notebender.model import parse_note
from scripts.notebender.modes import ScaleCache, get_mode
from scripts.notebender.pitch import ClarityGate, freq_to_note_and_cents
from scripts.notebender.report import (
    layout_to_dict,
    mode_view_to_dict,
    reading_to_dict,
)
from scripts.notebender.tablature import resolve
from scripts.notebender.transpose import (
    DEFAULT_SEARCH_LIMIT,
    NoValidTransposition,
    TransposeFilters,
    find_transposition,
)

MAX_NOTES = 2000
# Widest auto-transpose search a client may request (the whole MIDI range).
MAX_SEARCH_LIMIT = 127

server = FastMCP(
    "notebender",
    instructions=(
        "Diatonic harmonica and mode theory. Keys are labels (C, G, Bb) or "
        "notes with octave (G3). Use harmonica_layout to see a key, "
        "harmonica_tab to find holes, auto_transpose to fit a melody."
    ),
)

_layouts = LayoutCache()
_scales = ScaleCache()


def _bad_key(key: str) -> str:
    return json.dumps({
        "error": f"Invalid harmonica key '{key}'.",
        "hint": "Use a label such as C, G, Bb, F# or a note with octave such as G3.",
    })


@server.tool()
def harmonica_layout(key: str = "C") -> str:
    """Get every blow, draw, bend, overblow and overdraw pitch for a key.

    Args:
        key: Harmonica key label or note with octave
    """
    if harmonica_key(key) is None:
        return _bad_key(key)
    return json.dumps(layout_to_dict(_layouts.get(key)), indent=2)


@server.tool()
def harmonica_tab(notes: List[str], key: str = "C") -> str:
    """Resolve note names (with octave) to harmonica tab tokens.

    Tokens: negative hole = draw, ' per half step of bend, trailing o =
    overblow/overdraw. Unplayable notes get null.

    Args:
        notes: Note names such as C4, Bb5, F#4
        key: Harmonica key label or note with octave
    """
    if harmonica_key(key) is None:
        return _bad_key(key)
    layout = _layouts.get(key)
    tabs = []
    for name in notes[:MAX_NOTES]:
        token = resolve(layout.key, name, layout=layout)
        tabs.append({"note": name, "tab": str(token) if token is not None else None})
    return json.dumps({"key": layout.key.name, "tabs": tabs})


@server.tool()
def mode_scale(root: str = "C", mode: str = "Ionian") -> str:
    """Get the tonic, scale, triads and circle qualities of a mode.

    The tonic is the mode's degree within the major scale on root
    (root C, mode Dorian -> tonic D).

    Args:
        root: Root note of the parent major scale (e.g. C, F#, Bb)
        mode: Ionian, Dorian, Phrygian, Lydian, Mixolydian, Aeolian or Locrian
    """
    if get_mode(mode) is None:
        return json.dumps({"error": f"Unknown mode '{mode}'."})
    if parse_note(root) is None:
        return json.dumps({"error": f"Invalid root '{root}'."})
    return json.dumps(mode_view_to_dict(_scales.get(root, mode)), indent=2)


@server.tool()
def pitch_to_note(
    frequency: float,
    clarity: Optional[float] = None,
    min_clarity: float = 0.95,
    key: Optional[str] = None,
) -> str:
    """Convert a detected frequency to nearest note and cents offset.

    Args:
        frequency: Frequency in Hz
        clarity: Detector clarity (0-1); when given, readings at or below
            min_clarity are dropped
        min_clarity: Clarity threshold
        key: Optional harmonica key; adds the holes that play the note
    """
    layout = None
    if key is not None:
        if harmonica_key(key) is None:
            return _bad_key(key)
        layout = _layouts.get(key)
    if clarity is None:
        reading = freq_to_note_and_cents(frequency)
    else:
        try:
            gate = ClarityGate(min_clarity)
        except ValueError as err:
            return json.dumps({"error": str(err)})
        reading = gate.accept(frequency, clarity)
    return json.dumps({"reading": reading_to_dict(reading, layout)})


@server.tool()
def auto_transpose(
    notes: List[Optional[str]],
    key: str = "C",
    exclude_over: bool = True,
    exclude_bends: bool = False,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> str:
    """Find the smallest transposition that makes every note playable.

    Args:
        notes: Note names with octave; null entries are rests
        key: Harmonica key label or note with octave
        exclude_over: Reject overblows/overdraws
        exclude_bends: Reject bends
        limit: Search +/- this many semitones (at most 127)
    """
    if harmonica_key(key) is None:
        return _bad_key(key)
    notes = notes[:MAX_NOTES]
    limit = max(0, min(limit, MAX_SEARCH_LIMIT))
    filters = TransposeFilters(exclude_over=exclude_over, exclude_bends=exclude_bends)
    try:
        result = find_transposition(notes, key, filters=filters, limit=limit)
    except NoValidTransposition as err:
        return json.dumps({"error": str(err), "exhausted": True})
    return json.dumps({
        "offset": result.offset,
        "tabs": [str(t) if t is not None else None for t in result.tokens],
    })


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    server.run()
