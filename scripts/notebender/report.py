"""Report generation: text and JSON output for layouts, modes, readings."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from .harmonica import NUM_HOLES, ROW_LABELS, Layout, matching_cells
from .modes import ModeView
from .model import Note
from .pitch import PitchReading, marker_offset
from .tablature import TabToken
from .transpose import Transposition

_CELL_WIDTH = 5
_LABEL_WIDTH = 32


def _cell(note: Optional[Note]) -> str:
    return (note.pitch_class if note else "").center(_CELL_WIDTH)


def _name(note: Optional[Note]) -> Optional[str]:
    return note.name if note is not None else None


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def format_layout_text(layout: Layout) -> str:
    """Harmonica grid: bend rows above the hole numbers, draw rows below."""
    lines = [f"=== Harmonica Layout ({layout.key.pitch_class} Major, {layout.key.name}) ===", ""]
    for name, row in layout.rows():
        lines.append(f"{ROW_LABELS[name]:<{_LABEL_WIDTH}}" + "".join(_cell(n) for n in row))
        if name == "blow":
            holes = "".join(str(h).center(_CELL_WIDTH) for h in range(1, NUM_HOLES + 1))
            lines.append(f"{'Hole':<{_LABEL_WIDTH}}" + holes)
    return "\n".join(lines)


def layout_to_dict(layout: Layout) -> Dict[str, Any]:
    return {
        "key": layout.key.name,
        "rows": {name: [_name(n) for n in row] for name, row in layout.rows()},
    }


def format_layout_json(layout: Layout) -> str:
    return json.dumps(layout_to_dict(layout), indent=2)


# ---------------------------------------------------------------------------
# Modes / circle
# ---------------------------------------------------------------------------


def mode_view_to_dict(view: ModeView) -> Dict[str, Any]:
    return {
        "root": view.root.name,
        "mode": view.mode.name,
        "harmonica_position": view.mode.harmonica_position,
        "tonic": view.tonic.name,
        "scale": [n.name for n in view.scale],
        "triads": [
            {
                "degree": idx + 1,
                "root": t.root.name,
                "notes": [n.name for n in t.notes],
                "quality": t.quality.value,
                "symbol": t.symbol,
            }
            for idx, t in enumerate(view.triads)
        ],
        "circle": [
            {
                "note": pos.note.name,
                "quality": pos.quality.value,
                "tonic": pos.is_tonic,
                "degree": pos.degree,
            }
            for pos in view.circle()
        ],
    }


def format_mode_text(view: ModeView) -> str:
    lines = [
        f"=== Triads in {view.tonic.name} {view.mode.name} "
        f"({view.mode.harmonica_position} position) ===",
        "",
        "Scale: " + " ".join(n.name for n in view.scale),
        "",
    ]
    for idx, t in enumerate(view.triads):
        notes = "-".join(n.name for n in t.notes)
        lines.append(f"  {idx + 1}. {t.root.name:<4} {notes:<12} {t.symbol or t.quality.value}")
    return "\n".join(lines)


def format_circle_text(view: ModeView) -> str:
    lines = [f"=== Circle of Fifths: {view.tonic.name} {view.mode.name} ===", ""]
    for pos in view.circle():
        marker = "*" if pos.is_tonic else " "
        degree = str(pos.degree) if pos.degree else "-"
        lines.append(f" {marker} {pos.note.name:<3} {degree:>2}  {pos.quality.value}")
    return "\n".join(lines)


def format_mode_json(view: ModeView) -> str:
    return json.dumps(mode_view_to_dict(view), indent=2)


# ---------------------------------------------------------------------------
# Pitch readings
# ---------------------------------------------------------------------------


def reading_to_dict(
    reading: Optional[PitchReading], layout: Optional[Layout] = None,
) -> Optional[Dict[str, Any]]:
    if reading is None:
        return None
    data: Dict[str, Any] = {
        "frequency": reading.frequency,
        "note": reading.note.name,
        "pitch_class": reading.pitch_class,
        "cents": round(reading.cents, 2),
        "clarity": reading.clarity,
        "marker_offset": round(marker_offset(reading.cents), 2),
    }
    if layout is not None:
        data["holes"] = [
            {"hole": hole, "technique": technique.value}
            for hole, technique in matching_cells(layout, reading.note)
        ]
    return data


def format_reading_text(
    reading: Optional[PitchReading], layout: Optional[Layout] = None,
) -> str:
    if reading is None:
        return "Listening for pitch..."
    line = f"Detected Note: {reading.note.name} ({reading.cents:+.1f} cents)"
    if layout is not None:
        cells = matching_cells(layout, reading.note)
        if cells:
            line += "  holes: " + ", ".join(
                str(TabToken.for_cell(hole, technique)) for hole, technique in cells
            )
    return line


# ---------------------------------------------------------------------------
# Transposition
# ---------------------------------------------------------------------------


def transposition_to_dict(
    result: Transposition, notes: Sequence[Optional[Note]],
) -> Dict[str, Any]:
    return {
        "offset": result.offset,
        "notes": [
            {"note": _name(n), "tab": str(t) if t is not None else None}
            for n, t in zip(notes, result.tokens)
        ],
    }


def format_transposition_text(
    result: Transposition, notes: Sequence[Optional[Note]],
) -> str:
    lines: List[str] = [f"Transpose: {result.offset:+d} semitones", ""]
    tabs = [str(t) for n, t in zip(notes, result.tokens) if n is not None and t is not None]
    lines.append(" ".join(tabs))
    return "\n".join(lines)
