"""CLI entry point: python -m notebender layout/tab/scale/circle/pitch/transpose/annotate."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .harmonica import generate_layout
from .loaders import inject_tabs, load_score
from .model import parse_note
from .modes import derive_scale, get_mode
from .pitch import ClarityGate, freq_to_note_and_cents
from .report import (
    format_circle_text,
    format_layout_json,
    format_layout_text,
    format_mode_json,
    format_mode_text,
    format_reading_text,
    format_transposition_text,
    reading_to_dict,
    transposition_to_dict,
)
from .settings import Settings, load_settings, settings_from_dict
from .tablature import resolve
from .transpose import NoValidTransposition, find_transposition


def _emit(args: argparse.Namespace, output: str) -> None:
    if getattr(args, "output", None):
        Path(args.output).write_text(output)
    else:
        print(output)


def _settings(args: argparse.Namespace) -> Settings:
    """Config file first, then explicit CLI flags."""
    settings = load_settings(args.config) if args.config else Settings()
    overrides = {}
    for name in ("key", "min_clarity", "transpose_limit", "exclude_over", "exclude_bends"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    return settings_from_dict(overrides, base=settings)


def cmd_layout(args: argparse.Namespace) -> int:
    """Print the hole layout for a key."""
    layout = generate_layout(_settings(args).key)
    _emit(args, format_layout_json(layout) if args.json else format_layout_text(layout))
    return 0


def cmd_tab(args: argparse.Namespace) -> int:
    """Resolve note names to tab tokens."""
    layout = generate_layout(_settings(args).key)
    rows = []
    missing = 0
    for name in args.notes:
        note = parse_note(name)
        if note is None or note.octave is None:
            print(f"Warning: '{name}' is not a note with an octave", file=sys.stderr)
        token = resolve(layout.key, note, layout=layout)
        if token is None:
            missing += 1
        rows.append((name, str(token) if token is not None else None))

    if args.json:
        output = json.dumps(
            {"key": layout.key.name, "tabs": [{"note": n, "tab": t} for n, t in rows]},
            indent=2,
        )
    else:
        output = "\n".join(f"{n:<6} {t if t is not None else '-'}" for n, t in rows)
    _emit(args, output)
    return 0 if missing == 0 else 1


def _mode_view(args: argparse.Namespace):
    if get_mode(args.mode) is None:
        raise ValueError(f"Unknown mode: {args.mode!r}")
    view = derive_scale(args.root, args.mode)
    if view is None:
        raise ValueError(f"Invalid root: {args.root!r}")
    return view


def cmd_scale(args: argparse.Namespace) -> int:
    """Print the scale and triads of a mode."""
    view = _mode_view(args)
    _emit(args, format_mode_json(view) if args.json else format_mode_text(view))
    return 0


def cmd_circle(args: argparse.Namespace) -> int:
    """Print the circle of fifths colored by triad quality."""
    view = _mode_view(args)
    _emit(args, format_mode_json(view) if args.json else format_circle_text(view))
    return 0


def _stdin_samples() -> Iterator[Tuple[float, Optional[float]]]:
    for line in sys.stdin:
        parts = line.split()
        if not parts:
            continue
        try:
            freq = float(parts[0])
            clarity = float(parts[1]) if len(parts) > 1 else None
        except ValueError:
            print(f"Warning: skipping malformed sample line: {line.strip()}", file=sys.stderr)
            continue
        yield freq, clarity


def cmd_pitch(args: argparse.Namespace) -> int:
    """Convert frequencies (args or stdin stream) to note + cents."""
    settings = _settings(args)
    layout = generate_layout(settings.key) if args.show_holes else None
    gate = ClarityGate(settings.min_clarity)

    if args.stdin:
        samples = _stdin_samples()
    else:
        samples = ((f, None) for f in args.frequencies)

    for freq, clarity in samples:
        if clarity is None:
            reading = freq_to_note_and_cents(freq)
        else:
            reading = gate.accept(freq, clarity)
        if args.json:
            print(json.dumps(reading_to_dict(reading, layout)), flush=True)
        else:
            print(format_reading_text(reading, layout), flush=True)
    return 0


def cmd_transpose(args: argparse.Namespace) -> int:
    """Find the smallest transposition that makes a score playable."""
    settings = _settings(args)
    notes = load_score(args.input)

    def on_reject(offset, note, token):
        if args.verbose:
            reason = f"filtered {token}" if token is not None else "unreachable"
            print(f"  offset {offset:+d}: {note.name} {reason}", file=sys.stderr)

    try:
        result = find_transposition(
            notes,
            settings.key,
            filters=settings.filters,
            limit=settings.transpose_limit,
            on_reject=on_reject,
        )
    except NoValidTransposition as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        output = json.dumps(transposition_to_dict(result, notes), indent=2)
    else:
        output = format_transposition_text(result, notes)
    _emit(args, output)
    return 0


def cmd_annotate(args: argparse.Namespace) -> int:
    """Write a MusicXML copy with harmonica tabs as fingerings."""
    settings = _settings(args)
    text = Path(args.input).read_text(encoding="utf-8")
    offset = args.transpose
    if args.auto:
        notes = load_score(args.input)
        try:
            offset = find_transposition(
                notes, settings.key, filters=settings.filters,
                limit=settings.transpose_limit,
            ).offset
        except NoValidTransposition as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        print(f"Auto transpose: {offset:+d} semitones", file=sys.stderr)
    _emit(args, inject_tabs(text, settings.key, offset))
    return 0


def _add_common(
    p: argparse.ArgumentParser, key: bool = True, output: bool = True,
) -> None:
    if key:
        p.add_argument("--config", help="JSON settings file")
        p.add_argument("--key", help="Harmonica key label (C, Bb, F#) or note (G3)")
    if output:
        p.add_argument("--json", action="store_true", help="JSON output")
        p.add_argument("-o", "--output", help="Output file path")


def _add_filters(p: argparse.ArgumentParser) -> None:
    p.add_argument("--limit", dest="transpose_limit", type=int,
                   help="Search range in semitones (default 36)")
    p.add_argument("--allow-over", dest="exclude_over", action="store_const", const=False,
                   help="Allow overblow/overdraw notes")
    p.add_argument("--no-overs", dest="exclude_over", action="store_const", const=True,
                   help="Reject overblow/overdraw notes (default)")
    p.add_argument("--no-bends", dest="exclude_bends", action="store_const", const=True,
                   help="Reject bent notes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notebender",
        description="Harmonica tabs, modes and pitch matching",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    p_layout = subparsers.add_parser("layout", help="Show the hole layout for a key")
    _add_common(p_layout)

    p_tab = subparsers.add_parser("tab", help="Resolve notes to tab tokens")
    p_tab.add_argument("notes", nargs="+", help="Note names with octave (e.g. C4 Bb5)")
    _add_common(p_tab)

    for name, help_text in (("scale", "Scale and triads of a mode"),
                            ("circle", "Circle of fifths with triad qualities")):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("root", help="Root note (e.g. C, F#)")
        p.add_argument("--mode", default="Ionian", help="Mode name (default Ionian)")
        _add_common(p, key=False)

    p_pitch = subparsers.add_parser("pitch", help="Frequency to note and cents")
    p_pitch.add_argument("frequencies", nargs="*", type=float, help="Frequencies in Hz")
    p_pitch.add_argument("--stdin", action="store_true",
                         help="Read 'frequency [clarity]' lines from stdin")
    p_pitch.add_argument("--min-clarity", dest="min_clarity", type=float,
                         help="Clarity threshold for stdin samples (default 0.95)")
    p_pitch.add_argument("--show-holes", action="store_true",
                         help="List the holes that play each detected note")
    _add_common(p_pitch, output=False)
    p_pitch.add_argument("--json", action="store_true", help="JSON lines output")

    p_tr = subparsers.add_parser("transpose", help="Auto-transpose a score for a key")
    p_tr.add_argument("input", help="MusicXML or MIDI file")
    _add_filters(p_tr)
    p_tr.add_argument("-v", "--verbose", action="store_true",
                      help="Report rejected offsets on stderr")
    _add_common(p_tr)

    p_ann = subparsers.add_parser("annotate", help="Add tab fingerings to MusicXML")
    p_ann.add_argument("input", help="MusicXML file")
    p_ann.add_argument("--transpose", type=int, default=0, help="Offset in semitones")
    p_ann.add_argument("--auto", action="store_true",
                       help="Search for the offset instead of --transpose")
    _add_filters(p_ann)
    p_ann.add_argument("--config", help="JSON settings file")
    p_ann.add_argument("--key", help="Harmonica key label or note")
    p_ann.add_argument("-o", "--output", help="Output file path")

    return parser


COMMANDS = {
    "layout": cmd_layout,
    "tab": cmd_tab,
    "scale": cmd_scale,
    "circle": cmd_circle,
    "pitch": cmd_pitch,
    "transpose": cmd_transpose,
    "annotate": cmd_annotate,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0
    if args.command == "pitch" and not args.stdin and not args.frequencies:
        parser.error("pitch needs frequencies or --stdin")

    try:
        return handler(args)
    except (ValueError, FileNotFoundError, ImportError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
