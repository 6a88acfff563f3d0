"""Load a note sequence from a standard MIDI file using mido."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..model import Note, from_midi

# General MIDI percussion channel (0-based).
_DRUM_CHANNEL = 9


def load_midi(source: Union[str, Path]) -> List[Optional[Note]]:
    """Load every pitched note-on from a .mid file, in time order.

    Requires the ``mido`` package. Simultaneous notes are ordered by pitch.
    Percussion (channel 10) is skipped.

    Args:
        source: Path to a .mid file.

    Returns:
        Notes spelled with sharps.
    """
    try:
        import mido
    except ImportError as exc:
        raise ImportError(
            "mido is required for MIDI loading. Install with: pip install mido"
        ) from exc

    mid = mido.MidiFile(str(source))

    events: List[Tuple[int, int]] = []  # (abs_tick, pitch)
    for track in mid.tracks:
        abs_tick = 0
        for msg in track:
            abs_tick += msg.time
            if msg.type != "note_on" or msg.velocity == 0:
                continue
            if msg.channel == _DRUM_CHANNEL:
                continue
            events.append((abs_tick, msg.note))

    events.sort()
    return [from_midi(pitch) for _, pitch in events]
