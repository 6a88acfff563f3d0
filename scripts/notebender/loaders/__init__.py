"""Score loaders (MusicXML, MIDI) and MusicXML tab injection."""

from pathlib import Path
from typing import List, Optional, Union

from ..model import Note
from .midi_loader import load_midi
from .musicxml_loader import inject_tabs, load_musicxml, parse_musicxml

__all__ = ["inject_tabs", "load_midi", "load_musicxml", "load_score", "parse_musicxml"]


def load_score(path: Union[str, Path]) -> List[Optional[Note]]:
    """Auto-detect format and load the note sequence."""
    p = Path(path)
    if p.suffix.lower() in (".mid", ".midi"):
        return load_midi(p)
    return load_musicxml(p)
