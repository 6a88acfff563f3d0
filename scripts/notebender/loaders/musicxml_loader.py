"""MusicXML note extraction and fingering (tab) injection.

Only ``<note>`` pitch data is read: ``<step>``, ``<alter>`` and ``<octave>``.
Rests and unpitched notes come back as None so indices match the document's
``<note>`` elements.
"""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Union

from ..model import Note, NoteLike
from ..transpose import annotate

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Double sharp or double flat.
MAX_ALTER = 2

_DOCTYPE_RE = re.compile(r"<!DOCTYPE[^>\[]*(?:\[.*?\])?\s*>", re.DOTALL)


def _note_from_element(elem: ET.Element) -> Optional[Note]:
    pitch = elem.find("pitch")
    if pitch is None:
        return None
    step = (pitch.findtext("step") or "").strip().upper()
    octave = (pitch.findtext("octave") or "").strip()
    alter = (pitch.findtext("alter") or "0").strip()
    if len(step) != 1 or step not in "CDEFGAB" or not octave:
        return None
    try:
        alteration = float(alter)
        octave_number = int(octave)
    except ValueError:
        return None
    if not math.isfinite(alteration) or abs(alteration) > MAX_ALTER:
        return None
    return Note(letter=step, alteration=round(alteration), octave=octave_number)


def _parse_root(text: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"Malformed MusicXML: {exc}") from exc


def parse_musicxml(text: str) -> List[Optional[Note]]:
    """Notes of a MusicXML document given as a string."""
    root = _parse_root(text)
    return [_note_from_element(elem) for elem in root.iter("note")]


def load_musicxml(source: Union[str, Path]) -> List[Optional[Note]]:
    """Notes of a MusicXML file (uncompressed .xml/.musicxml)."""
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"No such MusicXML file: {path}")
    return parse_musicxml(path.read_text(encoding="utf-8"))


def inject_tabs(xml_text: str, key: NoteLike, offset: int = 0) -> str:
    """Attach a harmonica tab fingering below every playable note.

    Each resolvable note gets
    ``<notations><technical><fingering placement="below">TAB``.
    Pitches in the document are left untouched; ``offset`` only shifts the
    notes before they are resolved. A DOCTYPE in the input is carried over.
    """
    root = _parse_root(xml_text)
    elements = list(root.iter("note"))
    notes = [_note_from_element(elem) for elem in elements]
    tokens = annotate(notes, key, offset)
    for elem, token in zip(elements, tokens):
        if token is None:
            continue
        notations = ET.SubElement(elem, "notations")
        technical = ET.SubElement(notations, "technical")
        fingering = ET.SubElement(technical, "fingering", placement="below")
        fingering.text = str(token)
    doctype = _DOCTYPE_RE.search(xml_text)
    header = XML_DECLARATION + (doctype.group(0) + "\n" if doctype else "")
    return header + ET.tostring(root, encoding="unicode")
