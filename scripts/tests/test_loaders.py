"""Tests for MusicXML/MIDI loaders and tab injection."""

import sys
import tempfile
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from scripts.notebender.loaders import (
    inject_tabs,
    load_musicxml,
    load_score,
    parse_musicxml,
)

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<score-partwise version="3.1">
  <part id="P1">
    <measure number="1">
      <note><pitch><step>C</step><octave>4</octave></pitch><duration>1</duration></note>
      <note><rest/><duration>1</duration></note>
      <note><pitch><step>B</step><alter>-1</alter><octave>4</octave></pitch><duration>1</duration></note>
      <note><pitch><step>C</step><alter>1</alter><octave>7</octave></pitch><duration>1</duration></note>
    </measure>
  </part>
</score-partwise>
"""


class TestMusicXml(unittest.TestCase):
    def test_parse(self):
        notes = parse_musicxml(SAMPLE_XML)
        self.assertEqual(len(notes), 4)
        self.assertEqual(notes[0].name, "C4")
        self.assertIsNone(notes[1])
        self.assertEqual(notes[2].name, "Bb4")
        self.assertEqual(notes[3].name, "C#7")

    def test_malformed(self):
        with self.assertRaises(ValueError):
            parse_musicxml("<score-partwise><note>")

    def test_bad_pitch_is_none(self):
        xml = "<score><note><pitch><step>Q</step><octave>4</octave></pitch></note></score>"
        self.assertEqual(parse_musicxml(xml), [None])

    def test_unusable_alter_is_none(self):
        template = (
            "<score><note><pitch><step>C</step><alter>{}</alter>"
            "<octave>4</octave></pitch></note></score>"
        )
        for alter in ("1e400", "inf", "-inf", "nan", "sharp", "7"):
            with self.subTest(alter=alter):
                self.assertEqual(parse_musicxml(template.format(alter)), [None])
        self.assertEqual(parse_musicxml(template.format("-2"))[0].name, "Cbb4")

    def test_load_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "song.musicxml"
            path.write_text(SAMPLE_XML, encoding="utf-8")
            self.assertEqual(len(load_musicxml(path)), 4)
            self.assertEqual(load_score(path)[0].name, "C4")

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_musicxml("/nonexistent/song.musicxml")


class TestInjectTabs(unittest.TestCase):
    def _fingerings(self, xml_text):
        root = ET.fromstring(xml_text.split("\n", 1)[1])
        result = []
        for note in root.iter("note"):
            fingering = note.find("notations/technical/fingering")
            result.append(None if fingering is None else fingering.text)
        return result

    def test_inject(self):
        out = inject_tabs(SAMPLE_XML, "C")
        self.assertTrue(out.startswith("<?xml"))
        self.assertEqual(self._fingerings(out), ["1", None, "-3'", None])

    def test_doctype_kept(self):
        doctype = (
            '<!DOCTYPE score-partwise PUBLIC "-//Recordare//DTD MusicXML 4.0 Partwise//EN" '
            '"http://www.musicxml.org/dtds/partwise.dtd">'
        )
        source = SAMPLE_XML.replace("\n<score-partwise", "\n" + doctype + "\n<score-partwise", 1)
        lines = inject_tabs(source, "C").splitlines()
        self.assertTrue(lines[0].startswith("<?xml"))
        self.assertEqual(lines[1], doctype)
        self.assertTrue(lines[2].startswith("<score-partwise"))

    def test_invalid_key_adds_nothing(self):
        out = inject_tabs(SAMPLE_XML, "H")
        self.assertEqual(self._fingerings(out), [None, None, None, None])

    def test_placement(self):
        out = inject_tabs(SAMPLE_XML, "C")
        root = ET.fromstring(out.split("\n", 1)[1])
        fingering = root.find(".//fingering")
        self.assertEqual(fingering.get("placement"), "below")

    def test_offset_shifts_lookup_not_pitches(self):
        out = inject_tabs(SAMPLE_XML, "C", offset=-1)
        self.assertEqual(self._fingerings(out), ["1o", None, "-3''", "10"])
        root = ET.fromstring(out.split("\n", 1)[1])
        steps = [s.text for s in root.iter("step")]
        self.assertEqual(steps, ["C", "B", "C"])


class TestMidiLoader(unittest.TestCase):
    """MIDI loading with a mocked mido module."""

    def _make_mock_midi(self):
        msgs_a = [
            MagicMock(type="program_change", channel=0, program=22, time=0),
            MagicMock(type="note_on", channel=0, note=64, velocity=80, time=0),
            MagicMock(type="note_off", channel=0, note=64, velocity=0, time=480),
            MagicMock(type="note_on", channel=0, note=67, velocity=80, time=0),
            MagicMock(type="note_on", channel=0, note=67, velocity=0, time=480),
        ]
        msgs_b = [
            MagicMock(type="note_on", channel=9, note=36, velocity=100, time=0),
            MagicMock(type="note_on", channel=1, note=60, velocity=70, time=0),
        ]
        mock_midi = MagicMock()
        mock_midi.tracks = [msgs_a, msgs_b]
        return mock_midi

    @patch.dict("sys.modules", {"mido": MagicMock()})
    def test_load_midi(self):
        mock_mido = sys.modules["mido"]
        mock_mido.MidiFile.return_value = self._make_mock_midi()

        from scripts.notebender.loaders.midi_loader import load_midi
        notes = load_midi("/fake/path.mid")

        self.assertEqual([n.name for n in notes], ["C4", "E4", "G4"])
        mock_mido.MidiFile.assert_called_once_with("/fake/path.mid")

    @patch.dict("sys.modules", {"mido": MagicMock()})
    def test_load_score_dispatches_on_suffix(self):
        sys.modules["mido"].MidiFile.return_value = self._make_mock_midi()
        notes = load_score("/fake/tune.MID")
        self.assertEqual(len(notes), 3)

    def test_import_error(self):
        with patch.dict("sys.modules", {"mido": None}):
            from scripts.notebender.loaders.midi_loader import load_midi
            with self.assertRaises(ImportError):
                load_midi("/fake/path.mid")


if __name__ == "__main__":
    unittest.main()
