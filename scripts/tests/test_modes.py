"""Tests for modes, triads and the circle-of-fifths quality map."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from scripts.notebender.model import parse_note
from scripts.notebender.modes import (
    MODES,
    ChordQuality,
    ScaleCache,
    Triad,
    build_triads,
    chord_symbol,
    circle_of_fifths,
    circle_view,
    classify_triad,
    derive_scale,
    get_mode,
    major_scale,
    mode_scale,
    mode_tonic,
    modes_by_harmonica_order,
    quality_map,
    scale_degree,
)


def _names(notes):
    return [n.name for n in notes]


def _pcs(*names):
    return tuple(parse_note(n) for n in names)


class TestModeTable(unittest.TestCase):
    def test_degrees(self):
        degrees = {m.name: m.degree for m in MODES}
        self.assertEqual(degrees, {
            "Ionian": 1, "Dorian": 2, "Phrygian": 3, "Lydian": 4,
            "Mixolydian": 5, "Aeolian": 6, "Locrian": 7,
        })

    def test_lookup(self):
        self.assertEqual(get_mode("dorian").degree, 2)
        self.assertEqual(get_mode(" MIXOLYDIAN ").harmonica_position, "2nd")
        self.assertIsNone(get_mode("blues"))
        self.assertIsNone(get_mode(None))

    def test_harmonica_order(self):
        names = [m.name for m in modes_by_harmonica_order()]
        self.assertEqual(names[:3], ["Ionian", "Mixolydian", "Dorian"])
        self.assertEqual(names[-1], "Lydian")


class TestClassify(unittest.TestCase):
    def test_templates(self):
        self.assertIs(classify_triad(_pcs("C", "E", "G")), ChordQuality.MAJOR)
        self.assertIs(classify_triad(_pcs("D", "F", "A")), ChordQuality.MINOR)
        self.assertIs(classify_triad(_pcs("B", "D", "F")), ChordQuality.DIMINISHED)
        self.assertIs(classify_triad(_pcs("C", "E", "G#")), ChordQuality.UNCLASSIFIED)
        self.assertIs(classify_triad(()), ChordQuality.UNCLASSIFIED)

    def test_enharmonic_triad(self):
        self.assertIs(classify_triad(_pcs("Db", "E#", "Ab")), ChordQuality.MAJOR)

    def test_symbol(self):
        self.assertEqual(chord_symbol(parse_note("C"), ChordQuality.MAJOR), "CM")
        self.assertEqual(chord_symbol(parse_note("F#"), ChordQuality.MINOR), "F#m")
        self.assertEqual(chord_symbol(parse_note("B"), ChordQuality.DIMINISHED), "Bdim")
        self.assertEqual(chord_symbol(parse_note("C"), ChordQuality.UNCLASSIFIED), "")


class TestScales(unittest.TestCase):
    def test_major(self):
        self.assertEqual(_names(major_scale("F")), ["F", "G", "A", "Bb", "C", "D", "E"])
        self.assertEqual(_names(major_scale("F#4")), ["F#", "G#", "A#", "B", "C#", "D#", "E#"])

    def test_ionian(self):
        view = derive_scale("C", "Ionian")
        self.assertEqual(view.tonic.name, "C")
        self.assertEqual(_names(view.scale), ["C", "D", "E", "F", "G", "A", "B"])
        self.assertEqual(_names(view.triads[0].notes), ["C", "E", "G"])
        self.assertIs(view.triads[0].quality, ChordQuality.MAJOR)
        self.assertEqual(_names(view.triads[1].notes), ["D", "F", "A"])
        self.assertIs(view.triads[1].quality, ChordQuality.MINOR)
        self.assertEqual(_names(view.triads[6].notes), ["B", "D", "F"])
        self.assertIs(view.triads[6].quality, ChordQuality.DIMINISHED)

    def test_dorian_from_c(self):
        self.assertEqual(mode_tonic("C", "Dorian").name, "D")
        self.assertEqual(_names(mode_scale("C", "Dorian")), ["D", "E", "F", "G", "A", "B", "C"])

    def test_mixolydian_from_c(self):
        view = derive_scale("C", "mixolydian")
        self.assertEqual(view.tonic.name, "G")
        self.assertEqual(_names(view.scale), ["G", "A", "B", "C", "D", "E", "F"])

    def test_triads_wrap_within_mode(self):
        view = derive_scale("C", "Dorian")
        self.assertEqual(_names(view.triads[6].notes), ["C", "E", "G"])
        self.assertEqual([t.symbol for t in view.triads],
                         ["Dm", "Em", "FM", "GM", "Am", "Bdim", "CM"])

    def test_sharp_locrian(self):
        view = derive_scale("F#", "Locrian")
        self.assertEqual(view.tonic.name, "E#")
        self.assertIs(view.triads[0].quality, ChordQuality.DIMINISHED)

    def test_octave_is_dropped(self):
        self.assertEqual(derive_scale("Bb3").root.name, "Bb")

    def test_errors(self):
        self.assertIsNone(derive_scale("X", "Ionian"))
        self.assertIsNone(derive_scale("C", "bebop"))
        self.assertIsNone(mode_tonic("H", "Dorian"))
        self.assertIsNone(mode_tonic("C", "bebop"))
        self.assertIsNone(major_scale("H"))
        self.assertIsNone(mode_scale("C", "bebop"))
        self.assertIsNone(circle_view("H"))
        self.assertIsNone(circle_of_fifths(None))

    def test_every_mode_quality_pattern(self):
        # Each mode is a rotation of the major-scale pattern M m m M M m dim.
        pattern = ["major", "minor", "minor", "major", "major", "minor", "diminished"]
        for mode in MODES:
            view = derive_scale("Eb", mode.name)
            start = mode.degree - 1
            expected = pattern[start:] + pattern[:start]
            self.assertEqual([t.quality.value for t in view.triads], expected, mode.name)


class TestQualityMap(unittest.TestCase):
    def test_c_major(self):
        qualities = derive_scale("C").qualities
        self.assertIs(qualities[0], ChordQuality.MAJOR)
        self.assertIs(qualities[2], ChordQuality.MINOR)
        self.assertIs(qualities[11], ChordQuality.DIMINISHED)
        for chroma in (1, 3, 6, 8, 10):
            self.assertIs(qualities[chroma], ChordQuality.UNCLASSIFIED)

    def test_root_overwrites_first_seen_wins(self):
        d_minor = Triad(parse_note("D"), _pcs("D", "F", "A"), ChordQuality.MINOR)
        f_major = Triad(parse_note("F"), _pcs("F", "A", "C"), ChordQuality.MAJOR)
        qualities = quality_map([d_minor, f_major])
        self.assertIs(qualities[2], ChordQuality.MINOR)   # root of D minor
        self.assertIs(qualities[5], ChordQuality.MAJOR)   # F: later root overwrites
        self.assertIs(qualities[9], ChordQuality.MINOR)   # A: first seen wins
        self.assertIs(qualities[0], ChordQuality.MAJOR)   # C: filled by F major
        self.assertIs(qualities[7], ChordQuality.UNCLASSIFIED)

    def test_earlier_root_not_overwritten_by_later_tone(self):
        c_major = Triad(parse_note("C"), _pcs("C", "E", "G"), ChordQuality.MAJOR)
        a_minor = Triad(parse_note("A"), _pcs("A", "C", "E"), ChordQuality.MINOR)
        qualities = quality_map([c_major, a_minor])
        self.assertIs(qualities[0], ChordQuality.MAJOR)
        self.assertIs(qualities[4], ChordQuality.MAJOR)
        self.assertIs(qualities[9], ChordQuality.MINOR)

    def test_all_twelve(self):
        self.assertEqual(sorted(quality_map([])), list(range(12)))


class TestCircle(unittest.TestCase):
    def test_names(self):
        self.assertEqual(
            _names(circle_of_fifths()),
            ["C", "G", "D", "A", "E", "B", "F#", "C#", "G#", "D#", "A#", "F"],
        )

    def test_scale_degree(self):
        scale = mode_scale("C", "Dorian")
        self.assertEqual(scale_degree("D", scale), 1)
        self.assertEqual(scale_degree("C4", scale), 7)
        self.assertIsNone(scale_degree("F#", scale))
        self.assertIsNone(scale_degree("zz", scale))

    def test_view(self):
        positions = circle_view("C", "Dorian")
        self.assertEqual(len(positions), 12)
        tonic = [p for p in positions if p.is_tonic]
        self.assertEqual([p.note.name for p in tonic], ["D"])
        by_name = {p.note.name: p for p in positions}
        self.assertEqual(by_name["C"].degree, 7)
        self.assertIsNone(by_name["F#"].degree)
        self.assertIs(by_name["B"].quality, ChordQuality.DIMINISHED)


class TestScaleCache(unittest.TestCase):
    def test_memoizes(self):
        cache = ScaleCache()
        view = cache.get("C", "Dorian")
        self.assertIs(cache.get("C4", "dorian"), view)
        cache.get("C", "Ionian")
        self.assertEqual(len(cache), 2)

    def test_recompute_is_equal(self):
        self.assertEqual(derive_scale("G", "Aeolian"), derive_scale("G", "Aeolian"))

    def test_invalid(self):
        self.assertIsNone(ScaleCache().get("C", "nope"))
        self.assertIsNone(ScaleCache().get("H", "Ionian"))


if __name__ == "__main__":
    unittest.main()
