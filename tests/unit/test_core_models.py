"""Tests for PyNucMap.core.models."""
import unittest

from PyNucMap.core.models import (
    Nucleosome, ScanCursor, Window, Mapping, VerificationAnnotation, VerifiedNucleosome
)


class TestNucleosome(unittest.TestCase):

    def test_make_id_strips_chr_prefix(self):
        self.assertEqual(Nucleosome.make_id("chrII", 1500), "NII:1500")
        self.assertEqual(Nucleosome.make_id("CHR1", 42), "N1:42")

    def test_make_id_without_prefix(self):
        self.assertEqual(Nucleosome.make_id("scaffold_3", 10), "Nscaffold_3:10")

    def test_from_peak_imposes_fixed_length(self):
        call = Nucleosome.from_peak("chr1", 1000, 147, 12, 3.5)
        self.assertEqual(call.start, 927)
        self.assertEqual(call.stop, 1073)
        self.assertEqual(call.midpoint, 1000)
        self.assertEqual(call.length, 147)
        self.assertEqual(call.id, "N1:1000")
        self.assertEqual(call.occupancy, 12)
        self.assertEqual(call.fuzziness, 3.5)

    def test_from_peak_even_length(self):
        call = Nucleosome.from_peak("chr1", 1000, 146, 1, 0.0)
        self.assertEqual(call.length, 146)
        self.assertEqual(call.start, 927)

    def test_frozen(self):
        call = Nucleosome.from_peak("chr1", 1000, 147, 1, 0.0)
        with self.assertRaises(Exception):
            call.start = 1


class TestScanCursor(unittest.TestCase):

    def test_starts_at_first_base(self):
        cursor = ScanCursor("chr1", 1000)
        self.assertEqual(cursor.position, 1)
        self.assertFalse(cursor.exhausted)

    def test_advance_window(self):
        cursor = ScanCursor("chr1", 1000)
        cursor.advance_window(150)
        self.assertEqual(cursor.position, 151)

    def test_advance_past_call(self):
        cursor = ScanCursor("chr1", 1000)
        call = Nucleosome.from_peak("chr1", 300, 147, 1, 0.0)
        cursor.advance_past(call, 5)
        self.assertEqual(cursor.position, 378)
        self.assertEqual(cursor.ncalls, 1)

    def test_advance_past_always_moves_forward(self):
        cursor = ScanCursor("chr1", 1000, position=300)
        call = Nucleosome("chr1", 300, 300, 300, "N1:300", 1, 0.0)
        cursor.advance_past(call, 0)
        self.assertEqual(cursor.position, 301)

    def test_exhausted_at_length(self):
        cursor = ScanCursor("chr1", 100, position=100)
        self.assertTrue(cursor.exhausted)


class TestWindow(unittest.TestCase):

    def test_max_score(self):
        window = Window("chr1", 1, 150, {10: 1.0, 20: 4.0})
        self.assertEqual(window.max_score, 4.0)

    def test_empty_window_has_no_max(self):
        self.assertIsNone(Window("chr1", 1, 150, {}).max_score)

    def test_midpoint_rounds_half_up(self):
        self.assertEqual(Window("chr1", 1, 150, {}).midpoint, 76)
        self.assertEqual(Window("chr1", 1, 149, {}).midpoint, 75)


class TestVerifiedNucleosome(unittest.TestCase):

    def test_is_offset(self):
        call = Nucleosome.from_peak("chr1", 300, 147, 1, 0.0)
        offset = VerifiedNucleosome(call, VerificationAnnotation(mapping=Mapping.OFFSET, offset=20))
        centered = VerifiedNucleosome(call, VerificationAnnotation(mapping=Mapping.CENTERED, offset=0))
        skipped = VerifiedNucleosome(call, VerificationAnnotation())
        self.assertTrue(offset.is_offset)
        self.assertFalse(centered.is_offset)
        self.assertFalse(skipped.is_offset)


if __name__ == '__main__':
    unittest.main()
