"""Tests for configuration models and the in-memory signal store."""
import pickle
import unittest
from argparse import Namespace
from pathlib import Path

from PyNucMap.interfaces.config import PositioningConfig, VerificationConfig
from PyNucMap.interfaces.signal import MemorySignalStore
from PyNucMap.core.exceptions import SignalNotFound


def _positioning_args(**kwargs):
    args = dict(scan=None, tag=None, data=Path("sample.bw"), threshold=3.0, window=150,
                buffer=0, bin=False, length=147, process=1, chromfilter=None)
    args.update(kwargs)
    return Namespace(**args)


class TestPositioningConfig(unittest.TestCase):

    def test_defaults(self):
        config = PositioningConfig(scan_signal="a", tag_signal="b", threshold=2)
        self.assertEqual(config.window_size, 150)
        self.assertEqual(config.buffer, 0)
        self.assertEqual(config.nucleosome_length, 147)
        self.assertFalse(config.allow_binning)
        self.assertFalse(config.multiprocess)

    def test_invalid_values(self):
        for kwargs in ({"threshold": None}, {"threshold": "3"}, {"threshold": 1, "window_size": 0},
                       {"threshold": 1, "buffer": -1}, {"threshold": 1, "nproc": 0},
                       {"threshold": 1, "nucleosome_length": 0},
                       {"threshold": 1, "nucleosome_length": 2},
                       {"threshold": 1, "skip_pattern": "("}):
            with self.subTest(kwargs=kwargs), self.assertRaises(ValueError):
                PositioningConfig(scan_signal="a", tag_signal="b", **kwargs)

    def test_from_args_with_data(self):
        config = PositioningConfig.from_args(_positioning_args(process=4))
        self.assertEqual(config.scan_signal, "sample.bw")
        self.assertEqual(config.tag_signal, "sample.bw")
        self.assertEqual(config.threshold, 3.0)
        self.assertTrue(config.multiprocess)

    def test_from_args_with_separate_signals(self):
        config = PositioningConfig.from_args(
            _positioning_args(data=None, scan=Path("smooth.bw"), tag=Path("raw.bw"), bin=True))
        self.assertEqual(config.scan_signal, "smooth.bw")
        self.assertEqual(config.tag_signal, "raw.bw")
        self.assertTrue(config.allow_binning)

    def test_from_args_without_signal(self):
        with self.assertRaises(ValueError):
            PositioningConfig.from_args(_positioning_args(data=None))


class TestVerificationConfig(unittest.TestCase):

    def test_defaults(self):
        config = VerificationConfig(signal="a")
        self.assertEqual((config.tolerance, config.neighborhood, config.max_overlap), (10, 50, 30))
        self.assertFalse(config.filter)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            VerificationConfig(signal="a", tolerance=-1)
        with self.assertRaises(ValueError):
            VerificationConfig(signal="a", neighborhood=0)

    def test_from_args(self):
        args = Namespace(data=Path("sample.bw"), tolerance=5, neighborhood=40, max_overlap=20, filter=True)
        config = VerificationConfig.from_args(args)
        self.assertEqual(config.signal, "sample.bw")
        self.assertEqual(config.tolerance, 5)
        self.assertTrue(config.filter)


class TestMemorySignalStore(unittest.TestCase):

    def setUp(self):
        self.store = MemorySignalStore(
            {"sig": {"chr1": {30: 1.0, 10: 2.0, 20: 3.0}}},
            lengths={"chr1": 100, "chr2": 50}
        )

    def test_query_is_sparse_sorted_and_inclusive(self):
        result = self.store.query("chr1", 10, 20, "sig")
        self.assertEqual(result, {10: 2.0, 20: 3.0})
        self.assertEqual(list(result), [10, 20])

    def test_chromosome_without_data(self):
        self.assertEqual(self.store.query("chr2", 1, 50, "sig"), {})

    def test_unknown_chromosome_or_signal(self):
        with self.assertRaises(SignalNotFound):
            self.store.query("chr3", 1, 50, "sig")
        with self.assertRaises(SignalNotFound):
            self.store.query("chr1", 1, 50, "other")

    def test_chromosome_ids(self):
        self.assertEqual(self.store.chromosome_ids(), [("chr1", 100), ("chr2", 50)])

    def test_inferred_lengths(self):
        store = MemorySignalStore({"a": {"chr1": {10: 1.0}}, "b": {"chr1": {90: 1.0}, "chr2": {5: 1.0}}})
        self.assertEqual(dict(store.chromosome_ids()), {"chr1": 90, "chr2": 5})

    def test_picklable(self):
        restored = pickle.loads(pickle.dumps(self.store))
        self.assertEqual(restored.query("chr1", 1, 100, "sig"), self.store.query("chr1", 1, 100, "sig"))


if __name__ == '__main__':
    unittest.main()
