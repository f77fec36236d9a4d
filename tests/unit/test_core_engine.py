"""Tests for the positioning engine."""
import threading
import unittest

import pytest

from PyNucMap.interfaces.config import PositioningConfig
from PyNucMap.interfaces.signal import MemorySignalStore
from PyNucMap.core.engine import PositioningEngine, sort_calls
from PyNucMap.core.exceptions import NothingToCall, SignalNotFound
from PyNucMap.core.models import Nucleosome


class PartialTagStore(MemorySignalStore):
    """Store whose tag signal lacks some chromosomes, like a second bigWig file."""

    def __init__(self, signals, lengths, missing):
        super().__init__(signals, lengths)
        self.missing = missing

    def query(self, chromosome, start, stop, signal_id):
        if (signal_id, chromosome) in self.missing:
            raise SignalNotFound("Reference name '{}' not found.".format(chromosome))
        return super().query(chromosome, start, stop, signal_id)


def _engine(signals, lengths, **kwargs):
    params = dict(scan_signal="sig", tag_signal="sig", threshold=5.0)
    params.update(kwargs)
    return PositioningEngine(MemorySignalStore(signals, lengths), PositioningConfig(**params))


class TestScanChromosome(unittest.TestCase):

    def setUp(self):
        self.signals = {"sig": {"chr1": {300: 10.0, 800: 10.0}}}
        self.lengths = {"chr1": 2000}

    def test_calls_isolated_peaks(self):
        calls = _engine(self.signals, self.lengths).scan_chromosome("chr1", 2000)

        self.assertEqual([c.midpoint for c in calls], [300, 800])
        self.assertEqual([(c.start, c.stop) for c in calls], [(227, 373), (727, 873)])
        self.assertEqual([c.id for c in calls], ["N1:300", "N1:800"])
        for call in calls:
            self.assertEqual(call.length, 147)
            self.assertEqual(call.occupancy, 10)
            self.assertEqual(call.fuzziness, 0.0)

    def test_deterministic(self):
        engine = _engine(self.signals, self.lengths)
        self.assertEqual(engine.scan_chromosome("chr1", 2000), engine.scan_chromosome("chr1", 2000))

    def test_progress_callback_receives_positions(self):
        positions = []
        _engine(self.signals, self.lengths).scan_chromosome("chr1", 2000, positions.append)
        self.assertEqual(positions[:3], [151, 373, 523])
        self.assertGreaterEqual(positions[-1], 2000)

    def test_buffer_moves_next_window(self):
        signals = {"sig": {"chr1": {300: 10.0, 390: 10.0}}}
        without = _engine(signals, self.lengths).scan_chromosome("chr1", 2000)
        with_buffer = _engine(signals, self.lengths, buffer=20).scan_chromosome("chr1", 2000)
        self.assertEqual([c.midpoint for c in without], [300, 390])
        self.assertEqual([c.midpoint for c in with_buffer], [300])

    def test_window_without_tags_yields_no_call(self):
        signals = {"scan": {"chr1": {100: 10.0}}, "tag": {}}
        calls = _engine(signals, self.lengths, scan_signal="scan",
                        tag_signal="tag").scan_chromosome("chr1", 2000)
        self.assertEqual(calls, [])

    def test_binning_end_to_end(self):
        signals = {"sig": {"chr1": {100: 2.0, 101: 2.0, 102: 2.0}}}
        self.assertEqual(_engine(signals, self.lengths).scan_chromosome("chr1", 2000), [])

        calls = _engine(signals, self.lengths, allow_binning=True).scan_chromosome("chr1", 2000)
        self.assertEqual(len(calls), 1)
        self.assertEqual(calls[0].midpoint, 101)
        self.assertEqual((calls[0].start, calls[0].stop), (28, 174))
        self.assertEqual(calls[0].occupancy, 6)
        self.assertAlmostEqual(calls[0].fuzziness, (2 / 9) ** 0.5)

    def test_shortest_length_still_advances(self):
        calls = _engine(self.signals, self.lengths, nucleosome_length=3).scan_chromosome("chr1", 2000)
        self.assertEqual([(c.start, c.midpoint, c.stop) for c in calls], [(299, 300, 301), (799, 800, 801)])

    def test_starts_non_decreasing(self):
        scores = {p: float(1 + (p * 7) % 11) for p in range(1, 3000, 13)}
        calls = _engine({"sig": {"chr1": scores}}, {"chr1": 3000}).scan_chromosome("chr1", 3000)
        self.assertTrue(calls)
        starts = [c.start for c in calls]
        self.assertEqual(starts, sorted(starts))


class TestTargetChromosomes(unittest.TestCase):

    def test_skips_mitochondrial(self):
        lengths = {"chr1": 100, "chrM": 100, "MT": 100, "chrMito": 100, "chrMX": 100}
        engine = _engine({"sig": {}}, lengths)
        self.assertEqual([c for c, _ in engine.target_chromosomes()], ["chr1", "chrMX"])

    def test_chromosome_filter(self):
        engine = _engine({"sig": {}}, {"chr1": 100, "chr2": 100, "chr3": 100},
                         chromfilter=[(False, ["chr2"])])
        self.assertEqual([c for c, _ in engine.target_chromosomes()], ["chr1", "chr3"])

    def test_skips_chromosome_missing_from_tag_signal(self):
        signals = {"scan": {"chr1": {300: 10.0}, "chr2": {500: 10.0}},
                   "tag": {"chr1": {300: 10.0}, "chr2": {500: 10.0}}}
        store = PartialTagStore(signals, {"chr1": 1000, "chr2": 1000}, {("tag", "chr2")})
        engine = PositioningEngine(store, PositioningConfig(scan_signal="scan", tag_signal="tag",
                                                            threshold=5.0))
        with self.assertLogs("PyNucMap.core.engine", level="WARNING"):
            self.assertEqual([c for c, _ in engine.target_chromosomes()], ["chr1"])
        self.assertEqual([c.id for c in engine.run()], ["N1:300"])

    def test_nothing_to_call(self):
        engine = _engine({"sig": {}}, {"chr1": 100}, chromfilter=[(True, ["chrX"])])
        with self.assertRaises(NothingToCall):
            engine.target_chromosomes()


class TestRun:

    @pytest.fixture
    def engine(self):
        signals = {"sig": {"chr2": {300: 10.0}, "chr1": {500: 8.0}, "chrM": {300: 50.0}}}
        return _engine(signals, {"chr2": 1000, "chr1": 1000, "chrM": 1000})

    def test_run_orders_by_accessor_chromosome_order(self, engine):
        calls = engine.run()
        assert [(c.chromosome, c.midpoint) for c in calls] == [("chr2", 300), ("chr1", 500)]

    def test_cancel_between_chromosomes(self, engine):
        cancel = threading.Event()
        cancel.set()
        assert engine.run(cancel) == []

    def test_progress_bar_per_chromosome(self, engine):
        class Recorder:
            def __init__(self):
                self.events = []

            def set(self, name, maxval):
                self.events.append(("set", name, maxval))

            def update(self, val):
                pass

            def clean(self):
                self.events.append(("clean",))

        progress = Recorder()
        engine.run(progress=progress)
        assert progress.events == [("set", "chr2", 1000), ("clean",), ("set", "chr1", 1000), ("clean",)]

    def test_given_chromosomes(self, engine):
        calls = engine.run(chromosomes=[("chr1", 1000)])
        assert [c.chromosome for c in calls] == ["chr1"]

    def test_sort_calls(self):
        calls = [Nucleosome.from_peak(c, p, 147, 1, 0.0)
                 for c, p in [("chr1", 900), ("chr2", 300), ("chr1", 200)]]
        ordered = sort_calls(calls, ["chr2", "chr1"])
        assert [(c.chromosome, c.midpoint) for c in ordered] == [("chr2", 300), ("chr1", 200), ("chr1", 900)]


if __name__ == '__main__':
    unittest.main()
