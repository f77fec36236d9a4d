"""Tests for progress display utilities."""
import io
import queue
import unittest
from unittest.mock import patch

from PyNucMap.utils.progress import ProgressBar, ProgressHook, MultiLineProgressManager, BAR_BODY


class TestProgressBar(unittest.TestCase):

    def test_update_draws_bar(self):
        output = io.StringIO()
        with patch.object(ProgressBar, "global_switch", True):
            bar = ProgressBar(output=output)
        bar.set("chr1", len(BAR_BODY))
        bar.update(10.5)
        self.assertIn(BAR_BODY[:10], output.getvalue())
        self.assertNotIn(BAR_BODY[:11], output.getvalue())

        bar.clean()
        self.assertTrue(output.getvalue().endswith("\r\033[K"))

    def test_update_beyond_length_stops_at_full_bar(self):
        output = io.StringIO()
        with patch.object(ProgressBar, "global_switch", True):
            bar = ProgressBar(output=output)
        bar.set("chr1", 100)
        bar.update(5000)
        self.assertEqual(bar.pos, len(BAR_BODY))

    def test_disabled_bar_is_silent(self):
        output = io.StringIO()
        with patch.object(ProgressBar, "global_switch", False):
            bar = ProgressBar(output=output)
        bar.set("chr1", 100)
        bar.update(50)
        bar.clean()
        self.assertEqual(output.getvalue(), "")


class TestProgressHook(unittest.TestCase):

    def test_bar_is_sent_to_queue(self):
        report_queue = queue.Queue()
        with patch.object(ProgressHook, "global_switch", True):
            hook = ProgressHook(report_queue)
        hook.set("chr1", len(BAR_BODY))
        hook.update(5.5)

        chrom, (name, body) = report_queue.get_nowait()
        self.assertIsNone(chrom)
        self.assertEqual(name, "chr1")
        self.assertEqual(body, ">" + "{:<{}}".format(BAR_BODY[:5], len(BAR_BODY)) + "<")


class TestMultiLineProgressManager(unittest.TestCase):

    def test_disabled_without_terminal(self):
        output = io.StringIO()
        progress = MultiLineProgressManager(output)
        progress.update("chr1", "body")
        progress.erase("chr1")
        progress.clean()
        self.assertEqual(output.getvalue(), "")


if __name__ == '__main__':
    unittest.main()
