"""Tests for PyNucMap.utils.output utilities."""
import unittest
from unittest.mock import Mock
import logging
import os
import tempfile
import shutil
from pathlib import Path

from PyNucMap.utils.output import catch_IOError, prepare_outdir


class TestCatchIOError(unittest.TestCase):

    def setUp(self):
        self.mock_logger = Mock(spec=logging.Logger)
        self.decorator = catch_IOError(self.mock_logger)

    def test_successful_call_passes_through(self):
        @self.decorator
        def add(x, y):
            return x + y

        self.assertEqual(add(2, 3), 5)
        self.mock_logger.error.assert_not_called()

    def test_ioerror_is_logged_and_reraised(self):
        @self.decorator
        def failing():
            raise IOError(13, "Permission denied", "/test/path.tab")

        with self.assertRaises(IOError):
            failing()

        self.mock_logger.error.assert_called_once()
        message = self.mock_logger.error.call_args[0][0]
        self.assertIn("/test/path.tab", message)
        self.assertIn("[Errno 13]", message)
        self.assertIn("Permission denied", message)

    def test_malformed_input_is_logged_and_reraised(self):
        @self.decorator
        def failing():
            raise IndexError("list index out of range")

        with self.assertRaises(IndexError):
            failing()
        self.mock_logger.error.assert_called_once()

    def test_other_exceptions_pass_through(self):
        @self.decorator
        def failing():
            raise ValueError("bad value")

        with self.assertRaises(ValueError):
            failing()
        self.mock_logger.error.assert_not_called()


class TestPrepareOutdir(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.mock_logger = Mock(spec=logging.Logger)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_existing_directory(self):
        self.assertTrue(prepare_outdir(self.temp_dir, self.mock_logger))
        self.mock_logger.critical.assert_not_called()

    def test_creates_missing_directory(self):
        outdir = Path(self.temp_dir) / "nested" / "out"
        self.assertTrue(prepare_outdir(outdir, self.mock_logger))
        self.assertTrue(outdir.is_dir())
        self.mock_logger.info.assert_called_once()

    def test_path_is_a_file(self):
        path = os.path.join(self.temp_dir, "file.txt")
        with open(path, 'w') as f:
            f.write("x")
        self.assertFalse(prepare_outdir(path, self.mock_logger))
        self.assertEqual(self.mock_logger.critical.call_count, 2)


if __name__ == '__main__':
    unittest.main()
