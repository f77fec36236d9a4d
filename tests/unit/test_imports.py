"""Test basic module imports and the shared entry point helpers."""
import logging
from unittest.mock import Mock

import pytest


class TestBasicImports:

    def test_import_main_module(self):
        import PyNucMap
        assert hasattr(PyNucMap, 'VERSION')

    def test_import_core_modules(self):
        import PyNucMap.core.scanner
        import PyNucMap.core.refiner
        import PyNucMap.core.statistics
        import PyNucMap.core.engine
        import PyNucMap.core.verification

    def test_import_reader_and_output_modules(self):
        import PyNucMap.reader.bigwig
        import PyNucMap.reader.table
        import PyNucMap.output.table
        import PyNucMap.output.summary

    def test_import_entry_points(self):
        from PyNucMap.pynucmap import main as pynucmap_main
        from PyNucMap.verify import main as verify_main
        assert callable(pynucmap_main)
        assert callable(verify_main)


class TestEntrypoint:

    def test_logging_version(self):
        from PyNucMap import logging_version, VERSION
        logger = Mock(spec=logging.Logger)
        logging_version(logger)
        assert VERSION in logger.info.call_args[0][0]

    def test_keyboard_interrupt_is_handled(self, monkeypatch):
        import PyNucMap
        monkeypatch.setattr(PyNucMap, "_ensure_spawn", lambda: None)
        logger = Mock(spec=logging.Logger)
        logger.level = logging.INFO

        @PyNucMap.entrypoint(logger)
        def main():
            raise KeyboardInterrupt

        main()
        logger.info.assert_called_with("Got KeyboardInterrupt. bye")

    def test_system_exit_propagates(self, monkeypatch):
        import PyNucMap
        monkeypatch.setattr(PyNucMap, "_ensure_spawn", lambda: None)

        @PyNucMap.entrypoint(Mock(spec=logging.Logger))
        def main():
            raise SystemExit(1)

        with pytest.raises(SystemExit):
            main()
