"""Tests for configuration loading, logging setup and the exception hierarchy."""

import logging
import unittest
from pathlib import Path

from config import ConfigurationManager, get_config
from invoice_ingest.utils.logger import LOGGER_NAMESPACE, get_logger, setup_logger
from invoice_ingest.utils.exceptions import (
    DatabaseError,
    InputError,
    InvoiceIngestError,
    StorageError,
    UnsupportedFileTypeError,
)


class TestConfiguration(unittest.TestCase):

    def tearDown(self):
        ConfigurationManager.reset()

    def test_dot_notation(self):
        self.assertEqual(get_config("import.payment_term_days"), 14)
        self.assertEqual(get_config("clients.known_distances.Vlagtwedde"), 108)
        self.assertEqual(get_config("nonexistent.key", "fallback"), "fallback")

    def test_paths_resolve_against_project_root(self):
        self.assertTrue(Path(get_config("paths.database")).is_absolute())

    def test_missing_file(self):
        ConfigurationManager.reset()
        with self.assertRaises(FileNotFoundError):
            ConfigurationManager("does/not/exist.yaml")


class TestLogging(unittest.TestCase):

    def test_module_loggers_share_namespace(self):
        self.assertEqual(get_logger("pipeline").name, f"{LOGGER_NAMESPACE}.pipeline")
        self.assertEqual(get_logger("invoice_ingest.parsing").name, "invoice_ingest.parsing")

    def test_setup_logger_level(self):
        logger = setup_logger(level="WARNING", colorize=False)
        self.assertEqual(logger.level, logging.WARNING)
        self.assertFalse(logger.propagate)


class TestExceptions(unittest.TestCase):

    def test_hierarchy(self):
        self.assertTrue(issubclass(UnsupportedFileTypeError, InputError))
        self.assertTrue(issubclass(DatabaseError, StorageError))
        self.assertTrue(issubclass(StorageError, InvoiceIngestError))

    def test_details_in_message(self):
        error = InvoiceIngestError("Import failed", {'file': 'a.pdf'})
        self.assertEqual(str(error), "Import failed | Details: {'file': 'a.pdf'}")


if __name__ == '__main__':
    unittest.main()
