"""Tests for input validation, text loading and directory listing."""

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from invoice_ingest.input_handler import InputHandler, PDFTextExtractor
from invoice_ingest.utils.exceptions import (
    InputError,
    NoExtractableTextError,
    SourceNotFoundError,
    UnsupportedFileTypeError,
)
from tests.fixtures import DASH_INVOICE


class TestInputHandler(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)
        self.handler = InputHandler()

    def write(self, name, text):
        path = self.root / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_load_text_layer_with_pages(self):
        path = self.write("2025-014_Raupp.txt", DASH_INVOICE + "\f" + "Pagina 2 van 2")
        document = self.handler.load(path)

        self.assertEqual(document.file_type, "text")
        self.assertEqual(document.page_count, 2)
        self.assertEqual(document.filename, "2025-014_Raupp.txt")
        self.assertIn("Factuurnummer: 2025-014", document.text)

    def test_missing_file(self):
        with self.assertRaises(SourceNotFoundError):
            self.handler.load(self.root / "missing.pdf")

    def test_unsupported_type(self):
        with self.assertRaises(UnsupportedFileTypeError):
            self.handler.load(self.write("factuur.docx", "x"))

    def test_directory_is_not_a_file(self):
        with self.assertRaises(InputError):
            self.handler.validate_file(self.root)

    def test_scanned_document_without_text(self):
        with self.assertRaises(NoExtractableTextError):
            self.handler.load(self.write("scan.txt", "  \n "))

    def test_pdf_goes_through_extractor(self):
        extractor = mock.Mock(spec=PDFTextExtractor)
        extractor.extract_pages.return_value = [DASH_INVOICE]
        path = self.write("2025-014_Raupp.pdf", "")

        document = InputHandler(pdf_extractor=extractor).load(path)

        extractor.extract_pages.assert_called_once_with(path)
        self.assertEqual(document.file_type, "pdf")

    def test_list_documents(self):
        self.write("b.pdf", "")
        self.write("a.txt", "")
        self.write(".hidden.pdf", "")
        self.write("notes.docx", "")
        (self.root / "sub").mkdir()
        self.write("sub/c.pdf", "")

        names = [path.name for path in self.handler.list_documents(self.root)]
        self.assertEqual(names, ["a.txt", "b.pdf"])

    def test_list_missing_directory(self):
        with self.assertRaises(SourceNotFoundError):
            self.handler.list_documents(self.root / "nope")

    def test_list_file_instead_of_directory(self):
        with self.assertRaises(InputError):
            self.handler.list_documents(self.write("a.txt", ""))


if __name__ == '__main__':
    unittest.main()
