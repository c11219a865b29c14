"""End-to-end import tests against a temporary database and document store."""

import tempfile
import unittest
from datetime import date
from decimal import Decimal
from pathlib import Path

from invoice_ingest.output_handler import DatabaseHandler, DocumentStore
from invoice_ingest.pipeline import ImportOrchestrator, summarize
from invoice_ingest.utils.exceptions import InvoiceNumberNotFoundError, SourceNotFoundError
from tests.fixtures import DASH_INVOICE, DUTY_INVOICE, REFERENCE_DATE, SPLIT_INVOICE


class TestImportOrchestrator(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)
        self.inbox = self.root / "inbox"
        self.inbox.mkdir()

        self.db = DatabaseHandler(self.root / "administration.db")
        self.store = DocumentStore(self.root / "documents")
        self.orchestrator = ImportOrchestrator(
            database=self.db,
            document_store=self.store,
            reference_date=REFERENCE_DATE,
        )

    def write(self, name, text):
        path = self.inbox / name
        path.write_text(text, encoding="utf-8")
        return path

    def test_import_creates_invoice_and_entries(self):
        result = self.orchestrator.import_document(self.write("2025-014_Raupp.txt", DASH_INVOICE))

        self.assertTrue(result.success)
        self.assertEqual(result.entries_created, 2)
        self.assertEqual(result.format_variant, "dash_date_combined")
        self.assertEqual(result.total_amount, Decimal("1405.93"))

        invoice = self.db.find_invoice_by_number("2025-014")
        self.assertEqual(invoice.due_date, date(2025, 2, 3))
        self.assertEqual(invoice.status, "Betaald")
        self.assertEqual(invoice.notes, "Geïmporteerd uit PDF: 2025-014_Raupp.txt")
        self.assertEqual(invoice.document_path, "Imports/2025/2025-014.txt")
        self.assertTrue(self.store.resolve(invoice.document_path).exists())

        entries = self.db.get_time_entries("2025-014")
        self.assertEqual([entry.return_distance for entry in entries], [108, 108])
        self.assertEqual([entry.hours for entry in entries], [Decimal("9.00"), Decimal("8.50")])
        self.assertEqual(entries[0].location, "Vlagtwedde")
        self.assertEqual(entries[0].client_id, invoice.client_id)

    def test_storage_failure_keeps_import(self):
        self.write("2025-014_Raupp.txt", DASH_INVOICE)
        (self.root / "documents" / "Imports" / "2025" / "2025-014.txt").mkdir(parents=True)

        with self.assertLogs("invoice_ingest", level="WARNING"):
            results = self.orchestrator.import_directory(self.inbox)

        self.assertTrue(results[0].success)
        self.assertIsNone(self.db.find_invoice_by_number("2025-014").document_path)

    def test_reimport_is_idempotent(self):
        path = self.write("2025-014_Raupp.txt", DASH_INVOICE)
        self.orchestrator.import_document(path)
        before = self.db.get_statistics()

        second = self.orchestrator.import_document(path)

        self.assertTrue(second.duplicate)
        self.assertFalse(second.success)
        self.assertFalse(second.failed)
        self.assertEqual(self.db.get_statistics(), before)

    def test_split_invoice_is_prorated(self):
        result = self.orchestrator.import_text(SPLIT_INVOICE, "2025-020_Raupp.pdf")

        self.assertIn("(split: 23%)", result.message)
        entry = self.db.get_time_entries("2025-020")[0]
        self.assertEqual(entry.hours, Decimal("2.07"))
        self.assertEqual(entry.description, "Waarneming dagpraktijk (23% aandeel)")

        invoice = self.db.find_invoice_by_number("2025-020")
        self.assertTrue(invoice.is_split)
        self.assertEqual(invoice.split_factor, Decimal("0.23"))
        self.assertIsNone(invoice.document_path)

    def test_duty_invoice_keeps_standby_hours(self):
        result = self.orchestrator.import_text(DUTY_INVOICE, "22470-25-16.pdf")

        self.assertEqual(result.entries_created, 3)
        stats = self.db.get_statistics()
        self.assertEqual(stats['total_hours'], Decimal("21.00"))
        self.assertEqual(stats['standby_hours'], Decimal("15.00"))

        client = self.db.list_clients()[0]
        self.assertEqual(client.name, "Dokter Drenthe")
        self.assertEqual(client.category, "ANW Dienst")

    def test_overlapping_entries_from_another_invoice_are_skipped(self):
        self.orchestrator.import_text(DASH_INVOICE, "2025-014_Raupp.pdf")
        corrected = DASH_INVOICE.replace("2025-014", "2025-015")

        result = self.orchestrator.import_text(corrected, "2025-015_Raupp.pdf")

        self.assertTrue(result.success)
        self.assertEqual(result.entries_created, 0)
        self.assertEqual(result.entries_skipped, 2)
        self.assertIn("(2 duplicate entries skipped)", result.message)

    def test_directory_import_isolates_failures(self):
        self.write("2025-014_Raupp.txt", DASH_INVOICE)
        self.write("notitie.txt", "Dit is geen factuur, alleen een notitie voor later.")
        self.write("leeg.txt", "")

        results = self.orchestrator.import_directory(self.inbox)
        summary = summarize(results)

        self.assertEqual(len(results), 3)
        self.assertEqual(summary.succeeded, 1)
        self.assertEqual(summary.failed, 2)
        self.assertEqual(summary.entries_created, 2)

    def test_missing_invoice_number_raises_for_single_document(self):
        with self.assertRaises(InvoiceNumberNotFoundError):
            self.orchestrator.import_document(self.write("notitie.txt", "Dit is geen factuur, alleen een notitie."))

    def test_missing_directory(self):
        with self.assertRaises(SourceNotFoundError):
            self.orchestrator.import_directory(self.root / "nope")

    def test_import_path_dispatches_on_type(self):
        path = self.write("2025-014_Raupp.txt", DASH_INVOICE)
        self.assertEqual(len(self.orchestrator.import_path(path)), 1)
        self.assertTrue(self.orchestrator.import_path(self.inbox)[0].duplicate)


if __name__ == '__main__':
    unittest.main()
