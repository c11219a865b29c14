"""Tests for SQLite persistence, the document store and the Excel report."""

import tempfile
import unittest
from datetime import date
from decimal import Decimal
from pathlib import Path

from invoice_ingest.output_handler import (
    Client,
    DatabaseHandler,
    DocumentStore,
    InvoiceRecord,
    ReportExporter,
    TimeEntryRecord,
)
from invoice_ingest.pipeline import ImportResult, summarize
from invoice_ingest.utils.exceptions import DatabaseError, DocumentStorageError, ReportExportError


def invoice_record(number="2025-001", client_id=None):
    return InvoiceRecord(
        invoice_number=number,
        invoice_date=date(2025, 1, 20),
        due_date=date(2025, 2, 3),
        status="Betaald",
        total_amount=Decimal("1405.93"),
        client_id=client_id,
    )


class TestDatabaseHandler(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.db = DatabaseHandler(Path(tmp.name) / "administration.db")

    def test_client_roundtrip_keeps_decimals(self):
        created = self.db.create_client(Client(name="Huisartsenpraktijk Raupp", hourly_rate=Decimal("77.50")))
        clients = self.db.list_clients()

        self.assertIsNotNone(created.id)
        self.assertEqual(clients[0].name, "Huisartsenpraktijk Raupp")
        self.assertEqual(clients[0].hourly_rate, Decimal("77.50"))

    def test_invoice_lookup(self):
        self.db.create_invoice(invoice_record())
        stored = self.db.find_invoice_by_number("2025-001")

        self.assertEqual(stored.due_date, date(2025, 2, 3))
        self.assertEqual(stored.total_amount, Decimal("1405.93"))
        self.assertIsNone(self.db.find_invoice_by_number("2025-002"))

    def test_invoice_number_is_unique(self):
        self.db.create_invoice(invoice_record())
        with self.assertRaises(DatabaseError):
            self.db.create_invoice(invoice_record())

    def test_transaction_rolls_back(self):
        with self.assertRaises(RuntimeError):
            with self.db.transaction():
                self.db.create_invoice(invoice_record())
                raise RuntimeError("boom")
        self.assertIsNone(self.db.find_invoice_by_number("2025-001"))

    def test_time_entries_match_numerically(self):
        client = self.db.create_client(Client(name="Raupp"))
        self.db.create_time_entry(TimeEntryRecord(
            date=date(2025, 1, 7),
            activity_code="WDAGPRAKTIJK_77,50",
            description="Waarneming dagpraktijk",
            hours=Decimal("9"),
            hourly_rate=Decimal("77.50"),
            invoice_number="2025-001",
            client_id=client.id,
        ))

        self.assertEqual(len(self.db.find_time_entries(date(2025, 1, 7), Decimal("9.00"), client.id)), 1)
        self.assertEqual(self.db.find_time_entries(date(2025, 1, 7), Decimal("8"), client.id), [])
        self.assertEqual(self.db.find_time_entries(date(2025, 1, 7), Decimal("9"), None), [])
        self.assertEqual(self.db.get_time_entries("2025-001")[0].hourly_rate, Decimal("77.50"))

    def test_statistics(self):
        self.db.create_time_entry(TimeEntryRecord(
            date=date(2024, 12, 13),
            activity_code="ANW_AW-WK-H",
            description="Achterwacht Avond",
            hours=Decimal("7.00"),
            hourly_rate=Decimal("6.72"),
            is_standby=True,
        ))
        stats = self.db.get_statistics()

        self.assertEqual(stats['time_entries'], 1)
        self.assertEqual(stats['standby_hours'], Decimal("7.00"))


class TestDocumentStore(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)
        self.store = DocumentStore(self.root / "documents")

    def write(self, name, content):
        path = self.root / name
        path.write_bytes(content)
        return path

    def test_store_and_reuse(self):
        source = self.write("2025-001_Raupp.pdf", b"%PDF-1.4 invoice")

        first = self.store.store(source, "2025-001", 2025)
        second = self.store.store(source, "2025-001", 2025)

        self.assertEqual(first.relative_path, "Imports/2025/2025-001.pdf")
        self.assertFalse(first.reused)
        self.assertTrue(second.reused)
        self.assertTrue(self.store.resolve(first.relative_path).exists())

    def test_different_content_gets_hash_suffix(self):
        first = self.store.store(self.write("a.pdf", b"one"), "2025-001", 2025)
        second = self.store.store(self.write("b.pdf", b"two"), "2025-001", 2025)

        self.assertNotEqual(first.relative_path, second.relative_path)
        self.assertEqual(second.relative_path, f"Imports/2025/2025-001_{second.sha256[:8]}.pdf")

    def test_unreadable_existing_copy(self):
        (self.root / "documents" / "Imports" / "2025" / "2025-001.pdf").mkdir(parents=True)
        with self.assertRaises(DocumentStorageError):
            self.store.store(self.write("a.pdf", b"one"), "2025-001", 2025)

    def test_identifier_cannot_escape_store(self):
        stored = self.store.store(self.write("c.pdf", b"three"), "../../etc/passwd", 2025)
        self.assertTrue(self.store.resolve(stored.relative_path).exists())

    def test_resolve_rejects_traversal(self):
        with self.assertRaises(DocumentStorageError):
            self.store.resolve("../outside.pdf")

    def test_missing_source(self):
        with self.assertRaises(DocumentStorageError):
            self.store.store(self.root / "missing.pdf", "2025-001", 2025)


class TestReportExporter(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.output_dir = Path(tmp.name)
        self.exporter = ReportExporter(self.output_dir)

    def test_export_results_and_summary(self):
        from openpyxl import load_workbook

        results = [
            ImportResult(True, "2025-014", "Invoice 2025-014 imported", entries_created=2,
                         total_amount=Decimal("1405.93"), source_file="2025-014_Raupp.pdf"),
            ImportResult(False, "notitie.txt", "No invoice number found", source_file="notitie.txt"),
        ]
        path = self.exporter.export(results, summarize(results), self.output_dir / "report.xlsx")

        workbook = load_workbook(path)
        sheet = workbook["Import Results"]
        self.assertEqual(sheet.cell(row=1, column=2).value, "Invoice Number")
        self.assertEqual(sheet.cell(row=2, column=2).value, "2025-014")
        self.assertEqual(sheet.max_row, 3)
        self.assertEqual(workbook["Summary"].cell(row=3, column=2).value, 1)

    def test_nothing_to_export(self):
        with self.assertRaises(ReportExportError):
            self.exporter.export([])

    def test_default_filename(self):
        self.assertTrue(self.exporter.get_default_filename().startswith("import_report_"))


if __name__ == '__main__':
    unittest.main()
