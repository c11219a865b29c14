"""Tests for client resolution and duplicate detection."""

import tempfile
import unittest
from datetime import date
from decimal import Decimal
from pathlib import Path

from invoice_ingest.matching import ClientResolver, DeduplicationGate
from invoice_ingest.output_handler import Client, DatabaseHandler, InvoiceRecord, TimeEntryRecord
from invoice_ingest.parsing import ParsedInvoice


def parsed(client_name, postcode=""):
    return ParsedInvoice(
        invoice_number="2025-001",
        invoice_date=date(2025, 1, 20),
        client_name=client_name,
        client_postcode=postcode,
    )


class TestClientResolver(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.db = DatabaseHandler(Path(tmp.name) / "administration.db")
        self.resolver = ClientResolver(self.db)

    def test_exact_match(self):
        existing = self.db.create_client(Client(name="Huisartsenpraktijk Raupp"))
        resolution = self.resolver.resolve(parsed("Huisartsenpraktijk Raupp"))

        self.assertEqual(resolution.client.id, existing.id)
        self.assertFalse(resolution.created)

    def test_containment_match_ignores_case(self):
        existing = self.db.create_client(Client(name="Huisartsenpraktijk Raupp"))
        self.assertEqual(self.resolver.resolve(parsed("raupp")).client.id, existing.id)

    def test_unknown_client_created_provisionally(self):
        resolution = self.resolver.resolve(parsed("Doktersdienst Groningen", "9711 AB Groningen"))

        self.assertTrue(resolution.created)
        self.assertEqual(resolution.client.category, "ANW Dienst")
        self.assertEqual(resolution.client.hourly_rate, Decimal("124"))
        self.assertEqual(resolution.client.return_distance, 10)
        self.assertEqual(len(self.db.list_clients()), 1)

    def test_day_practice_category(self):
        client = self.resolver.resolve(parsed("Huisartsenpraktijk Zuidbroek", "9636 AA Zuidbroek")).client

        self.assertEqual(client.category, "Dagpraktijk")
        self.assertEqual(client.return_distance, 50)

    def test_missing_client_name(self):
        resolution = self.resolver.resolve(parsed("  "))
        self.assertIsNone(resolution.client)
        self.assertEqual(self.db.list_clients(), [])


class TestDeduplicationGate(unittest.TestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.db = DatabaseHandler(Path(tmp.name) / "administration.db")
        self.client = self.db.create_client(Client(name="Raupp"))
        self.db.create_invoice(InvoiceRecord(
            invoice_number="2025-001",
            invoice_date=date(2025, 1, 20),
            due_date=date(2025, 2, 3),
            status="Betaald",
            total_amount=Decimal("697.50"),
            client_id=self.client.id,
        ))
        self.db.create_time_entry(TimeEntryRecord(
            date=date(2025, 1, 7),
            activity_code="WDAGPRAKTIJK_77,50",
            description="Waarneming dagpraktijk",
            hours=Decimal("9.00"),
            hourly_rate=Decimal("77.50"),
            invoice_number="2025-001",
            client_id=self.client.id,
        ))

    def test_duplicate_invoice(self):
        gate = DeduplicationGate(self.db, enabled=True)
        self.assertTrue(gate.is_duplicate_invoice("2025-001"))
        self.assertFalse(gate.is_duplicate_invoice("2025-002"))

    def test_duplicate_entry(self):
        gate = DeduplicationGate(self.db, enabled=True, check_time_entries=True)

        self.assertTrue(gate.is_duplicate_entry(date(2025, 1, 7), Decimal("9"), self.client.id))
        self.assertFalse(gate.is_duplicate_entry(date(2025, 1, 8), Decimal("9"), self.client.id))

    def test_entries_of_same_invoice_are_not_duplicates(self):
        gate = DeduplicationGate(self.db, enabled=True, check_time_entries=True)
        self.assertFalse(
            gate.is_duplicate_entry(date(2025, 1, 7), Decimal("9"), self.client.id, exclude_invoice="2025-001")
        )

    def test_disabled_gate(self):
        gate = DeduplicationGate(self.db, enabled=False)
        self.assertFalse(gate.is_duplicate_invoice("2025-001"))
        self.assertFalse(gate.is_duplicate_entry(date(2025, 1, 7), Decimal("9"), self.client.id))

    def test_entry_check_can_be_switched_off(self):
        gate = DeduplicationGate(self.db, enabled=True, check_time_entries=False)
        self.assertFalse(gate.is_duplicate_entry(date(2025, 1, 7), Decimal("9"), self.client.id))


if __name__ == '__main__':
    unittest.main()
