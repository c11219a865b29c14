"""Tests for invoice header extraction and whole-document parsing."""

import unittest
from datetime import date
from decimal import Decimal

from invoice_ingest.parsing import FormatVariant, InvoiceTextParser
from invoice_ingest.utils.exceptions import InvoiceNumberNotFoundError
from tests.fixtures import DASH_INVOICE, DUTY_INVOICE, REFERENCE_DATE, SPLIT_INVOICE, make_rules


class TestInvoiceTextParser(unittest.TestCase):

    def setUp(self):
        self.parser = InvoiceTextParser(make_rules())

    def test_dash_invoice_header(self):
        invoice = self.parser.parse(DASH_INVOICE, "2025-014_Raupp.pdf")

        self.assertEqual(invoice.invoice_number, "2025-014")
        self.assertEqual(invoice.invoice_date, date(2025, 1, 20))
        self.assertEqual(invoice.total_amount, Decimal("1405.93"))
        self.assertEqual(invoice.format_variant, FormatVariant.DASH_DATE_COMBINED)
        self.assertFalse(invoice.is_split)
        self.assertEqual(invoice.source_file, "2025-014_Raupp.pdf")

    def test_client_block(self):
        invoice = self.parser.parse(DASH_INVOICE)

        self.assertEqual(invoice.client_name, "Huisartsenpraktijk Raupp")
        self.assertEqual(invoice.client_contact, "J. Raupp")
        self.assertEqual(invoice.client_address, "Hoofdstraat 12")
        self.assertEqual(invoice.client_postcode, "9541 BK Vlagtwedde")
        self.assertEqual(invoice.client_location, "Vlagtwedde")

    def test_dash_invoice_items(self):
        invoice = self.parser.parse(DASH_INVOICE)

        self.assertEqual(len(invoice.hours_items), 2)
        self.assertEqual(len(invoice.travel_items), 2)
        self.assertEqual(invoice.hours_items[1].quantity, Decimal("8.5"))
        self.assertEqual([item.date for item in invoice.travel_items], [date(2025, 1, 7), date(2025, 1, 8)])

    def test_split_invoice(self):
        invoice = self.parser.parse(SPLIT_INVOICE)

        self.assertTrue(invoice.is_split)
        self.assertEqual(invoice.format_variant, FormatVariant.SLASH_DATE_COMBINED)
        self.assertEqual(invoice.total_amount, Decimal("697.50"))
        self.assertEqual(invoice.client_address, "Hoofdstraat 12")
        self.assertEqual(invoice.client_contact, "")

    def test_duty_invoice(self):
        invoice = self.parser.parse(DUTY_INVOICE)

        self.assertEqual(invoice.invoice_number, "22470-25-16")
        self.assertEqual(invoice.format_variant, FormatVariant.DUTY_TABLE)
        self.assertEqual(invoice.client_name, "Dokter Drenthe")
        self.assertEqual(invoice.client_location, "Assen")
        self.assertEqual(invoice.total_amount, Decimal("844.80"))
        self.assertEqual([item.is_standby for item in invoice.line_items], [True, True, False])

    def test_invoice_number_from_filename(self):
        invoice = self.parser.parse("Waarneming januari\nGeen nummer vermeld", "2025-007_Raupp.pdf")
        self.assertEqual(invoice.invoice_number, "2025-007")

    def test_missing_invoice_number(self):
        with self.assertRaises(InvoiceNumberNotFoundError):
            self.parser.parse("Waarneming januari\nGeen nummer vermeld", "scan.pdf")

    def test_reference_date_is_last_resort(self):
        invoice = self.parser.parse("Factuurnummer: 2025-099\nGeen regels")

        self.assertEqual(invoice.invoice_date, REFERENCE_DATE)
        self.assertEqual(invoice.line_items, [])
        self.assertEqual(invoice.total_amount, Decimal("0"))

    def test_textual_invoice_date(self):
        invoice = self.parser.parse("Factuur 2025-003\nGroningen, 2 februari 2025")
        self.assertEqual(invoice.invoice_date, date(2025, 2, 2))

    def test_parse_is_deterministic(self):
        first = self.parser.parse(DASH_INVOICE)
        second = self.parser.parse(DASH_INVOICE)
        self.assertEqual(first.line_items, second.line_items)


if __name__ == '__main__':
    unittest.main()
