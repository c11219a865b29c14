"""Tests for Dutch date/amount normalization and plausibility bounds."""

import unittest
from datetime import date
from decimal import Decimal

from invoice_ingest.normalization import (
    AmountNormalizer,
    DateNormalizer,
    PlausibilityBounds,
    complete_amounts,
    parse_decimal,
)
from invoice_ingest.utils.exceptions import DateNotFoundError
from tests.fixtures import REFERENCE_DATE


class TestDateNormalizer(unittest.TestCase):

    def setUp(self):
        self.dates = DateNormalizer(reference_date=REFERENCE_DATE, window_past_days=730, window_future_days=365)

    def test_dash_and_slash_delimiters_are_equivalent(self):
        self.assertEqual(self.dates.parse("13-01-2025"), date(2025, 1, 13))
        self.assertEqual(self.dates.parse("13/01/2025"), date(2025, 1, 13))

    def test_two_digit_year(self):
        self.assertEqual(self.dates.parse("13-01-25"), date(2025, 1, 13))

    def test_dutch_month_name(self):
        self.assertEqual(self.dates.parse("Datum: 9 januari 2025"), date(2025, 1, 9))
        self.assertEqual(self.dates.parse("1 maart 2025"), date(2025, 3, 1))

    def test_date_outside_window_is_rejected(self):
        self.assertIsNone(self.dates.parse("01-01-2019"))
        self.assertIsNone(self.dates.parse("01-01-2030"))

    def test_invalid_calendar_date(self):
        self.assertIsNone(self.dates.parse("31-02-2025"))

    def test_find_all_skips_implausible_candidates(self):
        self.assertEqual(
            self.dates.find_all("Periode 01-01-2019 t/m 20-01-2025"),
            [date(2025, 1, 20)]
        )

    def test_extract_raises_without_date(self):
        with self.assertRaises(DateNotFoundError):
            self.dates.extract("geen datum hier")

    def test_window_follows_reference_date(self):
        old = DateNormalizer(reference_date=date(2019, 6, 1), window_past_days=730, window_future_days=365)
        self.assertEqual(old.parse("01-01-2019"), date(2019, 1, 1))


class TestAmounts(unittest.TestCase):

    def setUp(self):
        self.amounts = AmountNormalizer()

    def test_parse_decimal_dutch_notation(self):
        self.assertEqual(parse_decimal("2.195,67"), Decimal("2195.67"))
        self.assertEqual(parse_decimal("70,00"), Decimal("70.00"))
        self.assertEqual(parse_decimal("7.00"), Decimal("7.00"))
        self.assertIsNone(parse_decimal("n.v.t."))
        self.assertIsNone(parse_decimal(""))

    def test_currency_values_in_order(self):
        self.assertEqual(
            self.amounts.extract_currency_values("8,5 € 77,50 € 12,42 € 658,75"),
            [Decimal("77.50"), Decimal("12.42"), Decimal("658.75")]
        )

    def test_grouped_thousands(self):
        self.assertEqual(self.amounts.extract_currency_values("Totaal € 2.195,67"), [Decimal("2195.67")])

    def test_extract_first_accepts_bare_amount_line(self):
        self.assertEqual(self.amounts.extract_first("658,70"), Decimal("658.70"))
        self.assertIsNone(self.amounts.extract_first("Hoofdstraat 12"))

    def test_format_dutch(self):
        self.assertEqual(AmountNormalizer.format_dutch(Decimal("70.00")), "70")
        self.assertEqual(AmountNormalizer.format_dutch(Decimal("77.5")), "77,50")

    def test_to_cents_rounds_half_up(self):
        self.assertEqual(AmountNormalizer.to_cents(Decimal("2.075")), Decimal("2.08"))


class TestPlausibilityBounds(unittest.TestCase):

    def setUp(self):
        self.bounds = PlausibilityBounds()

    def test_hours(self):
        self.assertFalse(self.bounds.is_plausible_hours(Decimal("0")))
        self.assertTrue(self.bounds.is_plausible_hours(Decimal("24")))
        self.assertFalse(self.bounds.is_plausible_hours(Decimal("24.5")))

    def test_distance_bounds_are_inclusive(self):
        self.assertTrue(self.bounds.is_plausible_distance(Decimal("10")))
        self.assertTrue(self.bounds.is_plausible_distance(Decimal("500")))
        self.assertFalse(self.bounds.is_plausible_distance(Decimal("9")))

    def test_rate_classification(self):
        self.assertTrue(self.bounds.is_hourly_rate(Decimal("77.50")))
        self.assertFalse(self.bounds.is_hourly_rate(Decimal("12.42")))
        self.assertTrue(self.bounds.is_km_rate(Decimal("0.23")))
        self.assertFalse(self.bounds.is_km_rate(Decimal("1")))

    def test_amounts_consistent(self):
        self.assertTrue(self.bounds.amounts_consistent(Decimal("8.5"), Decimal("77.50"), Decimal("658.75")))
        self.assertFalse(self.bounds.amounts_consistent(Decimal("8.5"), Decimal("77.50"), Decimal("700")))

    def test_complete_amounts(self):
        self.assertEqual(
            complete_amounts(Decimal("9"), None, Decimal("697.50")),
            (Decimal("77.50"), Decimal("697.50"))
        )
        self.assertEqual(
            complete_amounts(Decimal("108"), Decimal("0.23"), None),
            (Decimal("0.23"), Decimal("24.84"))
        )

    def test_derived_rate_rounds_half_up_to_cents(self):
        self.assertEqual(complete_amounts(Decimal("2"), None, Decimal("0.05"))[0], Decimal("0.03"))


if __name__ == '__main__':
    unittest.main()
