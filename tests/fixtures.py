"""Shared test data: parsing rules pinned to a fixed date and sample invoices."""

from datetime import date

from invoice_ingest.normalization import DateNormalizer, PlausibilityBounds
from invoice_ingest.parsing import ParsingKeywords, ParsingRules

REFERENCE_DATE = date(2025, 6, 30)


def make_rules(reference_date: date = REFERENCE_DATE) -> ParsingRules:
    return ParsingRules(
        bounds=PlausibilityBounds(),
        keywords=ParsingKeywords(),
        dates=DateNormalizer(reference_date=reference_date, window_past_days=730, window_future_days=365),
    )


DASH_INVOICE = """FACTUUR
Factuurnummer: 2025-014
Factuurdatum: 20-01-2025

Factuur aan
Huisartsenpraktijk Raupp
T.a.v. J. Raupp
Hoofdstraat 12
9541 BK Vlagtwedde

Datum Omschrijving Aantal Tarief Bedrag
07-01-2025 Waarneming dagpraktijk 9,00 € 77,50 € 697,50
Reiskosten 108 km € 0,23 € 24,84
08-01-2025 Waarneming dagpraktijk 8,5 € 77,50 € 658,75
Reiskosten 108 km € 0,23 € 24,84
Totaal € 1.405,93

Te betalen bedrag € 1.405,93
"""

SPLIT_INVOICE = """FACTUUR
Factuurnummer: 2025-020
Factuurdatum: 03-02-2025

Factuur aan
Huisartsenpraktijk Raupp
Hoofdstraat 12
9541 BK Vlagtwedde

Datum Omschrijving Aantal Tarief Bedrag
13/01/2025 Waarneming dagpraktijk 9 € 77,50 € 697,50
Totaal € 697,50

Deelbetaling, verdeling naar rato:
Praktijk Raupp 0,23 € 160,43
Praktijk De Vries 0,77 € 537,07
"""

DUTY_INVOICE = """FACTUURNUMMER: 22470-25-16
Factuurdatum: 31-12-2024
Dokter Drenthe
Postbus 10
9400 AA Assen

UREN SPECIFICATIE
Dienst ID Dienst Datum Van Tot Uren Tarief Naam Tarief Bedrag
506042 AW-WK-H 13-12-2024 17:00 00:00 7.00 Avond € 6,72 Vrijgesteld € 47,04
00:00 08:00 8.00 Nacht € 6,72 € 53,76
506043 ANW-AV 14-12-2024 17:00 23:00 6.00 Avond € 124,00 € 744,00
TOTAAL UREN 21.00
Te betalen bedrag € 844,80
"""
