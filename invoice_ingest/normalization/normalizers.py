"""
Data Normalizers Module.

This module provides locale-aware normalization for:
    - Dates (dd-mm-yyyy, dd/mm/yyyy, 2-digit years, Dutch month names)
    - Decimal and currency values in Dutch notation

Both normalizers are free of side effects; the date normalizer only
carries its plausibility window.
"""

import re
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional

from dateutil import parser as date_parser

from config import get_config
from invoice_ingest.utils.logger import get_logger
from invoice_ingest.utils.exceptions import DateNotFoundError

logger = get_logger(__name__)


DUTCH_MONTHS = [
    "januari", "februari", "maart", "april", "mei", "juni",
    "juli", "augustus", "september", "oktober", "november", "december",
]

CENT = Decimal("0.01")


class DutchParserInfo(date_parser.parserinfo):
    """dateutil parser vocabulary for Dutch month names."""

    MONTHS = [
        ("jan", "januari"),
        ("feb", "februari"),
        ("mrt", "maart"),
        ("apr", "april"),
        ("mei",),
        ("jun", "juni"),
        ("jul", "juli"),
        ("aug", "augustus"),
        ("sep", "sept", "september"),
        ("okt", "oktober"),
        ("nov", "november"),
        ("dec", "december"),
    ]


class DateNormalizer:
    """
    Parses invoice dates and rejects implausible ones.

    Accepted forms are "13-01-2025", "13/01/2025", "13-01-25" (2-digit
    years fall in the 2000s) and "9 januari 2025". A parsed date outside
    [reference - window_past_days, reference + window_future_days] is
    treated as an extraction artifact and discarded.

    Attributes:
        reference_date: Anchor of the plausibility window
        window_past_days: How far back a date may lie
        window_future_days: How far ahead a date may lie

    Example:
        >>> normalizer = DateNormalizer(reference_date=date(2025, 6, 1))
        >>> normalizer.parse("13/01/2025")
        datetime.date(2025, 1, 13)
        >>> normalizer.parse("Datum: 9 januari 2025")
        datetime.date(2025, 1, 9)
        >>> normalizer.parse("01-01-2019") is None
        True
    """

    NUMERIC_DATE = re.compile(r'(?<!\d)(\d{1,2})[-/](\d{1,2})[-/](\d{4}|\d{2})(?!\d)')
    TEXT_DATE = re.compile(
        r'(?<!\d)(\d{1,2})\s+(' + '|'.join(DUTCH_MONTHS) + r')\s+(\d{4})(?!\d)',
        re.IGNORECASE
    )

    def __init__(
        self,
        reference_date: Optional[date] = None,
        window_past_days: Optional[int] = None,
        window_future_days: Optional[int] = None
    ) -> None:
        configured = get_config("normalization.date.reference_date")
        if reference_date is None and configured:
            reference_date = date.fromisoformat(str(configured))

        self.reference_date = reference_date or date.today()
        self.window_past_days = int(
            window_past_days if window_past_days is not None
            else get_config("normalization.date.window_past_days", 730)
        )
        self.window_future_days = int(
            window_future_days if window_future_days is not None
            else get_config("normalization.date.window_future_days", 365)
        )
        self._parserinfo = DutchParserInfo(dayfirst=True)

    @property
    def earliest(self) -> date:
        return self.reference_date - timedelta(days=self.window_past_days)

    @property
    def latest(self) -> date:
        return self.reference_date + timedelta(days=self.window_future_days)

    def is_plausible(self, value: date) -> bool:
        """Check that a date lies inside the plausibility window."""
        return self.earliest <= value <= self.latest

    def parse_numeric(self, token: str) -> Optional[date]:
        """
        Parse a numeric day-first date token.

        Args:
            token: Text containing a date such as "13-01-2025" or "13/01/25".

        Returns:
            The date, or None when absent, invalid or implausible.
        """
        match = self.NUMERIC_DATE.search(token or "")
        if not match:
            return None

        day, month, year = (int(part) for part in match.groups())
        if len(match.group(3)) == 2:
            year += 2000

        try:
            value = date(year, month, day)
        except ValueError:
            logger.debug(f"Invalid calendar date: '{match.group(0)}'")
            return None

        if not self.is_plausible(value):
            logger.debug(f"Date outside plausible window: {value.isoformat()}")
            return None
        return value

    def parse_text(self, text: str) -> Optional[date]:
        """
        Parse a Dutch textual date such as "9 januari 2025".

        Args:
            text: Text that may contain a textual date.

        Returns:
            The date, or None when absent or implausible.
        """
        match = self.TEXT_DATE.search(text or "")
        if not match:
            return None

        try:
            value = date_parser.parse(match.group(0), parserinfo=self._parserinfo).date()
        except (ValueError, OverflowError) as e:
            logger.debug(f"Could not parse textual date '{match.group(0)}': {e}")
            return None

        if not self.is_plausible(value):
            logger.debug(f"Date outside plausible window: {value.isoformat()}")
            return None
        return value

    def parse(self, text: str) -> Optional[date]:
        """Parse a numeric date, falling back to the textual Dutch form."""
        return self.parse_numeric(text) or self.parse_text(text)

    def find_all(self, text: str) -> List[date]:
        """
        Return every plausible numeric date in text, left to right.

        Implausible candidates are skipped so callers can fall back to
        the next one.
        """
        dates = []
        for match in self.NUMERIC_DATE.finditer(text or ""):
            value = self.parse_numeric(match.group(0))
            if value is not None:
                dates.append(value)
        return dates

    def extract(self, text: str) -> date:
        """
        Strict variant of parse().

        Raises:
            DateNotFoundError: If no plausible date is present.
        """
        value = self.parse(text)
        if value is None:
            raise DateNotFoundError(text)
        return value


def parse_decimal(text: str) -> Optional[Decimal]:
    """
    Parse a number written in Dutch notation.

    When both "." and "," appear, "." separates thousands and "," is the
    decimal separator; a lone "," is the decimal separator.

    Example:
        >>> parse_decimal("2.195,67")
        Decimal('2195.67')
        >>> parse_decimal("70,00")
        Decimal('70.00')
        >>> parse_decimal("7.00")
        Decimal('7.00')
    """
    if not text:
        return None

    cleaned = re.sub(r'[€\s ]', '', text)
    if '.' in cleaned and ',' in cleaned:
        cleaned = cleaned.replace('.', '').replace(',', '.')
    elif ',' in cleaned:
        cleaned = cleaned.replace(',', '.')

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


class AmountNormalizer:
    """
    Extracts and formats euro amounts.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.extract_currency_values("8,5 € 77,50 € 12,42 € 658,75")
        [Decimal('77.50'), Decimal('12.42'), Decimal('658.75')]
        >>> normalizer.format_dutch(Decimal("77.50"))
        '77,50'
    """

    # "€ 2.195,67" (grouped thousands) or "€ 77,50" / "€ 6.72" / "€ 600"
    CURRENCY_PATTERN = re.compile(r'€\s*(\d{1,3}(?:\.\d{3})+,\d+|\d+(?:[.,]\d+)?)')

    def normalize(self, amount_str: str) -> Optional[Decimal]:
        """Normalize an amount string such as "€ 1.234,56"."""
        return parse_decimal(amount_str)

    def extract_currency_values(self, text: str) -> List[Decimal]:
        """Return all €-prefixed amounts in left-to-right order."""
        values = []
        for match in self.CURRENCY_PATTERN.finditer(text or ""):
            value = parse_decimal(match.group(1))
            if value is not None:
                values.append(value)
        return values

    def extract_first(self, text: str) -> Optional[Decimal]:
        """
        Return the first € amount, or a bare "658,70"-style amount when
        the whole line is a single number with a decimal comma.
        """
        values = self.extract_currency_values(text)
        if values:
            return values[0]

        stripped = (text or "").strip()
        if ',' in stripped and re.fullmatch(r'\d[\d.,]*', stripped):
            return parse_decimal(stripped)
        return None

    @staticmethod
    def to_cents(value: Decimal) -> Decimal:
        """Round half-up to whole cents."""
        return value.quantize(CENT, rounding=ROUND_HALF_UP)

    @staticmethod
    def format_dutch(value: Decimal) -> str:
        """
        Format a rate the way activity codes spell it: "70" or "77,50".
        """
        if value == value.to_integral_value():
            return str(int(value))
        return f"{AmountNormalizer.to_cents(value)}".replace('.', ',')
