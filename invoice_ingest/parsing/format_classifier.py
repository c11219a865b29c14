"""
Format Classifier Module.

Selects the layout grammar of a document from cheap lexical signals in
its leading lines, before any row-by-row parsing is attempted.
"""

import re
from typing import Optional, Sequence

from invoice_ingest.normalization import DUTCH_MONTHS
from invoice_ingest.utils.logger import get_logger
from .models import FormatVariant, ParsingKeywords
from .tokens import contains_any

logger = get_logger(__name__)


class FormatClassifier:
    """
    Classifies invoice text into one of the known FormatVariant values.

    Checks run in a fixed order and the first match wins:
        1. on-call client name together with a duty-table marker
        2. "Datum:" label followed by a Dutch month name
        3. a distance column header
        4. phrases for separate hour and km rows
        5. delimiter of the date that starts a table row
        6. DASH_DATE_COMBINED, the most common recent layout

    Example:
        >>> classifier = FormatClassifier()
        >>> classifier.classify(["Datum Omschrijving Aantal Tarief Bedrag",
        ...                      "13/01/2025 Waarneming dagpraktijk 8,5 € 77,50"])
        <FormatVariant.SLASH_DATE_COMBINED: 'slash_date_combined'>
    """

    SAMPLE_LINES = 50

    TEXT_DATE_LABEL = re.compile(
        r'\bDatum:\s*\d{1,2}\s+(?:' + '|'.join(DUTCH_MONTHS) + r')\b',
        re.IGNORECASE
    )
    SLASH_ROW = re.compile(r'^\s*\d{1,2}/\d{1,2}/\d{4}')
    DASH_ROW = re.compile(r'^\s*\d{1,2}-\d{1,2}-\d{2,4}\s+')

    def __init__(self, keywords: Optional[ParsingKeywords] = None) -> None:
        self.keywords = keywords or ParsingKeywords.from_config()

    def classify(self, lines: Sequence[str]) -> FormatVariant:
        """
        Classify a document from its text lines.

        Args:
            lines: Text lines of the document, in order.

        Returns:
            The selected FormatVariant. The result depends only on the
            lines passed in.
        """
        sample = " ".join(lines[:self.SAMPLE_LINES])
        keywords = self.keywords

        if contains_any(sample, keywords.on_call_clients) and contains_any(sample, keywords.duty_markers):
            variant = FormatVariant.DUTY_TABLE
        elif self.TEXT_DATE_LABEL.search(sample):
            variant = FormatVariant.VERTICAL_QUANTITY
        elif keywords.km_column and all(marker in sample for marker in keywords.km_column):
            variant = FormatVariant.KM_COLUMN
        elif contains_any(sample, keywords.separate_rows):
            variant = FormatVariant.SEPARATE_ROWS
        else:
            variant = self._classify_by_row_dates(lines)

        logger.debug(f"Classified document layout as {variant.value}")
        return variant

    def _classify_by_row_dates(self, lines: Sequence[str]) -> FormatVariant:
        for line in lines:
            if self.SLASH_ROW.match(line):
                return FormatVariant.SLASH_DATE_COMBINED
            if self.DASH_ROW.match(line) and contains_any(line, self.keywords.hours):
                return FormatVariant.DASH_DATE_COMBINED
        return FormatVariant.DASH_DATE_COMBINED
