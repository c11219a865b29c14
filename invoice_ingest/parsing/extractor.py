"""
Invoice Text Parser Module.

This module turns the extracted text of one invoice into a ParsedInvoice:
    - invoice number (content patterns, then the filename)
    - invoice date (label line, then fallbacks through the plausibility window)
    - client block (name, contact person, address, postcode, location)
    - line items (classified layout, folded line by line)
    - amount due and split-payment signals

Author: Administration Tooling Team
"""

import re
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from config import get_config
from invoice_ingest.normalization import AmountNormalizer
from invoice_ingest.utils.logger import get_logger
from invoice_ingest.utils.exceptions import InvoiceNumberNotFoundError
from .format_classifier import FormatClassifier
from .line_parsers import parse_line_items
from .models import LineState, ParsedInvoice, ParsedLineItem, ParsingRules
from .tokens import contains_any

logger = get_logger(__name__)


class InvoiceTextParser:
    """
    Parses the text layer of an invoice into structured fields.

    Attributes:
        rules: Bounds, keywords and date window shared by all parsers
        classifier: Layout classifier

    Example:
        >>> parser = InvoiceTextParser(ParsingRules.from_config(date(2025, 6, 30)))
        >>> invoice = parser.parse(text, "2025-001_Raupp.pdf")
        >>> invoice.invoice_number
        '2025-001'
    """

    # Checked per line in this order; the first hit wins
    INVOICE_NUMBER_PATTERNS = [
        re.compile(r'FACTUURNUMMER\s*:\s*(\d+-\d+-\d+)', re.IGNORECASE),
        re.compile(r'\bNummer:\s*(\d{4}-\d{3})', re.IGNORECASE),
        re.compile(r'Factuurnummer:\s*(\d{4}-\d{3})', re.IGNORECASE),
        re.compile(r'Factuur\s+(\d{4}-\d{3})', re.IGNORECASE),
        re.compile(r'^(\d{4}-\d{3})$'),
    ]
    FILENAME_NUMBER = re.compile(r'(\d{4}-\d{3})')

    HEADER_LINES = 30
    INITIALS = re.compile(r'\bT\.a\.v\.|\b[A-Z]\.(?:[A-Z]\.)*(?=\s|$)')

    def __init__(
        self,
        rules: Optional[ParsingRules] = None,
        classifier: Optional[FormatClassifier] = None
    ) -> None:
        self.rules = rules or ParsingRules.from_config()
        self.classifier = classifier or FormatClassifier(self.rules.keywords)
        self.amounts = AmountNormalizer()

        self.client_header_keywords = get_config("clients.header_keywords", [])
        self.client_exclude_markers = get_config("clients.exclude_markers", [])

    def parse(self, text: str, filename: str = "") -> ParsedInvoice:
        """
        Parse invoice text.

        Args:
            text: Extracted text, pages joined by newlines.
            filename: Source filename, used as invoice number fallback.

        Returns:
            ParsedInvoice with all recovered fields.

        Raises:
            InvoiceNumberNotFoundError: If neither text nor filename hold
                an invoice number.
        """
        lines = [line.strip() for line in text.splitlines()]

        invoice_number = self.extract_invoice_number(lines, filename)
        variant = self.classifier.classify(lines)

        items, _ = parse_line_items(lines, variant, LineState(rules=self.rules))
        if not items:
            logger.warning(f"No line items recognized in {filename or invoice_number}")

        name, contact, address, postcode, location = self.extract_client(lines)
        is_split = contains_any(" ".join(lines), self.rules.keywords.split_payment, ignore_case=True)

        invoice = ParsedInvoice(
            invoice_number=invoice_number,
            invoice_date=self.extract_invoice_date(lines, items),
            client_name=name,
            client_contact=contact,
            client_address=address,
            client_postcode=postcode,
            client_location=location,
            line_items=items,
            total_amount=self.extract_total(lines, items),
            is_split=is_split,
            format_variant=variant,
            raw_lines=lines,
            source_file=filename or None,
        )

        logger.debug(
            f"Parsed {invoice.invoice_number}: {len(items)} items, "
            f"total {invoice.total_amount}, client '{invoice.client_name}'"
        )
        return invoice

    def extract_invoice_number(self, lines: List[str], filename: str = "") -> str:
        for line in lines:
            for pattern in self.INVOICE_NUMBER_PATTERNS:
                match = pattern.search(line)
                if match:
                    return match.group(1)

        match = self.FILENAME_NUMBER.search(filename or "")
        if match:
            logger.debug(f"Invoice number taken from filename: {filename}")
            return match.group(1)

        raise InvoiceNumberNotFoundError(filename)

    def extract_invoice_date(self, lines: List[str], items: List[ParsedLineItem]) -> date:
        """
        Find the invoice date, trying candidates from most to least specific.

        Every candidate must lie in the plausibility window; the reference
        date is the last resort.
        """
        dates = self.rules.dates

        for index, line in enumerate(lines):
            if "factuurdatum" not in line.lower():
                continue
            for candidate in lines[index:index + 3]:
                found = dates.find_all(candidate)
                if found:
                    return found[0]

        for line in lines[:self.HEADER_LINES]:
            found = dates.find_all(line)
            if found:
                return found[0]

        for line in lines[:self.HEADER_LINES]:
            found = dates.parse_text(line)
            if found is not None:
                return found

        if items:
            return min(item.date for item in items)

        logger.warning(
            f"No invoice date found, using reference date {dates.reference_date.isoformat()}"
        )
        return dates.reference_date

    def extract_client(self, lines: List[str]) -> Tuple[str, str, str, str, str]:
        """
        Read the client block.

        Returns:
            Tuple of (name, contact person, address, postcode line, location).
        """
        block = []
        in_block = False
        for line in lines:
            if "Factuur aan" in line:
                in_block = True
                continue
            if in_block:
                if not line or "Datum" in line or "Omschrijving" in line:
                    break
                block.append(line)

        if not block:
            block = self._client_block_by_keyword(lines)

        name = block[0] if block else ""
        contact = address = postcode = ""
        if len(block) > 1:
            second = block[1]
            if self._is_contact_person(second):
                contact = re.sub(r'^T\.a\.v\.\s*', '', second, flags=re.IGNORECASE)
                address = block[2] if len(block) > 2 else ""
                postcode = block[3] if len(block) > 3 else ""
            else:
                address = second
                postcode = block[2] if len(block) > 2 else ""

        parts = postcode.split()
        location = " ".join(parts[2:]) if len(parts) >= 3 else ""
        return name, contact, address, postcode, location

    def _client_block_by_keyword(self, lines: List[str]) -> List[str]:
        for index, line in enumerate(lines):
            if contains_any(line, self.client_header_keywords):
                block = [line]
                for following in lines[index + 1:index + 4]:
                    if following and not contains_any(following, self.client_exclude_markers):
                        block.append(following)
                return block
        return []

    def _is_contact_person(self, line: str) -> bool:
        if self.INITIALS.search(line):
            return True
        return len(line.split()) <= 3 and not any(char.isdigit() for char in line)

    def extract_total(self, lines: List[str], items: List[ParsedLineItem]) -> Decimal:
        """
        Amount due: "te betalen bedrag", then a grand-total line, then the
        sum of the hours rows.
        """
        for index, line in enumerate(lines):
            if "te betalen bedrag" not in line.lower():
                continue
            amount = self.amounts.extract_first(line)
            if amount is not None:
                return amount
            for following in lines[index + 1:index + 4]:
                amount = self.amounts.extract_first(following)
                if amount is not None:
                    return amount
                if ":" in following and "€" not in following:
                    break

        for line in lines:
            if ("TOTAAL" in line or "Totaal" in line) and "€" in line:
                lowered = line.lower()
                if "uren" in lowered or "km" in lowered or "kilometer" in lowered:
                    continue
                amount = self.amounts.extract_first(line)
                if amount is not None:
                    return amount

        return sum((item.total for item in items if item.is_hours_entry), Decimal("0"))
