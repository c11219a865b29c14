"""
Parsing Module for the Invoice Ingestion Engine.

This module provides:
    - The transient data model (ParsedInvoice, ParsedLineItem, FormatVariant)
    - Layout classification
    - One line grammar per layout, folded over the document's lines
    - Header extraction (number, date, client, total, split signals)
"""

from .models import (
    FormatVariant,
    ParsedLineItem,
    ParsedInvoice,
    ParsingKeywords,
    ParsingRules,
    LineState,
)
from .format_classifier import FormatClassifier
from .line_parsers import LINE_PARSERS, parse_line_items
from .extractor import InvoiceTextParser

__all__ = [
    'FormatVariant',
    'ParsedLineItem',
    'ParsedInvoice',
    'ParsingKeywords',
    'ParsingRules',
    'LineState',
    'FormatClassifier',
    'LINE_PARSERS',
    'parse_line_items',
    'InvoiceTextParser',
]
