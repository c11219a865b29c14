"""
Normalization Module for the Invoice Ingestion Engine.

This module provides:
    - Date parsing with a plausibility window (Dutch conventions)
    - Decimal/currency parsing in Dutch notation
    - Configurable plausibility bounds for hours, distances and rates
"""

from .normalizers import DateNormalizer, AmountNormalizer, parse_decimal, DUTCH_MONTHS
from .validators import PlausibilityBounds, complete_amounts

__all__ = [
    'DateNormalizer',
    'AmountNormalizer',
    'parse_decimal',
    'DUTCH_MONTHS',
    'PlausibilityBounds',
    'complete_amounts',
]
