"""
Token helpers shared by the line parsers.

Every helper is a pure function of its input line.
"""

import re
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from invoice_ingest.normalization import AmountNormalizer, parse_decimal, complete_amounts

_amounts = AmountNormalizer()

LEADING_SLASH_DATE = re.compile(r'^\s*(\d{1,2}/\d{1,2}/\d{4})\s*')
LEADING_DASH_DATE = re.compile(r'^\s*(\d{1,2}-\d{1,2}-\d{2,4})\s*')
LEADING_ANY_DATE = re.compile(r'^\s*(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})\s*')

# "9x Waarneming ..." in the vertical layout
LEADING_MULTIPLIER = re.compile(r'^(\d+(?:[.,]\d+)?)x?\s+')

# Last number before the first €, optionally followed by a "km" unit
TRAILING_QUANTITY = re.compile(r'(\d+(?:[.,]\d+)?)\s*(?:km)?\s*$', re.IGNORECASE)

BARE_NUMBER = re.compile(r'(?<![\d.,])\d+(?:[.,]\d+)?(?![\d.,]*\d)')


def contains_any(line: str, keywords: Iterable[str], ignore_case: bool = False) -> bool:
    if ignore_case:
        lowered = line.lower()
        return any(keyword.lower() in lowered for keyword in keywords)
    return any(keyword in line for keyword in keywords)


def split_leading_date(line: str, pattern: re.Pattern = LEADING_ANY_DATE) -> Tuple[Optional[str], str]:
    """
    Split a leading date token off a row.

    Returns:
        Tuple of (date token or None, rest of the line).
    """
    match = pattern.match(line)
    if not match:
        return None, line
    return match.group(1), line[match.end():]


def currency_values(line: str) -> List[Decimal]:
    return _amounts.extract_currency_values(line)


def quantity_before_currency(text: str) -> Optional[Decimal]:
    """
    Return the bare number directly before the first € token.

    Example:
        >>> quantity_before_currency("Waarneming dagpraktijk 8,5 € 77,50")
        Decimal('8.5')
        >>> quantity_before_currency("Reiskosten 54 km € 0,23 € 12,42")
        Decimal('54')
    """
    if '€' not in text:
        return None
    match = TRAILING_QUANTITY.search(text[:text.index('€')])
    return parse_decimal(match.group(1)) if match else None


def numbers_before_currency(text: str) -> List[Decimal]:
    """All bare numbers in front of the first € token."""
    head = text.split('€', 1)[0]
    return [value for value in (parse_decimal(m) for m in BARE_NUMBER.findall(head)) if value is not None]


def numbers_between_currency(text: str) -> List[Decimal]:
    """
    Bare numbers that sit between or after € amounts.

    Example:
        >>> numbers_between_currency("9 € 77,50 54 € 12,42 € 709,92")
        [Decimal('54')]
    """
    segments = AmountNormalizer.CURRENCY_PATTERN.sub('\x00', text).split('\x00')
    values = []
    for segment in segments[1:]:
        for token in BARE_NUMBER.findall(segment):
            value = parse_decimal(token)
            if value is not None:
                values.append(value)
    return values


def assign_amounts(
    quantity: Decimal,
    values: Sequence[Decimal],
    is_rate,
    default_rate: Decimal
) -> Tuple[Decimal, Decimal, Optional[int]]:
    """
    Split the currency tokens of a row into rate and total.

    The first token accepted by is_rate is the rate; with two or more
    tokens the last one is the total. Only a lone token that is not a
    rate derives the rate from quantity; a multi-token row without a
    plausible rate gets default_rate, since its total may include
    travel columns.

    Returns:
        Tuple of (rate, total, index of the rate token or None).
    """
    rate_index = next((i for i, value in enumerate(values) if is_rate(value)), None)
    rate = values[rate_index] if rate_index is not None else None

    total = None
    if len(values) >= 2:
        total = values[-1]
        if rate is None:
            rate = default_rate
    elif len(values) == 1 and rate is None:
        total = values[0]

    rate, total = complete_amounts(quantity, rate, total)
    if rate is None:
        rate = default_rate
        rate, total = complete_amounts(quantity, rate, total)
    return rate, total, rate_index


def middle_values(values: Sequence[Decimal], rate_index: Optional[int]) -> List[Decimal]:
    """Currency tokens that are neither the rate nor the trailing total."""
    if len(values) < 3:
        return []
    return [value for i, value in enumerate(values[:-1]) if i != rate_index]
