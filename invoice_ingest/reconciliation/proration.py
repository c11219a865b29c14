"""
Verdeelfactor lookup for split-payment invoices.

A jointly commissioned duty is billed to several parties; the breakdown
table lists each party with its share as a "0,xx" token.
"""

import re
from decimal import Decimal
from typing import Iterable, Optional, Sequence

SPLIT_FACTOR = re.compile(r'\b0[,.](\d{1,2})\b')


def clean_client_name(name: str, strip_prefixes: Iterable[str] = ()) -> str:
    """
    Lowercase a client name and remove practice-type prefixes.

    Example:
        >>> clean_client_name("Huisartsenpraktijk Raupp", ["huisartsenpraktijk"])
        'raupp'
    """
    cleaned = (name or "").lower()
    for prefix in strip_prefixes:
        cleaned = cleaned.replace(prefix.lower(), "")
    return " ".join(cleaned.split())


def _row_factor(line: str) -> Optional[Decimal]:
    for match in SPLIT_FACTOR.finditer(line):
        if line[:match.start()].rstrip().endswith('€'):
            continue
        return Decimal(f"0.{match.group(1)}")
    return None


def locate_split_factor(
    lines: Sequence[str],
    client_name: str,
    strip_prefixes: Iterable[str] = ()
) -> Optional[Decimal]:
    """
    Find the client's share on the breakdown table.

    Rows containing the full cleaned client name are searched first. Only
    when none of them carries a share does the first word of the name (at
    least three letters) identify the row, and then only if exactly one
    breakdown row contains it. The first "0,xx" token on the row that is
    not a euro amount is the share.

    Args:
        lines: Document lines.
        client_name: Name of the billed client.
        strip_prefixes: Practice-type prefixes to ignore in the name.

    Returns:
        Share in [0, 1), or None when no row matches.

    Example:
        >>> locate_split_factor(["Praktijk Raupp   0,23   € 160,43"], "Raupp")
        Decimal('0.23')
    """
    cleaned = clean_client_name(client_name, strip_prefixes)
    if not cleaned:
        return None

    for line in lines:
        if cleaned in line.lower():
            factor = _row_factor(line)
            if factor is not None:
                return factor

    first_word = cleaned.split()[0]
    if len(first_word) < 3 or first_word == cleaned:
        return None

    candidates = [
        factor for factor in (_row_factor(line) for line in lines if first_word in line.lower())
        if factor is not None
    ]
    # Ambiguous when the first word is shared by several parties
    if len(candidates) != 1:
        return None
    return candidates[0]
