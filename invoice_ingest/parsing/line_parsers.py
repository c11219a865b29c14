"""
Line Parsers Module.

One heuristic grammar per FormatVariant. Every parser has the contract

    (line, state) -> (ParsedLineItem or None, new state)

and never mutates state; LINE_PARSERS maps each variant to its parser
and parse_line_items() folds a document's lines through it.

A row that does not yield both a date and a plausible quantity is noise
and is dropped. Dropped rows are logged at DEBUG only.
"""

import re
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from invoice_ingest.normalization import AmountNormalizer, parse_decimal
from invoice_ingest.utils.logger import get_logger
from .models import FormatVariant, LineState, ParsedLineItem, ParsingKeywords, ParsingRules
from .tokens import (
    LEADING_ANY_DATE,
    LEADING_DASH_DATE,
    LEADING_MULTIPLIER,
    LEADING_SLASH_DATE,
    assign_amounts,
    contains_any,
    currency_values,
    middle_values,
    numbers_before_currency,
    numbers_between_currency,
    quantity_before_currency,
    split_leading_date,
)

logger = get_logger(__name__)

HOURS_DESCRIPTION = "Waarneming dagpraktijk"
TRAVEL_DESCRIPTION = "Reiskosten"
DUTY_DESCRIPTION = "ANW dienst"
STANDBY_DESCRIPTION = "Achterwacht"

# Rows whose date arrives on a following "Datum:" line wait at most this long
PENDING_WINDOW = 2

DUTY_ID = re.compile(r'^\d{6}$')
DUTY_DATE = re.compile(r'^\d{2}-\d{2}-\d{4}$')
PLAIN_NUMBER = re.compile(r'^\d+(?:[.,]\d+)?$')

LineResult = Tuple[Optional[ParsedLineItem], LineState]
LineParser = Callable[[str, LineState], LineResult]


def _row_date(token: Optional[str], state: LineState) -> Optional[date]:
    """Date of the row itself, else the date carried over from earlier rows."""
    if token:
        parsed = state.rules.dates.parse_numeric(token)
        if parsed is not None:
            return parsed
    return state.current_date


def _is_hours_row(line: str, hours_keywords: Iterable[str], rules: ParsingRules) -> bool:
    return (contains_any(line, hours_keywords, ignore_case=True)
            and not contains_any(line, rules.keywords.travel, ignore_case=True))


def _check_amounts(item: ParsedLineItem, rules: ParsingRules, text: str, travel: Optional[Decimal] = None) -> None:
    """Warn when a row total is neither quantity x rate nor that plus its travel column."""
    bounds = rules.bounds
    if bounds.amounts_consistent(item.quantity, item.rate, item.total):
        return
    if travel is not None and bounds.amounts_consistent(item.quantity, item.rate, item.total - travel):
        return
    logger.warning(
        f"Row total € {item.total} does not match {item.quantity} x € {item.rate} "
        f"({item.description}): '{text.strip()}'"
    )


def _hours_row(
    rest: str,
    row_date: date,
    rules: ParsingRules,
    quantity: Optional[Decimal] = None
) -> Optional[ParsedLineItem]:
    """Build an hours item from the part of a row after its date."""
    if quantity is None:
        quantity = quantity_before_currency(rest)
    if quantity is None or not rules.bounds.is_plausible_hours(quantity):
        return None

    values = currency_values(rest)
    rate, total, rate_index = assign_amounts(
        quantity, values, rules.bounds.is_hourly_rate, rules.default_hourly_rate
    )
    travel_amount = next(
        (value for value in middle_values(values, rate_index) if rules.bounds.is_travel_amount(value)),
        None
    )
    item = ParsedLineItem(
        date=row_date,
        description=HOURS_DESCRIPTION,
        quantity=quantity,
        rate=rate,
        total=total,
        travel_amount=travel_amount,
    )
    _check_amounts(item, rules, rest, travel=travel_amount)
    return item


def _travel_row(rest: str, row_date: date, rules: ParsingRules) -> Optional[ParsedLineItem]:
    """Build a travel item whose quantity is the round-trip distance."""
    distance = quantity_before_currency(rest)
    if distance is None or not rules.bounds.is_plausible_distance(distance):
        return None

    rate, total, _ = assign_amounts(
        distance, currency_values(rest), rules.bounds.is_km_rate, rules.default_km_rate
    )
    item = ParsedLineItem(
        date=row_date,
        description=TRAVEL_DESCRIPTION,
        quantity=distance,
        rate=rate,
        total=total,
        is_hours_entry=False,
    )
    _check_amounts(item, rules, rest)
    return item


def _combined_row(line: str, state: LineState, pattern: re.Pattern) -> LineResult:
    """Hours and travel cost of one day on a single dated row."""
    rules = state.rules
    token, rest = split_leading_date(line, pattern)
    if not contains_any(line, rules.keywords.hours, ignore_case=True):
        return None, state

    row_date = _row_date(token, state)
    if row_date is None:
        return None, state

    item = _hours_row(rest, row_date, rules)
    if item is None:
        return None, state
    return item, replace(state, current_date=row_date, last_hours_item=item)


def _hours_or_travel_row(
    line: str,
    state: LineState,
    pattern: re.Pattern,
    hours_keywords: Iterable[str],
    travel_keywords: Iterable[str]
) -> LineResult:
    """Hours rows plus detached travel rows dated by the preceding hours row."""
    rules = state.rules
    token, rest = split_leading_date(line, pattern)

    if _is_hours_row(line, hours_keywords, rules):
        row_date = _row_date(token, state)
        item = _hours_row(rest, row_date, rules) if row_date else None
        if item is None:
            return None, state
        return item, replace(state, current_date=row_date, last_hours_item=item)

    if contains_any(line, travel_keywords, ignore_case=True):
        own_date = rules.dates.parse_numeric(token) if token else None
        if own_date is None and state.last_hours_item is not None:
            own_date = state.last_hours_item.date
        row_date = own_date or state.current_date
        item = _travel_row(rest, row_date, rules) if row_date else None
        return item, state

    return None, state


def parse_slash_date_combined(line: str, state: LineState) -> LineResult:
    """
    "13/01/2025  Waarneming dagpraktijk  8,5  € 77,50  € 12,42  € 658,75"
    """
    return _combined_row(line, state, LEADING_SLASH_DATE)


def parse_dash_date_combined(line: str, state: LineState) -> LineResult:
    """
    "07-01-2025  Waarneming dagpraktijk  9,00  € 77,50  € 24,84  € 722,34",
    optionally followed by a travel row such as "Reiskosten 108 km € 0,23 € 24,84".
    """
    return _hours_or_travel_row(
        line, state, LEADING_ANY_DATE, state.rules.keywords.hours, state.rules.keywords.travel
    )


def parse_separate_rows(line: str, state: LineState) -> LineResult:
    """
    Hours and kilometres on their own rows:
    "03-06-2025  Waarneming dagpraktijk uren  9  € 77,50  € 697,50"
    "Kilometers woon-werk  44  € 0,23  € 10,12"
    """
    keywords = state.rules.keywords
    return _hours_or_travel_row(
        line, state, LEADING_DASH_DATE, keywords.separate_row_hours, keywords.separate_row_travel
    )


def parse_km_column(line: str, state: LineState) -> LineResult:
    """
    Distance in its own column:
    "27-02-2025  Waarneming dagpraktijk  9  € 77,50  54  € 12,42  € 709,92"
    """
    rules = state.rules
    token, rest = split_leading_date(line, LEADING_DASH_DATE)
    if not contains_any(line, rules.keywords.hours, ignore_case=True):
        return None, state

    row_date = _row_date(token, state)
    if row_date is None:
        return None, state

    hours = next((value for value in numbers_before_currency(rest)
                  if rules.bounds.is_plausible_hours(value)), None)
    item = _hours_row(rest, row_date, rules, quantity=hours) if hours is not None else None
    if item is None:
        return None, state

    distance = next((value for value in numbers_between_currency(rest)
                     if rules.bounds.is_plausible_distance(value)), None)
    item = replace(item, travel_distance=distance)
    return item, replace(state, current_date=row_date, last_hours_item=item)


def _vertical_row(line: str, rules: ParsingRules) -> Optional[ParsedLineItem]:
    match = LEADING_MULTIPLIER.match(line)
    if not match:
        return None

    quantity = parse_decimal(match.group(1))
    rest = line[match.end():]
    # The real date is filled in when the "Datum:" line arrives
    placeholder = rules.dates.reference_date

    if contains_any(line, rules.keywords.hours, ignore_case=True):
        return _hours_row(rest, placeholder, rules, quantity=quantity)

    if contains_any(line, rules.keywords.travel, ignore_case=True):
        if quantity is None or not rules.bounds.is_plausible_distance(quantity):
            return None
        rate, total, _ = assign_amounts(
            quantity, currency_values(rest), rules.bounds.is_km_rate, rules.default_km_rate
        )
        item = ParsedLineItem(
            date=placeholder,
            description=TRAVEL_DESCRIPTION,
            quantity=quantity,
            rate=rate,
            total=total,
            is_hours_entry=False,
        )
        _check_amounts(item, rules, line)
        return item
    return None


def _drop_pending(state: LineState, reason: str) -> LineState:
    if state.pending_item is not None:
        logger.debug(f"Dropped {state.pending_item.description} row: {reason}")
    return replace(state, pending_item=None, pending_age=0)


def parse_vertical_quantity(line: str, state: LineState) -> LineResult:
    """
    "9x  Waarneming Dagpraktijk  € 77,50  € 697,50" followed within two
    lines by "Datum: 9 januari 2025".

    The row is held in state.pending_item until its date line arrives.
    """
    rules = state.rules

    if state.pending_item is not None:
        age = state.pending_age + 1
        if age > PENDING_WINDOW:
            state = _drop_pending(state, "no date line followed")
        else:
            state = replace(state, pending_age=age)

    if "Datum:" in line:
        row_date = rules.dates.parse(line)
        if row_date is not None:
            state = replace(state, current_date=row_date)
        pending = state.pending_item
        if pending is None:
            return None, state
        if row_date is None:
            return None, _drop_pending(state, f"unparseable date line '{line}'")

        item = replace(pending, date=row_date)
        state = replace(state, pending_item=None, pending_age=0)
        if item.is_hours_entry:
            state = replace(state, last_hours_item=item)
        return item, state

    item = _vertical_row(line, rules)
    if item is None:
        return None, state
    if state.pending_item is not None:
        state = _drop_pending(state, "next row started before its date line")
    return None, replace(state, pending_item=item, pending_age=0)


def parse_duty_table(line: str, state: LineState) -> LineResult:
    """
    Duty roster rows:
    "506042  AW-WK-H  13-12-2024  17:00  00:00  7.00  Avond  € 6,72  Vrijgesteld  € 47,04"

    A row that starts with a time token ("00:00 08:00 8.00 Nacht ...")
    continues the preceding duty and inherits its date and duty code.
    Rows with their own duty code are standby when the code carries a
    standby prefix; rows without one are standby below the rate threshold.
    """
    rules = state.rules
    keywords = rules.keywords
    if contains_any(line, keywords.duty_skip_markers):
        return None, state

    values = currency_values(line)
    parts = line.split()
    if not values or len(parts) < 4:
        return None, state

    first = parts[0]
    own_code = None
    continuation = False
    if DUTY_ID.match(first):
        own_code = parts[1]
    elif ':' in first or first == "00":
        continuation = True

    own_date = None
    if not continuation:
        token = next((part for part in parts if DUTY_DATE.match(part)), None)
        own_date = rules.dates.parse_numeric(token) if token else None

    hours = _duty_hours(parts, continuation, rules)
    if hours is None:
        return None, state

    if len(values) >= 2:
        rate, total = values[0], values[-1]
    else:
        total = values[0]
        rate = AmountNormalizer.to_cents(total / hours)

    row_date = own_date or state.current_date
    if row_date is None:
        return None, state

    duty_code = own_code if own_code is not None else (state.duty_code if continuation else None)
    if own_code is not None:
        is_standby = any(own_code.startswith(prefix) for prefix in keywords.standby_code_prefixes)
    else:
        is_standby = rate < rules.standby_rate_threshold

    shift = next((name for name in keywords.shift_names if name in line), "")
    base = STANDBY_DESCRIPTION if is_standby else DUTY_DESCRIPTION
    description = f"{base} {shift}" if shift else (duty_code or base)

    item = ParsedLineItem(
        date=row_date,
        description=description,
        quantity=hours,
        rate=rate,
        total=total,
        is_standby=is_standby,
        duty_code=duty_code,
    )
    _check_amounts(item, rules, line)
    return item, replace(
        state,
        current_date=row_date,
        last_hours_item=item,
        duty_code=own_code if own_code is not None else state.duty_code,
    )


def _duty_hours(parts: List[str], continuation: bool, rules: ParsingRules) -> Optional[Decimal]:
    """First bare number after the shift's time tokens."""
    seen_time = False
    for part in parts:
        if ':' in part:
            seen_time = True
            continue
        if '€' in part or '-' in part:
            continue
        if (seen_time or continuation) and PLAIN_NUMBER.match(part):
            value = parse_decimal(part)
            if value is not None and rules.bounds.is_plausible_hours(value):
                return value
    return None


LINE_PARSERS: Dict[FormatVariant, LineParser] = {
    FormatVariant.VERTICAL_QUANTITY: parse_vertical_quantity,
    FormatVariant.SLASH_DATE_COMBINED: parse_slash_date_combined,
    FormatVariant.KM_COLUMN: parse_km_column,
    FormatVariant.DASH_DATE_COMBINED: parse_dash_date_combined,
    FormatVariant.SEPARATE_ROWS: parse_separate_rows,
    FormatVariant.DUTY_TABLE: parse_duty_table,
}


def is_table_start(line: str, variant: FormatVariant, keywords: ParsingKeywords) -> bool:
    if variant is FormatVariant.DUTY_TABLE:
        return contains_any(line, keywords.duty_markers)
    return sum(1 for word in keywords.table_header if word in line) >= 2


def is_table_end(line: str, keywords: ParsingKeywords) -> bool:
    return any(line.startswith(marker) for marker in keywords.table_end)


def parse_line_items(
    lines: Iterable[str],
    variant: FormatVariant,
    state: LineState
) -> Tuple[List[ParsedLineItem], LineState]:
    """
    Fold a document's lines through the parser of its variant.

    Only lines inside a line-item table are offered to the parser. A table
    starts at its header line and ends at a totals or payment line; later
    tables (e.g. on a following page) are picked up again.

    Args:
        lines: Text lines in document order.
        variant: Layout grammar of the document.
        state: Initial fold state.

    Returns:
        Tuple of (line items in document order, final state).
    """
    parser = LINE_PARSERS[variant]
    keywords = state.rules.keywords
    items = []

    for raw_line in lines:
        line = raw_line.strip()

        if is_table_start(line, variant, keywords):
            state = replace(state, in_table=True)
            continue
        if not state.in_table:
            continue
        if is_table_end(line, keywords):
            state = replace(_drop_pending(state, "table ended"), in_table=False)
            continue
        if not line:
            continue

        item, state = parser(line, state)
        if item is not None:
            items.append(item)
        elif state.pending_item is None:
            logger.debug(f"Unrecognized line dropped: '{line}'")

    state = replace(_drop_pending(state, "end of document"), in_table=False)
    logger.debug(f"Parsed {len(items)} line items ({variant.value})")
    return items, state
