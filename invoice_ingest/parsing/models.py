"""
Parsing Data Model.

Transient structures produced by a single ingestion pass: the layout
variant, parsed line items and invoice, and the immutable state threaded
through the line-by-line fold.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from config import get_config
from invoice_ingest.normalization import DateNormalizer, PlausibilityBounds


class FormatVariant(Enum):
    """Known invoice layout grammars."""

    VERTICAL_QUANTITY = "vertical_quantity"
    SLASH_DATE_COMBINED = "slash_date_combined"
    KM_COLUMN = "km_column"
    DASH_DATE_COMBINED = "dash_date_combined"
    SEPARATE_ROWS = "separate_rows"
    DUTY_TABLE = "duty_table"


@dataclass(frozen=True)
class ParsedLineItem:
    """
    One billable row recovered from the text layer.

    Hours rows carry hours in quantity; travel rows carry the round-trip
    distance in km. Combined rows may also carry the travel columns of the
    same day in travel_distance and travel_amount.
    """
    date: date
    description: str
    quantity: Decimal
    rate: Decimal
    total: Decimal
    is_hours_entry: bool = True
    is_standby: bool = False
    duty_code: Optional[str] = None
    travel_distance: Optional[Decimal] = None
    travel_amount: Optional[Decimal] = None

    @property
    def is_travel(self) -> bool:
        return not self.is_hours_entry


@dataclass
class ParsedInvoice:
    """
    Header fields and line items of one invoice document.

    Attributes:
        invoice_number: Invoice identifier, e.g. "2025-001" or "22470-25-16"
        invoice_date: Date the invoice was issued
        client_name: First line of the client block
        client_contact: Contact person, without "T.a.v."
        client_address: Street address
        client_postcode: Postcode line, e.g. "9541 BK Vlagtwedde"
        client_location: City taken from the postcode line
        line_items: Parsed rows in document order
        total_amount: Amount due
        split_factor: Share of a jointly billed duty, when located
        is_split: Whether the text signals a split payment
        format_variant: Layout grammar used to parse the rows
        raw_lines: Stripped text lines, kept for split-factor lookups
        source_file: Name of the source document
    """
    invoice_number: str
    invoice_date: date
    client_name: str = ""
    client_contact: str = ""
    client_address: str = ""
    client_postcode: str = ""
    client_location: str = ""
    line_items: List[ParsedLineItem] = field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    split_factor: Optional[Decimal] = None
    is_split: bool = False
    format_variant: Optional[FormatVariant] = None
    raw_lines: List[str] = field(default_factory=list, repr=False)
    source_file: Optional[str] = None

    @property
    def hours_items(self) -> List[ParsedLineItem]:
        return [item for item in self.line_items if item.is_hours_entry]

    @property
    def travel_items(self) -> List[ParsedLineItem]:
        return [item for item in self.line_items if item.is_travel]


def _keywords(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    return tuple(get_config(f"parsing.{key}", list(default)))


@dataclass(frozen=True)
class ParsingKeywords:
    """Lexical markers that classify documents and rows."""
    hours: Tuple[str, ...] = ("Waarneming", "dagpraktijk")
    separate_row_hours: Tuple[str, ...] = ("Waarneming", "dagpraktijk uren", "HOED")
    travel: Tuple[str, ...] = ("Reiskosten", "Kilometer", "km retour")
    separate_row_travel: Tuple[str, ...] = ("Kilometer", "Reiskosten", "km")
    duty_markers: Tuple[str, ...] = ("UREN SPECIFICATIE", "Dienst ID")
    on_call_clients: Tuple[str, ...] = ("Dokter Drenthe", "Doktersdienst Groningen", "Doktersdienst Noord")
    km_column: Tuple[str, ...] = ("Afstand", "woon-werk")
    separate_rows: Tuple[str, ...] = ("Kilometers woon-werk", "dagpraktijk uren")
    table_header: Tuple[str, ...] = ("Datum", "Omschrijving", "Aantal", "Tarief", "Bedrag")
    table_end: Tuple[str, ...] = ("Totaal", "TOTAAL UREN", "Totaalbedrag", "Betaalinformatie", "Gelieve deze factuur")
    split_payment: Tuple[str, ...] = ("deelbetaling", "verdeelfactor", "naar rato", "pro rata")
    standby_code_prefixes: Tuple[str, ...] = ("AW",)
    shift_names: Tuple[str, ...] = ("Avond", "Nacht", "Weekend", "Feestdag")
    duty_skip_markers: Tuple[str, ...] = ("Dienst ID", "Tarief Naam", "TOTAAL", "SPECIFICATIE", "Vrijgesteld van")

    @classmethod
    def from_config(cls) -> 'ParsingKeywords':
        defaults = cls()
        return cls(
            hours=_keywords("keywords.hours", defaults.hours),
            separate_row_hours=_keywords("keywords.separate_row_hours", defaults.separate_row_hours),
            travel=_keywords("keywords.travel", defaults.travel),
            separate_row_travel=_keywords("keywords.separate_row_travel", defaults.separate_row_travel),
            duty_markers=_keywords("keywords.duty_markers", defaults.duty_markers),
            on_call_clients=_keywords("keywords.on_call_clients", defaults.on_call_clients),
            km_column=_keywords("keywords.km_column", defaults.km_column),
            separate_rows=_keywords("keywords.separate_rows", defaults.separate_rows),
            table_header=_keywords("keywords.table_header", defaults.table_header),
            table_end=_keywords("keywords.table_end", defaults.table_end),
            split_payment=_keywords("keywords.split_payment", defaults.split_payment),
            standby_code_prefixes=_keywords("duty.standby_code_prefixes", defaults.standby_code_prefixes),
            shift_names=_keywords("duty.shift_names", defaults.shift_names),
            duty_skip_markers=_keywords("duty.skip_markers", defaults.duty_skip_markers),
        )


@dataclass(frozen=True)
class ParsingRules:
    """
    Immutable configuration shared by every fold step of one document.

    Attributes:
        bounds: Plausibility ranges for hours, distances and rates
        keywords: Lexical markers
        dates: Date normalizer carrying the plausibility window
        default_hourly_rate: Rate used when a row shows no plausible rate
        default_km_rate: Per-km rate used when a travel row shows none
        standby_rate_threshold: Duty rows below this rate are standby
    """
    bounds: PlausibilityBounds
    keywords: ParsingKeywords
    dates: DateNormalizer
    default_hourly_rate: Decimal = Decimal("77.50")
    default_km_rate: Decimal = Decimal("0.23")
    standby_rate_threshold: Decimal = Decimal("50")

    @classmethod
    def from_config(cls, reference_date: Optional[date] = None) -> 'ParsingRules':
        return cls(
            bounds=PlausibilityBounds.from_config(),
            keywords=ParsingKeywords.from_config(),
            dates=DateNormalizer(reference_date=reference_date),
            default_hourly_rate=Decimal(str(get_config("parsing.defaults.hourly_rate", "77.50"))),
            default_km_rate=Decimal(str(get_config("parsing.defaults.km_rate", "0.23"))),
            standby_rate_threshold=Decimal(str(get_config("parsing.duty.standby_rate_threshold", 50))),
        )


@dataclass(frozen=True)
class LineState:
    """
    Accumulator threaded through the line-by-line fold.

    Attributes:
        rules: Parsing configuration
        current_date: Last date seen on a row, inherited by continuation rows
        last_hours_item: Most recent hours row, dates detached travel rows
        duty_code: Duty code of the last duty row, inherited by continuation rows
        pending_item: Vertical-layout row still waiting for its date line
        pending_age: Lines seen since pending_item was parsed
        in_table: Whether the fold is inside a line-item table
    """
    rules: ParsingRules
    current_date: Optional[date] = None
    last_hours_item: Optional[ParsedLineItem] = None
    duty_code: Optional[str] = None
    pending_item: Optional[ParsedLineItem] = None
    pending_age: int = 0
    in_table: bool = False
