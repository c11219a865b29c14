"""
Reconciliation Engine Module.

Turns parsed line items into billable days:
    - pairs each hours row with the travel row of the same date
    - applies the split-payment share to the hours
    - tags standby hours (they stay in the raw totals)
    - derives activity codes, descriptions and notes

Author: Administration Tooling Team
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, ROUND_DOWN
from typing import Dict, List, Optional

from config import get_config
from invoice_ingest.normalization import AmountNormalizer, PlausibilityBounds
from invoice_ingest.parsing import ParsedInvoice, ParsedLineItem
from invoice_ingest.utils.logger import get_logger
from .proration import locate_split_factor

logger = get_logger(__name__)

HOURS_QUANTUM = Decimal("0.01")
ONE = Decimal("1")


@dataclass
class BillableDay:
    """
    One importable time entry.

    Attributes:
        date: Day worked
        description: Activity description, with the share when split
        hours: Hours after proration, rounded to 0.01
        raw_hours: Hours as printed on the invoice
        hourly_rate: Rate per hour
        amount: Row total as printed on the invoice
        return_distance: Round-trip commute in whole km (0 when unknown)
        km_rate: Rate per km
        is_standby: Standby (achterwacht) hours
        duty_code: Duty roster code, if any
        activity_code: "ANW_<code>" or "WDAGPRAKTIJK_<rate>"
        split_factor: Share applied to raw_hours
        notes: Remarks stored with the entry
    """
    date: date
    description: str
    hours: Decimal
    raw_hours: Decimal
    hourly_rate: Decimal
    amount: Decimal
    return_distance: int = 0
    km_rate: Decimal = Decimal("0.23")
    is_standby: bool = False
    duty_code: Optional[str] = None
    activity_code: str = ""
    split_factor: Decimal = ONE
    notes: Optional[str] = None


@dataclass
class Reconciliation:
    """Billable days of one invoice plus the split share that was applied."""
    days: List[BillableDay] = field(default_factory=list)
    split_factor: Decimal = ONE
    factor_located: bool = False
    unpaired_travel: int = 0

    @property
    def total_hours(self) -> Decimal:
        return sum((day.hours for day in self.days), Decimal("0"))

    @property
    def workable_hours(self) -> Decimal:
        """Hours excluding standby, for hour-threshold consumers downstream."""
        return sum((day.hours for day in self.days if not day.is_standby), Decimal("0"))

    @property
    def standby_hours(self) -> Decimal:
        return sum((day.hours for day in self.days if day.is_standby), Decimal("0"))


class ReconciliationEngine:
    """
    Merges hours and travel rows into billable days.

    Attributes:
        bounds: Plausibility bounds for derived distances
        default_km_rate: Per-km rate when no travel row provides one
        strip_prefixes: Client-name prefixes ignored when locating a share

    Example:
        >>> engine = ReconciliationEngine()
        >>> result = engine.reconcile(parsed_invoice, client_name="Raupp")
        >>> result.days[0].hours
        Decimal('2.07')
    """

    def __init__(
        self,
        bounds: Optional[PlausibilityBounds] = None,
        default_km_rate: Optional[Decimal] = None,
        strip_prefixes: Optional[List[str]] = None
    ) -> None:
        self.bounds = bounds or PlausibilityBounds.from_config()
        self.default_km_rate = default_km_rate or Decimal(
            str(get_config("parsing.defaults.km_rate", "0.23"))
        )
        self.strip_prefixes = strip_prefixes if strip_prefixes is not None else get_config(
            "clients.strip_prefixes", []
        )

    def resolve_split_factor(self, parsed: ParsedInvoice, client_name: Optional[str] = None) -> Optional[Decimal]:
        """
        Share of a split invoice attributed to the client, or None.

        A factor already on the parsed invoice wins; otherwise the
        breakdown rows are scanned for the resolved client name, then for
        the name as printed on the invoice.
        """
        if not parsed.is_split:
            return None
        if parsed.split_factor is not None:
            return parsed.split_factor

        for name in (client_name, parsed.client_name):
            if not name:
                continue
            factor = locate_split_factor(parsed.raw_lines, name, self.strip_prefixes)
            if factor is not None:
                return factor
        return None

    def reconcile(self, parsed: ParsedInvoice, client_name: Optional[str] = None) -> Reconciliation:
        """
        Reconcile the line items of one invoice.

        Args:
            parsed: Parsed invoice.
            client_name: Name of the resolved client; defaults to the
                parsed client name.

        Returns:
            Reconciliation with one BillableDay per hours row.
        """
        located = self.resolve_split_factor(parsed, client_name)
        factor = located if located is not None else ONE
        if parsed.is_split and located is None:
            logger.warning(
                f"Split payment on {parsed.invoice_number} but no share found for "
                f"'{client_name or parsed.client_name}'; hours are not prorated"
            )

        travel_by_date: Dict[date, List[ParsedLineItem]] = {}
        for item in parsed.travel_items:
            travel_by_date.setdefault(item.date, []).append(item)

        days = []
        for item in parsed.hours_items:
            paired = travel_by_date.get(item.date)
            travel = paired.pop(0) if paired else None
            days.append(self._billable_day(item, travel, factor, located is not None))

        unpaired = sum(len(rows) for rows in travel_by_date.values())
        for rows in travel_by_date.values():
            for row in rows:
                logger.info(f"Travel row on {row.date.isoformat()} has no hours row; dropped")

        return Reconciliation(
            days=days,
            split_factor=factor,
            factor_located=located is not None,
            unpaired_travel=unpaired,
        )

    def _billable_day(
        self,
        item: ParsedLineItem,
        travel: Optional[ParsedLineItem],
        factor: Decimal,
        is_split: bool
    ) -> BillableDay:
        km_rate = travel.rate if travel is not None else self.default_km_rate
        distance = self._distance(item, travel, km_rate)

        description = item.description
        notes = None
        if is_split:
            percentage = int((factor * 100).to_integral_value(rounding=ROUND_DOWN))
            description = f"{item.description} ({percentage}% aandeel)"
            notes = f"Gedeelde dienst - verdeelfactor {factor}"

        return BillableDay(
            date=item.date,
            description=description,
            hours=(item.quantity * factor).quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP),
            raw_hours=item.quantity,
            hourly_rate=item.rate,
            amount=item.total,
            return_distance=distance,
            km_rate=km_rate,
            is_standby=item.is_standby,
            duty_code=item.duty_code,
            activity_code=self.activity_code(item),
            split_factor=factor,
            notes=notes,
        )

    def _distance(self, item: ParsedLineItem, travel: Optional[ParsedLineItem], km_rate: Decimal) -> int:
        """Round-trip distance from a travel row, a km column or a travel amount."""
        if travel is not None:
            distance = travel.quantity
        elif item.travel_distance is not None:
            distance = item.travel_distance
        elif item.travel_amount is not None and km_rate > 0:
            distance = item.travel_amount / km_rate
        else:
            return 0

        distance = distance.to_integral_value(rounding=ROUND_HALF_UP)
        if not self.bounds.is_plausible_distance(distance):
            logger.warning(f"Implausible distance {distance} km on {item.date.isoformat()}; ignored")
            return 0
        return int(distance)

    @staticmethod
    def activity_code(item: ParsedLineItem) -> str:
        if item.duty_code:
            return f"ANW_{item.duty_code}"
        return f"WDAGPRAKTIJK_{AmountNormalizer.format_dutch(item.rate)}"
