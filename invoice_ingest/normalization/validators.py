"""
Plausibility Validators Module.

Numeric guards applied to parsed line items. The bounds on daily hours
and commute distance filter extraction noise; they are configurable
thresholds rather than business rules and reject some legitimate short
trips.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from config import get_config
from invoice_ingest.utils.logger import get_logger
from .normalizers import AmountNormalizer

logger = get_logger(__name__)


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class PlausibilityBounds:
    """
    Numeric ranges used to classify and accept parsed values.

    Attributes:
        max_daily_hours: Upper bound of hours on a single row
        min_distance_km: Lower bound of a round-trip commute
        max_distance_km: Upper bound of a round-trip commute
        hourly_rate_min: Lowest amount recognised as an hourly day rate
        hourly_rate_max: Highest amount recognised as an hourly day rate
        max_km_rate: Per-km rates are strictly below this value
        travel_amount_min: Lower bound of a travel-cost amount column
        travel_amount_max: Upper bound of a travel-cost amount column
        rounding_tolerance: Allowed |quantity x rate - total| difference
    """
    max_daily_hours: Decimal = Decimal("24")
    min_distance_km: Decimal = Decimal("10")
    max_distance_km: Decimal = Decimal("500")
    hourly_rate_min: Decimal = Decimal("50")
    hourly_rate_max: Decimal = Decimal("150")
    max_km_rate: Decimal = Decimal("1")
    travel_amount_min: Decimal = Decimal("5")
    travel_amount_max: Decimal = Decimal("50")
    rounding_tolerance: Decimal = Decimal("0.05")

    @classmethod
    def from_config(cls) -> 'PlausibilityBounds':
        """Build bounds from parsing.bounds.* in settings.yaml."""
        defaults = cls()
        values = {}
        for name in cls.__dataclass_fields__:
            configured = get_config(f"parsing.bounds.{name}")
            values[name] = _decimal(configured) if configured is not None else getattr(defaults, name)
        return cls(**values)

    def is_plausible_hours(self, hours: Decimal) -> bool:
        return Decimal("0") < hours <= self.max_daily_hours

    def is_plausible_distance(self, km: Decimal) -> bool:
        return self.min_distance_km <= km <= self.max_distance_km

    def is_hourly_rate(self, value: Decimal) -> bool:
        return self.hourly_rate_min <= value <= self.hourly_rate_max

    def is_km_rate(self, value: Decimal) -> bool:
        return Decimal("0") < value < self.max_km_rate

    def is_travel_amount(self, value: Decimal) -> bool:
        return self.travel_amount_min < value < self.travel_amount_max

    def amounts_consistent(self, quantity: Decimal, rate: Decimal, total: Decimal) -> bool:
        """Check total == quantity x rate within the rounding tolerance."""
        return abs(quantity * rate - total) <= self.rounding_tolerance


def complete_amounts(
    quantity: Decimal,
    rate: Optional[Decimal],
    total: Optional[Decimal]
) -> Tuple[Optional[Decimal], Optional[Decimal]]:
    """
    Derive the missing one of rate and total from the other two values.

    Args:
        quantity: Hours or kilometres on the row.
        rate: Rate per unit, if known.
        total: Row total, if known.

    Returns:
        Tuple of (rate, total); either stays None when it cannot be derived.

    Example:
        >>> complete_amounts(Decimal("9"), None, Decimal("697.50"))
        (Decimal('77.50'), Decimal('697.50'))
    """
    if rate is None and total is not None and quantity != 0:
        rate = AmountNormalizer.to_cents(total / quantity)
    elif total is None and rate is not None:
        total = AmountNormalizer.to_cents(quantity * rate)
    return rate, total
