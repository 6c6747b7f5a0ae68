"""Rate normalisation.

Every rate field is resolved to an hourly rate in major currency units
(dollars, not cents) before any hours are priced.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from overtime_tool.models import (
    ZERO,
    AmountEntry,
    AmountRecord,
    DerivedFromAmounts,
    FlatRate,
    RateSource,
    TimeInterval,
)

EARNED = "EARNED"
COST = "COST"

_MINOR_PER_MAJOR = Decimal("100")
_RATE_QUANTUM = Decimal("0.0001")


@dataclass(frozen=True)
class RateQuote:
    """Resolved hourly rates for one interval."""
    earned: Decimal = ZERO
    cost: Decimal = ZERO

    @property
    def profit(self) -> Decimal:
        return self.earned - self.cost


def _finite(value: Decimal | None) -> bool:
    return value is not None and value.is_finite()


def sum_amounts(amounts: tuple[AmountEntry, ...], amount_type: str) -> Decimal:
    """Sum of the finite entries whose type matches exactly (case-sensitive)."""
    total = ZERO
    for entry in amounts:
        if entry is None or entry.type != amount_type or not _finite(entry.value):
            continue
        total += entry.value
    return total


def normalize_rate(source: RateSource | None, duration_hours: Decimal) -> Decimal:
    """Hourly rate in major units for any rate variant; 0 when unusable."""
    if isinstance(source, (AmountRecord, FlatRate)):
        if not _finite(source.minor):
            return ZERO
        return source.minor / _MINOR_PER_MAJOR

    if isinstance(source, DerivedFromAmounts):
        if duration_hours <= 0:
            return ZERO
        total = sum_amounts(source.amounts, source.amount_type)
        if not total.is_finite() or total == 0:
            return ZERO
        return (total / duration_hours).quantize(_RATE_QUANTUM, ROUND_HALF_UP)

    return ZERO


def _first_nonzero(*candidates: Decimal) -> Decimal:
    for value in candidates:
        if value:
            return value
    return ZERO


def resolve_rates(interval: TimeInterval, duration_hours: Decimal) -> RateQuote:
    """Earned: earned_rate, hourly_rate, EARNED amounts. Cost: cost_rate, COST amounts.

    Non-billable intervals never earn.
    """
    earned = ZERO
    if interval.billable:
        earned = _first_nonzero(
            normalize_rate(interval.earned_rate, duration_hours),
            normalize_rate(interval.hourly_rate, duration_hours),
            normalize_rate(DerivedFromAmounts(EARNED, interval.amounts), duration_hours),
        )
    cost = _first_nonzero(
        normalize_rate(interval.cost_rate, duration_hours),
        normalize_rate(DerivedFromAmounts(COST, interval.amounts), duration_hours),
    )
    return RateQuote(earned=earned, cost=cost)
