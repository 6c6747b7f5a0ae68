"""Layer 4: Amount calculation.

All money is Decimal and every component is rounded to cents on its own.
Tier-1 premium applies to every overtime hour; tier-2 hours additionally
earn (tier2_multiplier - multiplier) on top of that.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from overtime_tool.engine.rates import RateQuote
from overtime_tool.models import AmountBreakdown, round_money


@dataclass(frozen=True)
class FamilyAmounts:
    earned: AmountBreakdown
    cost: AmountBreakdown

    @property
    def profit(self) -> AmountBreakdown:
        return self.earned - self.cost


def price_hours(
    rate: Decimal,
    regular: Decimal,
    overtime: Decimal,
    tier2_hours: Decimal,
    multiplier: Decimal,
    tier2_multiplier: Decimal,
) -> AmountBreakdown:
    return AmountBreakdown(
        rate=rate,
        regular=round_money(regular * rate),
        overtime_base=round_money(overtime * rate),
        tier1_premium=round_money(overtime * rate * (multiplier - 1)),
        tier2_premium=round_money(tier2_hours * rate * (tier2_multiplier - multiplier)),
    )


def calculate_amounts(
    rates: RateQuote,
    regular: Decimal,
    overtime: Decimal,
    tier2_hours: Decimal,
    multiplier: Decimal,
    tier2_multiplier: Decimal,
) -> FamilyAmounts:
    """Price one interval for the earned and cost families."""
    return FamilyAmounts(
        earned=price_hours(rates.earned, regular, overtime, tier2_hours, multiplier, tier2_multiplier),
        cost=price_hours(rates.cost, regular, overtime, tier2_hours, multiplier, tier2_multiplier),
    )
