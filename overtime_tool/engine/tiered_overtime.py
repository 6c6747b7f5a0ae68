"""Cumulative tier-1 / tier-2 overtime allocation.

The allocator is folded over a worker's dates in chronological order and
carries the overtime seen so far. Overtime beyond the worker's tier-2
threshold is tier-2.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from overtime_tool.models import ZERO, round_hours


@dataclass(frozen=True)
class TierSplit:
    tier1_hours: Decimal
    tier2_hours: Decimal


@dataclass
class TierAllocator:
    enabled: bool = False
    accumulated: Decimal = ZERO

    def allocate(
        self,
        overtime: Decimal,
        threshold: Decimal,
        multiplier: Decimal,
        tier2_multiplier: Decimal,
    ) -> TierSplit:
        """Split one interval's overtime and advance the accumulator."""
        before = self.accumulated
        after = before + overtime
        self.accumulated = after

        if overtime <= 0 or not self.enabled or tier2_multiplier <= multiplier:
            return TierSplit(tier1_hours=overtime, tier2_hours=ZERO)
        if before >= threshold:
            return TierSplit(tier1_hours=ZERO, tier2_hours=overtime)
        if after <= threshold:
            return TierSplit(tier1_hours=overtime, tier2_hours=ZERO)

        tier1 = min(round_hours(threshold - before), overtime)
        return TierSplit(tier1_hours=tier1, tier2_hours=overtime - tier1)
