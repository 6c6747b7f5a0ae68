"""Tail attribution of a day's hours into regular and overtime.

Business rules:
- Intervals are walked in start order; the capacity is used up first come,
  first served, so overtime always lands on the tail of the day.
- Only WORK intervals consume capacity. Breaks and PTO come out fully
  regular and leave the accumulator alone.
- Non-positive durations contribute zero hours.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from overtime_tool.models import ZERO, EntryClass, TimeInterval, round_hours


@dataclass(frozen=True)
class HoursSplit:
    hours: Decimal
    regular: Decimal
    overtime: Decimal


def sort_by_start(intervals: Sequence[TimeInterval]) -> list[TimeInterval]:
    """Stable sort on the raw start string; missing starts sort first."""
    return sorted(intervals, key=lambda i: i.start or "")


def split_hours(hours: Decimal, accumulator: Decimal, capacity: Decimal) -> tuple[Decimal, Decimal]:
    """Return (regular, overtime) for one WORK interval."""
    if accumulator >= capacity:
        return ZERO, hours
    if accumulator + hours <= capacity:
        return hours, ZERO
    regular = round_hours(capacity - accumulator)
    return regular, hours - regular


def apply_tail_attribution(
    items: Sequence[tuple[EntryClass, Decimal]],
    capacity: Decimal,
) -> list[HoursSplit]:
    """Split a day's already-sorted (class, duration) pairs against capacity."""
    accumulator = ZERO
    result = []
    for entry_class, duration in items:
        hours = round_hours(max(duration, ZERO))
        if entry_class is not EntryClass.WORK:
            result.append(HoursSplit(hours=hours, regular=hours, overtime=ZERO))
            continue
        regular, overtime = split_hours(hours, accumulator, capacity)
        accumulator += hours
        result.append(HoursSplit(hours=hours, regular=regular, overtime=overtime))
    return result
