"""Layer 2: Canonical Data Model for the overtime analysis tool."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Union

ZERO = Decimal("0")
HOURS_QUANTUM = Decimal("0.0001")
MONEY_QUANTUM = Decimal("0.01")

WEEKDAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")


def round_hours(value: Decimal) -> Decimal:
    return value.quantize(HOURS_QUANTUM, ROUND_HALF_UP)


def round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, ROUND_HALF_UP)


class EntryClass(Enum):
    WORK = "work"
    BREAK = "break"
    HOLIDAY_PTO = "holiday_pto"
    TIMEOFF_PTO = "timeoff_pto"

    @property
    def is_pto(self) -> bool:
        return self in (EntryClass.HOLIDAY_PTO, EntryClass.TIMEOFF_PTO)


class AmountDisplay(Enum):
    EARNED = "earned"
    COST = "cost"
    PROFIT = "profit"

    @classmethod
    def parse(cls, value: object) -> "AmountDisplay":
        """Case-insensitive lookup; anything unrecognised means EARNED."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.EARNED


# --- Rate representations ---

@dataclass(frozen=True)
class FlatRate:
    """A bare number in minor currency units (cents)."""
    minor: Decimal


@dataclass(frozen=True)
class AmountRecord:
    """An ``{"amount": n}`` record, amount in minor units."""
    minor: Decimal


@dataclass(frozen=True)
class AmountEntry:
    """One tagged amount from an interval's amounts list, in major units."""
    type: Optional[str]
    value: Optional[Decimal]


@dataclass(frozen=True)
class DerivedFromAmounts:
    """Rate derived as sum(matching amounts) / duration hours."""
    amount_type: str
    amounts: tuple[AmountEntry, ...]


RateSource = Union[FlatRate, AmountRecord, DerivedFromAmounts]


# --- Inputs ---

@dataclass(frozen=True)
class TimeInterval:
    """A single recorded interval of time (canonical form)."""
    id: str
    worker_id: Optional[str]
    worker_name: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    duration: Optional[str] = None
    type_tag: Optional[str] = None
    billable: bool = True
    description: str = ""
    project_name: Optional[str] = None
    earned_rate: Optional[RateSource] = None
    hourly_rate: Optional[RateSource] = None
    cost_rate: Optional[RateSource] = None
    amounts: tuple[AmountEntry, ...] = ()


@dataclass(frozen=True)
class Worker:
    id: str
    name: str


@dataclass(frozen=True)
class WorkerProfile:
    """Per-worker capacity and working-day set.

    ``working_days`` of None means the profile does not restrict days.
    """
    capacity_hours: Optional[Decimal] = None
    working_days: Optional[frozenset[str]] = None


@dataclass(frozen=True)
class Holiday:
    name: str
    project_id: Optional[str] = None


@dataclass(frozen=True)
class TimeOff:
    hours: Decimal = ZERO
    is_full_day: bool = False


@dataclass(frozen=True)
class OverrideFields:
    """Raw override values; parsed lazily by the override resolver."""
    capacity: object = None
    multiplier: object = None
    tier2_threshold: object = None
    tier2_multiplier: object = None


@dataclass(frozen=True)
class OverrideConfig:
    mode: object = None
    defaults: OverrideFields = field(default_factory=OverrideFields)
    per_day: dict[date, OverrideFields] = field(default_factory=dict)
    weekly: dict[str, OverrideFields] = field(default_factory=dict)


@dataclass(frozen=True)
class CalcParams:
    daily_threshold: Decimal = Decimal("8")
    overtime_multiplier: Decimal = Decimal("1.5")
    tier2_threshold_hours: Decimal = Decimal("0")
    tier2_multiplier: Decimal = Decimal("2.0")


@dataclass(frozen=True)
class FeatureFlags:
    use_profile_capacity: bool = True
    use_profile_working_days: bool = True
    apply_holidays: bool = True
    apply_time_off: bool = True
    enable_tiered_ot: bool = False
    amount_display: AmountDisplay = AmountDisplay.EARNED


@dataclass(frozen=True)
class CalcConfig:
    """Immutable configuration snapshot handed to every engine stage."""
    users: tuple[Worker, ...] = ()
    profiles: dict[str, WorkerProfile] = field(default_factory=dict)
    holidays: dict[str, dict[date, Holiday]] = field(default_factory=dict)
    time_off: dict[str, dict[date, TimeOff]] = field(default_factory=dict)
    overrides: dict[str, OverrideConfig] = field(default_factory=dict)
    flags: FeatureFlags = field(default_factory=FeatureFlags)
    params: CalcParams = field(default_factory=CalcParams)


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date


# --- Outputs ---

@dataclass(frozen=True)
class AmountBreakdown:
    """Money for one rate family on one interval, each part rounded to cents."""
    rate: Decimal = ZERO
    regular: Decimal = ZERO
    overtime_base: Decimal = ZERO
    tier1_premium: Decimal = ZERO
    tier2_premium: Decimal = ZERO

    @property
    def base(self) -> Decimal:
        return self.regular + self.overtime_base

    @property
    def premium(self) -> Decimal:
        return self.tier1_premium + self.tier2_premium

    @property
    def total(self) -> Decimal:
        return self.regular + self.overtime_base + self.tier1_premium + self.tier2_premium

    def __sub__(self, other: "AmountBreakdown") -> "AmountBreakdown":
        return AmountBreakdown(
            rate=self.rate - other.rate,
            regular=self.regular - other.regular,
            overtime_base=self.overtime_base - other.overtime_base,
            tier1_premium=self.tier1_premium - other.tier1_premium,
            tier2_premium=self.tier2_premium - other.tier2_premium,
        )


@dataclass(frozen=True)
class EntryAnalysis:
    entry_class: EntryClass
    duration: Decimal
    regular: Decimal
    overtime: Decimal
    tier1_hours: Decimal
    tier2_hours: Decimal
    is_billable: bool
    multiplier: Decimal
    tier2_multiplier: Decimal
    earned: AmountBreakdown
    cost: AmountBreakdown
    profit: AmountBreakdown
    amount_display: AmountDisplay = AmountDisplay.EARNED
    tags: tuple[str, ...] = ()

    @property
    def primary(self) -> AmountBreakdown:
        """The family selected by the display mode."""
        return {
            AmountDisplay.EARNED: self.earned,
            AmountDisplay.COST: self.cost,
            AmountDisplay.PROFIT: self.profit,
        }[self.amount_display]

    @property
    def amount(self) -> Decimal:
        return self.primary.total


@dataclass(frozen=True)
class AnalyzedInterval:
    interval: TimeInterval
    analysis: Optional[EntryAnalysis] = None


@dataclass(frozen=True)
class DayMeta:
    capacity: Decimal
    base_capacity: Decimal
    is_holiday: bool = False
    holiday_name: str = ""
    holiday_project_id: Optional[str] = None
    is_non_working: bool = False
    is_time_off: bool = False
    time_off_hours: Decimal = ZERO


@dataclass
class DayAnalysis:
    date: date
    meta: DayMeta
    entries: list[AnalyzedInterval] = field(default_factory=list)


_COUNT_FIELDS = ("holiday_count", "time_off_count")
_MONEY_FIELDS = (
    "amount", "amount_base", "ot_premium", "ot_premium_tier2",
    "amount_earned", "amount_cost", "amount_profit",
    "amount_earned_base", "amount_cost_base", "amount_profit_base",
    "ot_premium_earned", "ot_premium_cost", "ot_premium_profit",
    "ot_premium_tier2_earned", "ot_premium_tier2_cost", "ot_premium_tier2_profit",
    "profit",
)


@dataclass
class Totals:
    """Per-worker running totals; call ``rounded()`` once the fold is done."""
    # Hours
    regular: Decimal = ZERO
    overtime: Decimal = ZERO
    tier1_hours: Decimal = ZERO
    tier2_hours: Decimal = ZERO
    total: Decimal = ZERO
    breaks: Decimal = ZERO
    pto_hours: Decimal = ZERO
    billable_worked: Decimal = ZERO
    non_billable_worked: Decimal = ZERO
    billable_ot: Decimal = ZERO
    non_billable_ot: Decimal = ZERO
    expected_capacity: Decimal = ZERO
    holiday_count: int = 0
    holiday_hours: Decimal = ZERO
    time_off_count: int = 0
    time_off_hours: Decimal = ZERO

    # Money (headline family)
    amount: Decimal = ZERO
    amount_base: Decimal = ZERO
    ot_premium: Decimal = ZERO
    ot_premium_tier2: Decimal = ZERO

    # Money (per family)
    amount_earned: Decimal = ZERO
    amount_cost: Decimal = ZERO
    amount_profit: Decimal = ZERO
    amount_earned_base: Decimal = ZERO
    amount_cost_base: Decimal = ZERO
    amount_profit_base: Decimal = ZERO
    ot_premium_earned: Decimal = ZERO
    ot_premium_cost: Decimal = ZERO
    ot_premium_profit: Decimal = ZERO
    ot_premium_tier2_earned: Decimal = ZERO
    ot_premium_tier2_cost: Decimal = ZERO
    ot_premium_tier2_profit: Decimal = ZERO
    profit: Decimal = ZERO

    def rounded(self) -> "Totals":
        changes = {}
        for f in fields(self):
            if f.name in _COUNT_FIELDS:
                continue
            value = getattr(self, f.name)
            changes[f.name] = round_money(value) if f.name in _MONEY_FIELDS else round_hours(value)
        return replace(self, **changes)


@dataclass
class UserAnalysisResult:
    worker_id: str
    worker_name: str
    days: dict[date, DayAnalysis] = field(default_factory=dict)
    totals: Totals = field(default_factory=Totals)

    @property
    def dates(self) -> list[date]:
        return sorted(self.days)


class StrictValidationError(Exception):
    """Raised when strict validation fails."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Strict validation failed with {len(errors)} error(s):\n" +
                         "\n".join(f"  - {e}" for e in errors))


class BundleError(Exception):
    """Raised when an input bundle cannot be read or is not a JSON object."""
