"""Layer 5: Analysis Engine.

Turns a flat list of time intervals plus a configuration snapshot into
per-worker, per-day hour and amount breakdowns. Pure and deterministic:
nothing is read from or written to shared state, and every grouping is
sorted before it is folded.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from overtime_tool.engine.amounts import FamilyAmounts, calculate_amounts
from overtime_tool.engine.calendar import resolve_day
from overtime_tool.engine.classifier import classify_interval
from overtime_tool.engine.duration import dates_between, extract_date_key, resolve_duration_hours
from overtime_tool.engine.hours_splitter import HoursSplit, apply_tail_attribution, sort_by_start
from overtime_tool.engine.overrides import (
    effective_multiplier,
    effective_tier2_multiplier,
    effective_tier2_threshold,
)
from overtime_tool.engine.rates import resolve_rates
from overtime_tool.engine.tiered_overtime import TierAllocator, TierSplit
from overtime_tool.models import (
    AmountDisplay,
    AnalyzedInterval,
    CalcConfig,
    DateRange,
    DayAnalysis,
    DayMeta,
    EntryAnalysis,
    EntryClass,
    TimeInterval,
    Totals,
    UserAnalysisResult,
)

logger = logging.getLogger(__name__)

UNKNOWN_WORKER_ID = "unknown"
UNKNOWN_WORKER_NAME = "Unknown"


def calculate_analysis(
    entries: Optional[Iterable[TimeInterval]],
    config: CalcConfig,
    date_range: Optional[DateRange] = None,
) -> list[UserAnalysisResult]:
    """Analyse every worker over the date range.

    Without an explicit range, the range spans the earliest to the latest
    dated interval. Roster workers with no intervals still get a full set
    of days with zero hours.
    """
    if entries is None:
        return []

    by_worker: dict[str, list[TimeInterval]] = defaultdict(list)
    seen_dates: list[date] = []
    for entry in entries:
        if entry is None:
            continue
        by_worker[entry.worker_id or UNKNOWN_WORKER_ID].append(entry)
        day = extract_date_key(entry.start)
        if day is not None:
            seen_dates.append(day)

    if date_range is not None:
        start, end = date_range.start, date_range.end
    elif seen_dates:
        start, end = min(seen_dates), max(seen_dates)
    else:
        return []
    all_dates = dates_between(start, end)

    results: dict[str, UserAnalysisResult] = {}
    for user in config.users:
        if user is None:
            continue
        results[user.id] = UserAnalysisResult(worker_id=user.id, worker_name=str(user.name or UNKNOWN_WORKER_NAME))
    for worker_id, worker_entries in by_worker.items():
        if worker_id not in results:
            results[worker_id] = UserAnalysisResult(
                worker_id=worker_id,
                worker_name=str(worker_entries[0].worker_name or UNKNOWN_WORKER_NAME),
            )

    for worker_id, result in results.items():
        _analyze_worker(result, by_worker.get(worker_id, []), all_dates, config)

    logger.info(
        "Analyzed %d worker(s) over %d day(s) from %d interval(s)",
        len(results), len(all_dates), sum(len(v) for v in by_worker.values()),
    )
    return sorted(
        results.values(),
        key=lambda r: (r.worker_name.casefold(), r.worker_name, r.worker_id),
    )


def _analyze_worker(
    result: UserAnalysisResult,
    entries: list[TimeInterval],
    all_dates: list[date],
    config: CalcConfig,
) -> None:
    worker_id = result.worker_id
    by_date: dict[date, list[TimeInterval]] = defaultdict(list)
    for entry in entries:
        day = extract_date_key(entry.start)
        if day is None:
            logger.debug("Skipping interval %s for %s: no usable start date", entry.id, worker_id)
            continue
        by_date[day].append(entry)

    allocator = TierAllocator(enabled=config.flags.enable_tiered_ot)
    totals = Totals()

    for day in all_dates:
        day_entries = sort_by_start(by_date.get(day, []))
        meta = resolve_day(worker_id, day, day_entries, config)
        result.days[day] = DayAnalysis(
            date=day,
            meta=meta,
            entries=_analyze_day(worker_id, day, day_entries, meta, allocator, totals, config),
        )

        totals.expected_capacity += meta.capacity
        if meta.is_holiday:
            totals.holiday_count += 1
            totals.holiday_hours += meta.base_capacity
        if meta.is_time_off:
            totals.time_off_count += 1
            totals.time_off_hours += meta.time_off_hours

    totals.profit = totals.amount_profit
    result.totals = totals.rounded()


def _day_tags(meta: DayMeta) -> tuple[str, ...]:
    tags = []
    if meta.is_holiday:
        tags.append("HOLIDAY")
    if meta.is_non_working:
        tags.append("OFF-DAY")
    if meta.is_time_off:
        tags.append("TIME-OFF")
    return tuple(tags)


def _analyze_day(
    worker_id: str,
    day: date,
    day_entries: list[TimeInterval],
    meta: DayMeta,
    allocator: TierAllocator,
    totals: Totals,
    config: CalcConfig,
) -> list[AnalyzedInterval]:
    multiplier = effective_multiplier(worker_id, day, config)
    threshold = effective_tier2_threshold(worker_id, day, config)
    tier2_multiplier = effective_tier2_multiplier(worker_id, day, config)
    display = config.flags.amount_display
    tags = _day_tags(meta)

    classes = [classify_interval(i) for i in day_entries]
    splits = apply_tail_attribution(
        [(c, resolve_duration_hours(i)) for c, i in zip(classes, day_entries)],
        meta.capacity,
    )

    analyzed = []
    for interval, entry_class, split in zip(day_entries, classes, splits):
        tiers = allocator.allocate(split.overtime, threshold, multiplier, tier2_multiplier)
        rates = resolve_rates(interval, split.hours)
        amounts = calculate_amounts(
            rates, split.regular, split.overtime, tiers.tier2_hours, multiplier, tier2_multiplier,
        )
        _accumulate(totals, entry_class, interval.billable, split, tiers, amounts, display)

        if entry_class is EntryClass.BREAK:
            analyzed.append(AnalyzedInterval(interval=interval))
            continue
        analysis = EntryAnalysis(
            entry_class=entry_class,
            duration=split.hours,
            regular=split.regular,
            overtime=split.overtime,
            tier1_hours=tiers.tier1_hours,
            tier2_hours=tiers.tier2_hours,
            is_billable=interval.billable,
            multiplier=multiplier,
            tier2_multiplier=tier2_multiplier,
            earned=amounts.earned,
            cost=amounts.cost,
            profit=amounts.profit,
            amount_display=display,
            tags=tags,
        )
        analyzed.append(AnalyzedInterval(interval=interval, analysis=analysis))
    return analyzed


def _accumulate(
    totals: Totals,
    entry_class: EntryClass,
    billable: bool,
    split: HoursSplit,
    tiers: TierSplit,
    amounts: FamilyAmounts,
    display: AmountDisplay,
) -> None:
    totals.total += split.hours
    totals.regular += split.regular
    totals.overtime += split.overtime
    totals.tier1_hours += tiers.tier1_hours
    totals.tier2_hours += tiers.tier2_hours
    if entry_class is EntryClass.BREAK:
        totals.breaks += split.hours
    elif entry_class.is_pto:
        totals.pto_hours += split.hours

    if billable:
        totals.billable_worked += split.regular
        totals.billable_ot += split.overtime
    else:
        totals.non_billable_worked += split.regular
        totals.non_billable_ot += split.overtime

    families = {
        AmountDisplay.EARNED: amounts.earned,
        AmountDisplay.COST: amounts.cost,
        AmountDisplay.PROFIT: amounts.profit,
    }
    for family, breakdown in families.items():
        suffix = family.value
        setattr(totals, f"amount_{suffix}", getattr(totals, f"amount_{suffix}") + breakdown.total)
        setattr(totals, f"amount_{suffix}_base", getattr(totals, f"amount_{suffix}_base") + breakdown.base)
        setattr(totals, f"ot_premium_{suffix}", getattr(totals, f"ot_premium_{suffix}") + breakdown.tier1_premium)
        setattr(totals, f"ot_premium_tier2_{suffix}",
                getattr(totals, f"ot_premium_tier2_{suffix}") + breakdown.tier2_premium)

    primary = families[display]
    totals.amount += primary.total
    totals.amount_base += primary.base
    totals.ot_premium += primary.tier1_premium
    totals.ot_premium_tier2 += primary.tier2_premium
