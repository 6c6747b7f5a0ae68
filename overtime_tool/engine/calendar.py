"""Calendar exceptions: holidays, time off and non-working days.

Holidays and time off come from two sources. With the matching feature
flag on, only the worker's records count. With it off, intervals tagged as
holiday or time off on that date mark the day instead.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from overtime_tool.engine.duration import resolve_duration_hours, weekday_key
from overtime_tool.engine.overrides import effective_capacity
from overtime_tool.models import ZERO, CalcConfig, DayMeta, Holiday, TimeInterval, TimeOff

HOLIDAY_TAGS = frozenset({"HOLIDAY", "HOLIDAY_TIME_ENTRY"})
TIME_OFF_TAGS = frozenset({"TIME_OFF", "TIME_OFF_TIME_ENTRY"})


def _has_tag(interval: TimeInterval, tags: frozenset[str]) -> bool:
    return isinstance(interval.type_tag, str) and interval.type_tag in tags


def get_holiday(worker_id: str, day: date, config: CalcConfig) -> Optional[Holiday]:
    if not config.flags.apply_holidays:
        return None
    return config.holidays.get(worker_id, {}).get(day)


def get_time_off(worker_id: str, day: date, config: CalcConfig) -> Optional[TimeOff]:
    if not config.flags.apply_time_off:
        return None
    return config.time_off.get(worker_id, {}).get(day)


def is_working_day(worker_id: str, day: date, config: CalcConfig) -> bool:
    if not config.flags.use_profile_working_days:
        return True
    profile = config.profiles.get(worker_id)
    if profile is None or profile.working_days is None:
        return True
    return weekday_key(day) in profile.working_days


def resolve_day(
    worker_id: str,
    day: date,
    intervals: Iterable[TimeInterval],
    config: CalcConfig,
) -> DayMeta:
    """Build the day's metadata, including its effective capacity."""
    intervals = list(intervals)
    base_capacity = effective_capacity(worker_id, day, config)
    holiday = get_holiday(worker_id, day, config)
    time_off = get_time_off(worker_id, day, config)
    non_working = not is_working_day(worker_id, day, config)

    holiday_entry = not config.flags.apply_holidays and any(
        _has_tag(i, HOLIDAY_TAGS) for i in intervals
    )
    time_off_entries = [] if config.flags.apply_time_off else [
        i for i in intervals if _has_tag(i, TIME_OFF_TAGS)
    ]
    entry_time_off_hours = sum(
        (max(resolve_duration_hours(i), ZERO) for i in time_off_entries), ZERO
    )

    is_holiday = holiday is not None or holiday_entry
    is_time_off = time_off is not None or bool(time_off_entries)

    capacity: Decimal
    if is_holiday or non_working:
        capacity = ZERO
    elif time_off is not None:
        capacity = ZERO if time_off.is_full_day else base_capacity - time_off.hours
    elif time_off_entries:
        capacity = base_capacity - entry_time_off_hours
    else:
        capacity = base_capacity
    capacity = max(capacity, ZERO)

    if time_off is not None and time_off.hours:
        time_off_hours = time_off.hours
    else:
        time_off_hours = entry_time_off_hours

    return DayMeta(
        capacity=capacity,
        base_capacity=base_capacity,
        is_holiday=is_holiday,
        holiday_name=holiday.name if holiday else "",
        holiday_project_id=holiday.project_id if holiday else None,
        is_non_working=non_working,
        is_time_off=is_time_off,
        time_off_hours=time_off_hours,
    )
