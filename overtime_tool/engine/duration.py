"""Duration resolution and calendar-date helpers.

Timestamps are ISO-8601 strings as delivered by the time-tracking source.
The calendar date of an interval is the date written in its own offset,
so an interval starting at 23:30-05:00 belongs to that local day.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from overtime_tool.models import WEEKDAYS, ZERO, TimeInterval

_ISO_DURATION = re.compile(
    r"P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?"
    r"(?:(?P<minutes>\d+(?:\.\d+)?)M)?"
    r"(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?"
)

_SECONDS_PER_HOUR = Decimal("3600")


def parse_iso_duration(value: object) -> Optional[Decimal]:
    """Parse ``P[nD]T[nH][nM][nS]`` into hours.

    Returns None when the value is missing or not a well-formed duration.
    """
    if not isinstance(value, str):
        return None
    match = _ISO_DURATION.fullmatch(value.strip())
    if not match:
        return None
    parts = {k: Decimal(v) if v else ZERO for k, v in match.groupdict().items()}
    return (
        parts["days"] * 24
        + parts["hours"]
        + parts["minutes"] / 60
        + parts["seconds"] / _SECONDS_PER_HOUR
    )


def parse_timestamp(value: object) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _timedelta_hours(delta: timedelta) -> Decimal:
    seconds = Decimal(delta.days * 86400 + delta.seconds) + Decimal(delta.microseconds) / 1_000_000
    return seconds / _SECONDS_PER_HOUR


def resolve_duration_hours(interval: TimeInterval) -> Decimal:
    """Hours for one interval: ISO duration, then end - start, then 0.

    A duration string that parses to zero falls back to the timestamps.
    Negative results are returned as-is.
    """
    hours = parse_iso_duration(interval.duration)
    if hours:
        return hours

    start = parse_timestamp(interval.start)
    end = parse_timestamp(interval.end)
    if start is None or end is None:
        return ZERO
    if (start.tzinfo is None) != (end.tzinfo is None):
        return ZERO
    return _timedelta_hours(end - start)


def extract_date_key(value: object) -> Optional[date]:
    """Calendar date of a timestamp or ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    parsed = parse_timestamp(text)
    return parsed.date() if parsed else None


def weekday_key(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def dates_between(start: date, end: date) -> list[date]:
    """Every date from start to end, inclusive. Empty when start > end."""
    days = (end - start).days
    return [start + timedelta(days=i) for i in range(days + 1)]
