"""Layer 3: Input Diagnostics.

The analysis engine never fails on business data: it skips what it cannot
use. This module reports what would be skipped so callers running in
strict mode can refuse the input instead.
"""

from __future__ import annotations

from dataclasses import fields
from decimal import Decimal
from typing import Optional, Sequence

from overtime_tool.engine.duration import extract_date_key, resolve_duration_hours
from overtime_tool.engine.overrides import PER_DAY, WEEKLY, parse_override_value
from overtime_tool.models import (
    CalcConfig,
    DateRange,
    OverrideFields,
    StrictValidationError,
    TimeInterval,
)

MAX_HOURS_PER_INTERVAL = Decimal("24")


def _override_field_errors(worker_id: str, where: str, values: OverrideFields) -> list[str]:
    errors = []
    for f in fields(values):
        raw = getattr(values, f.name)
        if raw is None or raw == "":
            continue
        if parse_override_value(raw) is None:
            errors.append(f"{worker_id}: {where} override {f.name}={raw!r} is not a finite number")
    return errors


def collect_diagnostics(
    entries: Sequence[Optional[TimeInterval]],
    config: CalcConfig,
    date_range: Optional[DateRange] = None,
) -> list[str]:
    """Return human-readable warnings for data the engine will ignore."""
    errors: list[str] = []

    if not entries:
        errors.append("No time entries supplied")

    # --- Per-interval checks ---
    for entry in entries or []:
        if entry is None:
            errors.append("Empty time entry record")
            continue
        who = entry.worker_name or entry.worker_id or "unknown"
        day = extract_date_key(entry.start)
        if day is None:
            errors.append(f"{who}: entry {entry.id} has no usable start timestamp")
            continue
        if date_range is not None and not (date_range.start <= day <= date_range.end):
            errors.append(f"{who}: entry {entry.id} on {day} is outside {date_range.start}..{date_range.end}")

        hours = resolve_duration_hours(entry)
        if hours <= 0:
            errors.append(f"{who} on {day}: entry {entry.id} has non-positive duration {hours}")
        elif hours > MAX_HOURS_PER_INTERVAL:
            errors.append(f"{who} on {day}: entry {entry.id} lasts {hours}h > 24")

    # --- Override checks ---
    for worker_id, override in sorted(config.overrides.items()):
        if override.mode not in (None, "", "global", PER_DAY, WEEKLY):
            errors.append(f"{worker_id}: unknown override mode {override.mode!r}")
        errors.extend(_override_field_errors(worker_id, "global", override.defaults))
        for day, values in sorted(override.per_day.items()):
            errors.extend(_override_field_errors(worker_id, f"{day}", values))
        for weekday, values in sorted(override.weekly.items()):
            errors.extend(_override_field_errors(worker_id, weekday, values))

    if date_range is not None and date_range.start > date_range.end:
        errors.append(f"Date range start {date_range.start} is after end {date_range.end}")

    return errors


def validate_inputs(
    entries: Sequence[Optional[TimeInterval]],
    config: CalcConfig,
    date_range: Optional[DateRange] = None,
) -> Sequence[Optional[TimeInterval]]:
    """Strict mode: raise if any diagnostic is reported."""
    errors = collect_diagnostics(entries, config, date_range)
    if errors:
        raise StrictValidationError(errors)
    return entries
