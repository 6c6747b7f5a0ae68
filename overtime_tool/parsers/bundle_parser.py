"""Layer 1: Input Bundle Parser.

Converts the JSON bundle handed over by the fetch layer (camelCase keys, as
the time-tracking service returns them) into the canonical data model.
Malformed records are dropped, never raised on, so the engine sees the
same tolerance the source data requires.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from overtime_tool.engine.duration import extract_date_key, parse_iso_duration
from overtime_tool.models import (
    WEEKDAYS,
    AmountDisplay,
    AmountEntry,
    AmountRecord,
    BundleError,
    CalcConfig,
    CalcParams,
    DateRange,
    FeatureFlags,
    FlatRate,
    Holiday,
    OverrideConfig,
    OverrideFields,
    RateSource,
    TimeInterval,
    TimeOff,
    Worker,
    WorkerProfile,
)

logger = logging.getLogger(__name__)

_FLAG_KEYS = {
    "useProfileCapacity": "use_profile_capacity",
    "useProfileWorkingDays": "use_profile_working_days",
    "applyHolidays": "apply_holidays",
    "applyTimeOff": "apply_time_off",
    "enableTieredOT": "enable_tiered_ot",
}

_PARAM_KEYS = {
    "dailyThreshold": "daily_threshold",
    "overtimeMultiplier": "overtime_multiplier",
    "tier2ThresholdHours": "tier2_threshold_hours",
    "tier2Multiplier": "tier2_multiplier",
}

_OVERRIDE_KEYS = {
    "capacity": "capacity",
    "multiplier": "multiplier",
    "tier2Threshold": "tier2_threshold",
    "tier2Multiplier": "tier2_multiplier",
}


@dataclass(frozen=True)
class AnalysisInputs:
    """Everything one analysis run needs."""
    entries: list[TimeInterval] = field(default_factory=list)
    config: CalcConfig = field(default_factory=CalcConfig)
    date_range: Optional[DateRange] = None


def _decimal(value: Any) -> Optional[Decimal]:
    """Decimal from a JSON number or numeric string; None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str) and value.strip():
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return None
    return None


def _finite_decimal(value: Any) -> Optional[Decimal]:
    parsed = _decimal(value)
    return parsed if parsed is not None and parsed.is_finite() else None


def parse_rate(value: Any) -> Optional[RateSource]:
    """``{"amount": n}`` becomes AmountRecord, a bare number FlatRate."""
    if isinstance(value, dict):
        amount = _decimal(value.get("amount"))
        return AmountRecord(amount) if amount is not None else None
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return FlatRate(_decimal(value))
    return None


def parse_amounts(value: Any) -> tuple[AmountEntry, ...]:
    if not isinstance(value, list):
        return ()
    result = []
    for item in value:
        if not isinstance(item, dict):
            continue
        amount_type = item.get("type") or item.get("amountType")
        raw = item.get("value")
        if raw is None:
            raw = item.get("amount")
        result.append(AmountEntry(type=amount_type, value=_decimal(raw)))
    return tuple(result)


def parse_entry(raw: Any, index: int = 0) -> Optional[TimeInterval]:
    if not isinstance(raw, dict):
        logger.debug("Dropping entry #%d: not an object", index)
        return None
    interval = raw.get("timeInterval") or {}
    if not isinstance(interval, dict):
        interval = {}
    project = raw.get("project") if isinstance(raw.get("project"), dict) else {}
    worker_id = raw.get("userId")
    worker_name = raw.get("userName")
    type_tag = raw.get("type")
    return TimeInterval(
        id=str(raw.get("id") or f"entry-{index}"),
        worker_id=str(worker_id) if worker_id not in (None, "") else None,
        worker_name=str(worker_name) if worker_name not in (None, "") else None,
        start=interval.get("start"),
        end=interval.get("end"),
        duration=interval.get("duration"),
        type_tag=type_tag if isinstance(type_tag, str) else None,
        billable=raw.get("billable") is not False,
        description=raw.get("description") or "",
        project_name=raw.get("projectName") or project.get("name"),
        earned_rate=parse_rate(raw.get("earnedRate")),
        hourly_rate=parse_rate(raw.get("hourlyRate")),
        cost_rate=parse_rate(raw.get("costRate")),
        amounts=parse_amounts(raw.get("amounts")),
    )


def parse_users(raw: Any) -> tuple[Worker, ...]:
    users = []
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict) or item.get("id") in (None, ""):
            continue
        users.append(Worker(id=str(item["id"]), name=str(item.get("name") or "Unknown")))
    return tuple(users)


def _capacity_hours(raw: dict) -> Optional[Decimal]:
    value = raw.get("workCapacityHours")
    if value is not None:
        return _finite_decimal(value)
    capacity = raw.get("workCapacity")
    if isinstance(capacity, str):
        return parse_iso_duration(capacity)
    return _finite_decimal(capacity)


def parse_profiles(raw: Any) -> dict[str, WorkerProfile]:
    profiles = {}
    for worker_id, item in (raw.items() if isinstance(raw, dict) else []):
        if not isinstance(item, dict):
            continue
        days = item.get("workingDays")
        working_days = None
        if isinstance(days, list):
            working_days = frozenset(d.upper() for d in days if isinstance(d, str) and d.upper() in WEEKDAYS)
        profiles[str(worker_id)] = WorkerProfile(capacity_hours=_capacity_hours(item), working_days=working_days)
    return profiles


def _by_worker_and_date(raw: Any, what: str) -> dict[str, dict[date, dict]]:
    result: dict[str, dict[date, dict]] = {}
    for worker_id, per_date in (raw.items() if isinstance(raw, dict) else []):
        if not isinstance(per_date, dict):
            continue
        days = {}
        for key, record in per_date.items():
            day = extract_date_key(key)
            if day is None or record is None:
                logger.debug("Dropping %s record %r for %s", what, key, worker_id)
                continue
            days[day] = record if isinstance(record, dict) else {}
        result[str(worker_id)] = days
    return result


def parse_holidays(raw: Any) -> dict[str, dict[date, Holiday]]:
    return {
        worker_id: {
            day: Holiday(name=str(rec.get("name") or "Holiday"), project_id=rec.get("projectId"))
            for day, rec in days.items()
        }
        for worker_id, days in _by_worker_and_date(raw, "holiday").items()
    }


def parse_time_off(raw: Any) -> dict[str, dict[date, TimeOff]]:
    return {
        worker_id: {
            day: TimeOff(
                hours=max(_finite_decimal(rec.get("hours")) or Decimal("0"), Decimal("0")),
                is_full_day=bool(rec.get("isFullDay")),
            )
            for day, rec in days.items()
        }
        for worker_id, days in _by_worker_and_date(raw, "time-off").items()
    }


def _mapping(raw: Any) -> dict:
    return raw if isinstance(raw, dict) else {}


def _override_fields(raw: Any) -> OverrideFields:
    if not isinstance(raw, dict):
        return OverrideFields()
    return OverrideFields(**{attr: raw.get(key) for key, attr in _OVERRIDE_KEYS.items()})


def parse_overrides(raw: Any) -> dict[str, OverrideConfig]:
    overrides = {}
    for worker_id, item in (raw.items() if isinstance(raw, dict) else []):
        if not isinstance(item, dict):
            continue
        per_day = {}
        for key, values in _mapping(item.get("perDayOverrides")).items():
            day = extract_date_key(key)
            if day is not None:
                per_day[day] = _override_fields(values)
        weekly = {
            str(key).upper(): _override_fields(values)
            for key, values in _mapping(item.get("weeklyOverrides")).items()
        }
        overrides[str(worker_id)] = OverrideConfig(
            mode=item.get("mode"),
            defaults=_override_fields(item),
            per_day=per_day,
            weekly=weekly,
        )
    return overrides


def parse_flags(raw: Any, defaults: Optional[FeatureFlags] = None) -> FeatureFlags:
    flags = defaults or FeatureFlags()
    if not isinstance(raw, dict):
        return flags
    changes: dict[str, Any] = {
        attr: bool(raw[key]) for key, attr in _FLAG_KEYS.items() if key in raw
    }
    if "amountDisplay" in raw:
        changes["amount_display"] = AmountDisplay.parse(raw["amountDisplay"])
    return replace(flags, **changes)


def parse_params(raw: Any, defaults: Optional[CalcParams] = None) -> CalcParams:
    params = defaults or CalcParams()
    if not isinstance(raw, dict):
        return params
    changes = {}
    for key, attr in _PARAM_KEYS.items():
        value = _finite_decimal(raw.get(key))
        if value is not None:
            changes[attr] = value
    return replace(params, **changes)


def parse_date_range(raw: Any) -> Optional[DateRange]:
    if not isinstance(raw, dict):
        return None
    start = extract_date_key(raw.get("start"))
    end = extract_date_key(raw.get("end"))
    if start is None or end is None:
        return None
    return DateRange(start=start, end=end)


def parse_bundle(
    data: Any,
    params: Optional[CalcParams] = None,
    flags: Optional[FeatureFlags] = None,
) -> AnalysisInputs:
    """Build analysis inputs from a decoded JSON bundle.

    ``params`` and ``flags`` are process defaults; values in the bundle's
    ``calcParams`` and ``config`` sections take precedence field by field.
    """
    if not isinstance(data, dict):
        raise BundleError(f"Bundle must be a JSON object, got {type(data).__name__}")

    raw_entries = data.get("entries") or []
    entries = [
        e for e in (parse_entry(raw, i) for i, raw in enumerate(raw_entries)) if e is not None
    ]
    config = CalcConfig(
        users=parse_users(data.get("users")),
        profiles=parse_profiles(data.get("profiles")),
        holidays=parse_holidays(data.get("holidays")),
        time_off=parse_time_off(data.get("timeOff")),
        overrides=parse_overrides(data.get("overrides")),
        flags=parse_flags(data.get("config"), flags),
        params=parse_params(data.get("calcParams"), params),
    )
    logger.debug(
        "Parsed bundle: %d entries, %d users, %d overrides",
        len(entries), len(config.users), len(config.overrides),
    )
    return AnalysisInputs(entries=entries, config=config, date_range=parse_date_range(data.get("dateRange")))


def load_bundle(
    path: str | Path,
    params: Optional[CalcParams] = None,
    flags: Optional[FeatureFlags] = None,
) -> AnalysisInputs:
    """Read and parse a JSON bundle file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"), parse_float=Decimal)
    except OSError as e:
        raise BundleError(f"Cannot read bundle {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise BundleError(f"Invalid JSON in {path}: {e}") from e
    return parse_bundle(data, params=params, flags=flags)
