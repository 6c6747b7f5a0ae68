"""Override resolution for capacity, multiplier and tier-2 parameters.

Each field resolves through an ordered list of levels. A level yields a
parsed value or None; the first value wins and the process default closes
the chain. Unparseable values skip their level silently.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from overtime_tool.engine.duration import weekday_key
from overtime_tool.models import CalcConfig, OverrideConfig, OverrideFields

logger = logging.getLogger(__name__)

PER_DAY = "perDay"
WEEKLY = "weekly"

CAPACITY = "capacity"
MULTIPLIER = "multiplier"
TIER2_THRESHOLD = "tier2_threshold"
TIER2_MULTIPLIER = "tier2_multiplier"

_PARAM_DEFAULTS = {
    CAPACITY: "daily_threshold",
    MULTIPLIER: "overtime_multiplier",
    TIER2_THRESHOLD: "tier2_threshold_hours",
    TIER2_MULTIPLIER: "tier2_multiplier",
}

Level = Callable[[str, str, date, CalcConfig], Optional[Decimal]]


def parse_override_value(value: object) -> Optional[Decimal]:
    """Finite Decimal from a number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            logger.debug("Ignoring non-numeric override value %r", value)
            return None
    else:
        return None
    return parsed if parsed.is_finite() else None


def normalize_mode(mode: object) -> Optional[str]:
    if mode in (PER_DAY, WEEKLY):
        return mode
    if mode not in (None, "", "global"):
        logger.debug("Unknown override mode %r treated as unset", mode)
    return None


def _override(worker_id: str, config: CalcConfig) -> Optional[OverrideConfig]:
    return config.overrides.get(worker_id)


def _field(fields: Optional[OverrideFields], name: str) -> Optional[Decimal]:
    if fields is None:
        return None
    return parse_override_value(getattr(fields, name))


def per_day_level(field_name: str, worker_id: str, day: date, config: CalcConfig) -> Optional[Decimal]:
    override = _override(worker_id, config)
    if override is None or normalize_mode(override.mode) != PER_DAY:
        return None
    return _field(override.per_day.get(day), field_name)


def weekly_level(field_name: str, worker_id: str, day: date, config: CalcConfig) -> Optional[Decimal]:
    override = _override(worker_id, config)
    if override is None or normalize_mode(override.mode) != WEEKLY:
        return None
    return _field(override.weekly.get(weekday_key(day)), field_name)


def worker_level(field_name: str, worker_id: str, day: date, config: CalcConfig) -> Optional[Decimal]:
    override = _override(worker_id, config)
    if override is None:
        return None
    return _field(override.defaults, field_name)


def profile_level(field_name: str, worker_id: str, day: date, config: CalcConfig) -> Optional[Decimal]:
    """Profile capacity; only consulted for the capacity field."""
    if field_name != CAPACITY or not config.flags.use_profile_capacity:
        return None
    profile = config.profiles.get(worker_id)
    if profile is None:
        return None
    return parse_override_value(profile.capacity_hours)


LEVELS: tuple[Level, ...] = (per_day_level, weekly_level, worker_level, profile_level)


def resolve_field(field_name: str, worker_id: str, day: date, config: CalcConfig) -> Decimal:
    for level in LEVELS:
        value = level(field_name, worker_id, day, config)
        if value is not None:
            return value
    return getattr(config.params, _PARAM_DEFAULTS[field_name])


def effective_capacity(worker_id: str, day: date, config: CalcConfig) -> Decimal:
    """Base capacity before holiday / time-off / working-day adjustments."""
    return resolve_field(CAPACITY, worker_id, day, config)


def effective_multiplier(worker_id: str, day: date, config: CalcConfig) -> Decimal:
    return resolve_field(MULTIPLIER, worker_id, day, config)


def effective_tier2_threshold(worker_id: str, day: date, config: CalcConfig) -> Decimal:
    return resolve_field(TIER2_THRESHOLD, worker_id, day, config)


def effective_tier2_multiplier(worker_id: str, day: date, config: CalcConfig) -> Decimal:
    return resolve_field(TIER2_MULTIPLIER, worker_id, day, config)
