"""Tests for calendar exceptions and interval classification."""

import pytest
from decimal import Decimal
from datetime import date

from overtime_tool.engine.calendar import is_working_day, resolve_day
from overtime_tool.engine.classifier import classify_interval
from overtime_tool.models import (
    CalcConfig,
    EntryClass,
    FeatureFlags,
    Holiday,
    TimeInterval,
    TimeOff,
    WorkerProfile,
)

MONDAY = date(2024, 1, 1)
SATURDAY = date(2024, 1, 6)
WEEKDAYS = frozenset({"MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY"})


def _make_interval(type_tag=None, duration="PT8H", start="2024-01-01T09:00:00Z") -> TimeInterval:
    return TimeInterval(id="e1", worker_id="u1", start=start, duration=duration, type_tag=type_tag)


class TestClassifier:
    @pytest.mark.parametrize("tag,expected", [
        ("BREAK", EntryClass.BREAK),
        ("HOLIDAY", EntryClass.HOLIDAY_PTO),
        ("HOLIDAY_TIME_ENTRY", EntryClass.WORK),
        ("TIME_OFF", EntryClass.TIMEOFF_PTO),
        ("TIME_OFF_TIME_ENTRY", EntryClass.WORK),
        ("REGULAR", EntryClass.WORK),
        ("break", EntryClass.WORK),
        ("", EntryClass.WORK),
        (None, EntryClass.WORK),
        (["BREAK"], EntryClass.WORK),
    ])
    def test_tags(self, tag, expected):
        assert classify_interval(_make_interval(tag)) is expected


class TestWorkingDays:
    def test_no_profile_means_working(self):
        assert is_working_day("u1", SATURDAY, CalcConfig())

    def test_profile_without_day_set_means_working(self):
        config = CalcConfig(profiles={"u1": WorkerProfile(capacity_hours=Decimal("8"))})
        assert is_working_day("u1", SATURDAY, config)

    def test_weekend_absent_from_profile(self):
        config = CalcConfig(profiles={"u1": WorkerProfile(working_days=WEEKDAYS)})
        assert is_working_day("u1", MONDAY, config)
        assert not is_working_day("u1", SATURDAY, config)

    def test_flag_disables_working_days(self):
        config = CalcConfig(
            profiles={"u1": WorkerProfile(working_days=WEEKDAYS)},
            flags=FeatureFlags(use_profile_working_days=False),
        )
        assert is_working_day("u1", SATURDAY, config)


class TestResolveDay:
    def test_plain_day_keeps_capacity(self):
        meta = resolve_day("u1", MONDAY, [], CalcConfig())
        assert meta.capacity == Decimal("8")
        assert not meta.is_holiday and not meta.is_time_off and not meta.is_non_working

    def test_holiday_record_zeroes_capacity(self):
        config = CalcConfig(holidays={"u1": {MONDAY: Holiday(name="New Year", project_id="p1")}})
        meta = resolve_day("u1", MONDAY, [], config)
        assert meta.capacity == Decimal("0")
        assert meta.base_capacity == Decimal("8")
        assert meta.is_holiday
        assert meta.holiday_name == "New Year"
        assert meta.holiday_project_id == "p1"

    def test_holiday_record_ignored_when_flag_off(self):
        config = CalcConfig(
            holidays={"u1": {MONDAY: Holiday(name="New Year")}},
            flags=FeatureFlags(apply_holidays=False),
        )
        meta = resolve_day("u1", MONDAY, [], config)
        assert not meta.is_holiday
        assert meta.capacity == Decimal("8")

    def test_holiday_entry_used_when_flag_off(self):
        config = CalcConfig(flags=FeatureFlags(apply_holidays=False))
        meta = resolve_day("u1", MONDAY, [_make_interval("HOLIDAY_TIME_ENTRY")], config)
        assert meta.is_holiday
        assert meta.capacity == Decimal("0")

    def test_non_string_tag_marks_nothing(self):
        config = CalcConfig(flags=FeatureFlags(apply_holidays=False, apply_time_off=False))
        meta = resolve_day("u1", MONDAY, [_make_interval({"kind": "HOLIDAY"})], config)
        assert not meta.is_holiday
        assert not meta.is_time_off
        assert meta.capacity == Decimal("8")

    def test_holiday_entry_ignored_when_flag_on(self):
        meta = resolve_day("u1", MONDAY, [_make_interval("HOLIDAY")], CalcConfig())
        assert not meta.is_holiday

    def test_full_day_time_off(self):
        config = CalcConfig(time_off={"u1": {MONDAY: TimeOff(hours=Decimal("8"), is_full_day=True)}})
        meta = resolve_day("u1", MONDAY, [], config)
        assert meta.capacity == Decimal("0")
        assert meta.is_time_off
        assert meta.time_off_hours == Decimal("8")

    def test_partial_time_off_subtracts(self):
        config = CalcConfig(time_off={"u1": {MONDAY: TimeOff(hours=Decimal("3"))}})
        assert resolve_day("u1", MONDAY, [], config).capacity == Decimal("5")

    def test_partial_time_off_clamped_at_zero(self):
        config = CalcConfig(time_off={"u1": {MONDAY: TimeOff(hours=Decimal("12"))}})
        assert resolve_day("u1", MONDAY, [], config).capacity == Decimal("0")

    def test_time_off_entries_used_when_flag_off(self):
        config = CalcConfig(flags=FeatureFlags(apply_time_off=False))
        meta = resolve_day("u1", MONDAY, [_make_interval("TIME_OFF", duration="PT2H")], config)
        assert meta.is_time_off
        assert meta.time_off_hours == Decimal("2")
        assert meta.capacity == Decimal("6")

    def test_holiday_beats_time_off(self):
        config = CalcConfig(
            holidays={"u1": {MONDAY: Holiday(name="Founders Day")}},
            time_off={"u1": {MONDAY: TimeOff(hours=Decimal("2"))}},
        )
        meta = resolve_day("u1", MONDAY, [], config)
        assert meta.is_holiday and meta.is_time_off
        assert meta.capacity == Decimal("0")

    def test_non_working_day_zeroes_capacity(self):
        config = CalcConfig(profiles={"u1": WorkerProfile(working_days=WEEKDAYS)})
        meta = resolve_day("u1", SATURDAY, [], config)
        assert meta.is_non_working
        assert meta.capacity == Decimal("0")
