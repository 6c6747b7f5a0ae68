"""Tests for duration resolution and date helpers."""

import pytest
from decimal import Decimal
from datetime import date

from overtime_tool.engine.duration import (
    dates_between,
    extract_date_key,
    parse_iso_duration,
    resolve_duration_hours,
    weekday_key,
)
from overtime_tool.models import TimeInterval


def _make_interval(start=None, end=None, duration=None) -> TimeInterval:
    return TimeInterval(id="e1", worker_id="u1", start=start, end=end, duration=duration)


class TestParseIsoDuration:
    @pytest.mark.parametrize("text,hours", [
        ("PT8H", Decimal("8")),
        ("PT1H30M", Decimal("1.5")),
        ("PT45M", Decimal("0.75")),
        ("PT2.5H", Decimal("2.5")),
        ("PT3600S", Decimal("1")),
        ("P1DT2H", Decimal("26")),
    ])
    def test_well_formed(self, text, hours):
        assert parse_iso_duration(text) == hours

    @pytest.mark.parametrize("text", ["8 hours", "T8H", "PT8X", "", "PT-1H"])
    def test_malformed_returns_none(self, text):
        assert parse_iso_duration(text) is None

    def test_non_string_returns_none(self):
        assert parse_iso_duration(None) is None
        assert parse_iso_duration(8) is None


class TestResolveDurationHours:
    def test_duration_string_wins(self):
        interval = _make_interval(
            start="2024-01-01T09:00:00Z", end="2024-01-01T10:00:00Z", duration="PT8H",
        )
        assert resolve_duration_hours(interval) == Decimal("8")

    def test_malformed_duration_falls_back_to_timestamps(self):
        interval = _make_interval(
            start="2024-01-01T09:00:00Z", end="2024-01-01T11:30:00Z", duration="garbage",
        )
        assert resolve_duration_hours(interval) == Decimal("2.5")

    def test_zero_duration_falls_back_to_timestamps(self):
        interval = _make_interval(
            start="2024-01-01T09:00:00Z", end="2024-01-01T10:00:00Z", duration="PT0S",
        )
        assert resolve_duration_hours(interval) == Decimal("1")

    def test_offsets_are_respected(self):
        interval = _make_interval(start="2024-01-01T09:00:00+02:00", end="2024-01-01T09:00:00+01:00")
        assert resolve_duration_hours(interval) == Decimal("1")

    def test_negative_span_not_clamped(self):
        interval = _make_interval(start="2024-01-01T10:00:00Z", end="2024-01-01T09:00:00Z")
        assert resolve_duration_hours(interval) == Decimal("-1")

    def test_missing_everything_is_zero(self):
        assert resolve_duration_hours(_make_interval()) == Decimal("0")

    def test_invalid_timestamp_is_zero(self):
        interval = _make_interval(start="not a date", end="2024-01-01T10:00:00Z")
        assert resolve_duration_hours(interval) == Decimal("0")


class TestDateHelpers:
    def test_date_key_uses_own_offset(self):
        assert extract_date_key("2024-01-01T23:30:00-05:00") == date(2024, 1, 1)

    def test_date_key_plain_date(self):
        assert extract_date_key("2024-03-15") == date(2024, 3, 15)

    def test_date_key_invalid(self):
        assert extract_date_key("") is None
        assert extract_date_key(None) is None
        assert extract_date_key("2024-13-45") is None

    def test_weekday_key(self):
        assert weekday_key(date(2024, 1, 1)) == "MONDAY"
        assert weekday_key(date(2024, 1, 7)) == "SUNDAY"

    def test_dates_between_inclusive(self):
        days = dates_between(date(2024, 1, 30), date(2024, 2, 2))
        assert days == [date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2)]

    def test_dates_between_single_and_reversed(self):
        assert dates_between(date(2024, 1, 1), date(2024, 1, 1)) == [date(2024, 1, 1)]
        assert dates_between(date(2024, 1, 2), date(2024, 1, 1)) == []
