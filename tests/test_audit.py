"""Tests for audit JSON generation."""

import json
from datetime import date
from decimal import Decimal

from overtime_tool.audit import DecimalEncoder, generate_audit, generate_audit_dict
from overtime_tool.engine.calculator import calculate_analysis
from overtime_tool.models import AmountRecord, CalcConfig, DateRange, Holiday, TimeInterval, Worker


def _make_results():
    config = CalcConfig(
        users=(Worker("u1", "Alice"),),
        holidays={"u1": {date(2024, 1, 2): Holiday(name="Bank Holiday")}},
    )
    entries = [
        TimeInterval(
            id="e1", worker_id="u1", worker_name="Alice",
            start="2024-01-01T09:00:00Z", duration="PT10H",
            hourly_rate=AmountRecord(Decimal("5000")),
        ),
        TimeInterval(
            id="e2", worker_id="u1", worker_name="Alice",
            start="2024-01-01T19:00:00Z", duration="PT1H", type_tag="BREAK",
        ),
    ]
    date_range = DateRange(date(2024, 1, 1), date(2024, 1, 2))
    return calculate_analysis(entries, config, date_range), date_range


class TestAuditDict:
    def test_structure(self):
        results, date_range = _make_results()
        audit = generate_audit_dict(results, date_range)
        assert audit["date_range"] == {"start": "2024-01-01", "end": "2024-01-02", "total_dates": 2}
        (worker,) = audit["workers"]
        assert worker["worker_name"] == "Alice"
        assert [d["date"] for d in worker["days"]] == ["2024-01-01", "2024-01-02"]
        assert worker["days"][1]["is_holiday"] is True
        assert worker["days"][1]["holiday_name"] == "Bank Holiday"

    def test_totals_are_plain_numbers(self):
        results, date_range = _make_results()
        totals = generate_audit_dict(results, date_range)["workers"][0]["totals"]
        assert totals["overtime"] == 2.0
        assert totals["breaks"] == 1.0
        assert totals["holiday_count"] == 1
        assert totals["amount"] == 550.0
        json.dumps(totals)

    def test_entry_analysis(self):
        results, date_range = _make_results()
        entries = generate_audit_dict(results, date_range)["workers"][0]["days"][0]["entries"]
        work, brk = entries
        assert work["analysis"]["regular"] == 8.0
        assert work["analysis"]["earned"]["tier1_premium"] == 50.0
        assert brk["type"] == "BREAK"
        assert brk["analysis"] is None

    def test_summary(self):
        results, date_range = _make_results()
        summary = generate_audit_dict(results, date_range)["summary"]
        assert summary["total_workers"] == 1
        assert summary["total_hours"] == 11.0

    def test_range_derived_from_results(self):
        results, _ = _make_results()
        assert generate_audit_dict(results)["date_range"]["start"] == "2024-01-01"
        assert generate_audit_dict([])["date_range"]["start"] is None


class TestAuditFile:
    def test_writes_json(self, tmp_path):
        results, date_range = _make_results()
        path = generate_audit(results, tmp_path / "audit.json", date_range)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["workers"][0]["worker_id"] == "u1"

    def test_decimal_encoder(self):
        assert json.dumps({"x": Decimal("1.25")}, cls=DecimalEncoder) == '{"x": 1.25}'
