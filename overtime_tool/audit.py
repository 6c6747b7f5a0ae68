"""Layer 6: Audit Engine.

Generates full traceability JSON output.
"""

from __future__ import annotations

import json
from dataclasses import fields
from decimal import Decimal
from pathlib import Path
from typing import Optional

from overtime_tool.models import (
    AmountBreakdown,
    DateRange,
    DayAnalysis,
    EntryAnalysis,
    Totals,
    UserAnalysisResult,
)


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        return super().default(obj)


def _breakdown_dict(b: AmountBreakdown) -> dict:
    return {
        "rate": float(b.rate),
        "regular": float(b.regular),
        "overtime_base": float(b.overtime_base),
        "tier1_premium": float(b.tier1_premium),
        "tier2_premium": float(b.tier2_premium),
        "total": float(b.total),
    }


def _analysis_dict(a: EntryAnalysis) -> dict:
    return {
        "classification": a.entry_class.value,
        "hours": float(a.duration),
        "regular": float(a.regular),
        "overtime": float(a.overtime),
        "tier1_hours": float(a.tier1_hours),
        "tier2_hours": float(a.tier2_hours),
        "is_billable": a.is_billable,
        "multiplier": float(a.multiplier),
        "tier2_multiplier": float(a.tier2_multiplier),
        "tags": list(a.tags),
        "amount": float(a.amount),
        "earned": _breakdown_dict(a.earned),
        "cost": _breakdown_dict(a.cost),
        "profit": _breakdown_dict(a.profit),
    }


def _day_dict(day: DayAnalysis) -> dict:
    meta = day.meta
    return {
        "date": day.date.isoformat(),
        "capacity": float(meta.capacity),
        "base_capacity": float(meta.base_capacity),
        "is_holiday": meta.is_holiday,
        "holiday_name": meta.holiday_name,
        "is_non_working": meta.is_non_working,
        "is_time_off": meta.is_time_off,
        "time_off_hours": float(meta.time_off_hours),
        "entries": [
            {
                "id": e.interval.id,
                "start": e.interval.start,
                "type": e.interval.type_tag,
                "description": e.interval.description,
                "analysis": _analysis_dict(e.analysis) if e.analysis else None,
            }
            for e in day.entries
        ],
    }


def totals_dict(totals: Totals) -> dict:
    return {
        f.name: (float(v) if isinstance(v, Decimal) else v)
        for f in fields(totals)
        for v in [getattr(totals, f.name)]
    }


def generate_audit_dict(
    results: list[UserAnalysisResult],
    date_range: Optional[DateRange] = None,
) -> dict:
    """Build audit dictionary from analysis results (no file I/O)."""
    all_dates = sorted({d for r in results for d in r.days})
    workers = [
        {
            "worker_id": r.worker_id,
            "worker_name": r.worker_name,
            "totals": totals_dict(r.totals),
            "days": [_day_dict(r.days[d]) for d in r.dates],
        }
        for r in results
    ]
    start = date_range.start if date_range else (all_dates[0] if all_dates else None)
    end = date_range.end if date_range else (all_dates[-1] if all_dates else None)

    return {
        "workers": workers,
        "summary": {
            "total_workers": len(results),
            "total_hours": float(sum((r.totals.total for r in results), Decimal("0"))),
            "regular_hours": float(sum((r.totals.regular for r in results), Decimal("0"))),
            "overtime_hours": float(sum((r.totals.overtime for r in results), Decimal("0"))),
            "tier2_hours": float(sum((r.totals.tier2_hours for r in results), Decimal("0"))),
            "amount": float(sum((r.totals.amount for r in results), Decimal("0"))),
            "profit": float(sum((r.totals.profit for r in results), Decimal("0"))),
        },
        "date_range": {
            "start": start.isoformat() if start else None,
            "end": end.isoformat() if end else None,
            "total_dates": len(all_dates),
        },
    }


def generate_audit(
    results: list[UserAnalysisResult],
    output_path: str | Path,
    date_range: Optional[DateRange] = None,
) -> Path:
    """Generate audit JSON file from analysis results."""
    output_path = Path(output_path)
    audit = generate_audit_dict(results, date_range)
    output_path.write_text(json.dumps(audit, indent=2, cls=DecimalEncoder), encoding='utf-8')
    return output_path
