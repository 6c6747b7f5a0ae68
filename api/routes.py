"""API routes for the Overtime Analysis Tool."""

from __future__ import annotations

import base64
import logging
import tempfile
from decimal import Decimal
from pathlib import Path

from fastapi import APIRouter

from overtime_tool.audit import generate_audit_dict
from overtime_tool.config import get_settings
from overtime_tool.engine import calculate_analysis, collect_diagnostics, validate_inputs
from overtime_tool.excel import generate_excel_report
from overtime_tool.models import BundleError, StrictValidationError, UserAnalysisResult
from overtime_tool.parsers import parse_bundle

from api.schemas import (
    AnalysisSummary,
    AnalyzeRequest,
    AnalyzeResponse,
    DateRange,
    WorkerSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


def _worker_summary(result: UserAnalysisResult) -> WorkerSummary:
    t = result.totals
    return WorkerSummary(
        worker_id=result.worker_id,
        worker_name=result.worker_name,
        expected_capacity=float(t.expected_capacity),
        regular_hours=float(t.regular),
        overtime_hours=float(t.overtime),
        tier1_hours=float(t.tier1_hours),
        tier2_hours=float(t.tier2_hours),
        break_hours=float(t.breaks),
        pto_hours=float(t.pto_hours),
        total_hours=float(t.total),
        billable_worked=float(t.billable_worked),
        billable_ot=float(t.billable_ot),
        non_billable_worked=float(t.non_billable_worked),
        non_billable_ot=float(t.non_billable_ot),
        holiday_count=t.holiday_count,
        time_off_count=t.time_off_count,
        amount=float(t.amount),
        ot_premium=float(t.ot_premium),
        ot_premium_tier2=float(t.ot_premium_tier2),
        amount_earned=float(t.amount_earned),
        amount_cost=float(t.amount_cost),
        profit=float(t.profit),
    )


@router.post("/analyze", response_model=AnalyzeResponse)
def analyze(request: AnalyzeRequest):
    """Run the overtime analysis on a JSON input bundle.

    Returns JSON with a summary, per-worker totals, the audit data and,
    when requested, a base64-encoded Excel report.
    """
    settings = get_settings()
    try:
        inputs = parse_bundle(request.bundle, params=settings.calc_params(), flags=settings.feature_flags())
    except BundleError as e:
        return AnalyzeResponse(success=False, error_type="bundle_error", errors=[str(e)])

    try:
        if request.strict:
            validate_inputs(inputs.entries, inputs.config, inputs.date_range)
            warnings: list[str] = []
        else:
            warnings = collect_diagnostics(inputs.entries, inputs.config, inputs.date_range)

        results = calculate_analysis(inputs.entries, inputs.config, inputs.date_range)
        audit = generate_audit_dict(results, inputs.date_range)

        excel_b64 = None
        if request.include_excel:
            with tempfile.TemporaryDirectory() as tmpdir:
                out_excel = Path(tmpdir) / "Overtime_Report.xlsx"
                generate_excel_report(results, out_excel)
                excel_b64 = base64.b64encode(out_excel.read_bytes()).decode("ascii")

        summary = AnalysisSummary(
            total_workers=len(results),
            total_hours=float(sum((r.totals.total for r in results), Decimal("0"))),
            regular_hours=float(sum((r.totals.regular for r in results), Decimal("0"))),
            overtime_hours=float(sum((r.totals.overtime for r in results), Decimal("0"))),
            amount=float(sum((r.totals.amount for r in results), Decimal("0"))),
            profit=float(sum((r.totals.profit for r in results), Decimal("0"))),
            amount_display=inputs.config.flags.amount_display.value,
            date_range=DateRange(**audit["date_range"]) if results else DateRange(),
        )

        return AnalyzeResponse(
            success=True,
            summary=summary,
            workers=[_worker_summary(r) for r in results],
            excel_base64=excel_b64,
            audit=audit,
            warnings=warnings,
        )

    except StrictValidationError as e:
        return AnalyzeResponse(
            success=False,
            error_type="validation_error",
            errors=e.errors,
        )
    except Exception as e:
        logger.exception("Analysis failed")
        return AnalyzeResponse(
            success=False,
            error_type="processing_error",
            errors=[str(e)],
        )
