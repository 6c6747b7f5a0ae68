"""CLI entry point.

Usage:
    python -m overtime_tool \
        --input "bundle.json" \
        --start 2024-01-01 --end 2024-01-31 \
        --out "Overtime_Report.xlsx" \
        --audit-out "Audit.json" \
        --strict
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import Optional

import typer

from overtime_tool.models import AmountDisplay, BundleError, DateRange, StrictValidationError


def _parse_day(value: Optional[str], option: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        typer.echo(f"ERROR: {option} must be YYYY-MM-DD, got {value!r}", err=True)
        raise typer.Exit(1)


def generate(
    input_file: str = typer.Option(..., "--input", help="Path to the JSON input bundle"),
    start: Optional[str] = typer.Option(None, "--start", help="First date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, "--end", help="Last date (YYYY-MM-DD)"),
    out: Optional[str] = typer.Option(None, "--out", help="Output Excel file path"),
    audit_out: Optional[str] = typer.Option(None, "--audit-out", help="Output audit JSON file path"),
    amount_display: Optional[str] = typer.Option(
        None, "--amount-display", help="Headline amounts: earned, cost or profit",
    ),
    tiered: Optional[bool] = typer.Option(None, "--tiered/--no-tiered", help="Force tier-2 overtime on or off"),
    strict: bool = typer.Option(False, "--strict/--no-strict", help="Fail on any input diagnostic"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default from settings)"),
) -> None:
    """Analyse overtime and billable amounts from a JSON input bundle."""
    from dataclasses import replace

    from overtime_tool.audit import generate_audit
    from overtime_tool.config import get_settings
    from overtime_tool.engine import calculate_analysis, collect_diagnostics, validate_inputs
    from overtime_tool.excel import generate_excel_report
    from overtime_tool.logging_config import setup_logging
    from overtime_tool.parsers import load_bundle

    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_json, stream=sys.stderr)

    start_day = _parse_day(start, "--start")
    end_day = _parse_day(end, "--end")
    if (start_day is None) != (end_day is None):
        typer.echo("ERROR: --start and --end must be given together", err=True)
        raise typer.Exit(1)

    typer.echo(f"Input bundle: {input_file}")
    typer.echo(f"Strict mode: {strict}")
    typer.echo("")

    try:
        inputs = load_bundle(input_file, params=settings.calc_params(), flags=settings.feature_flags())
    except BundleError as e:
        typer.echo(f"FATAL ERROR: {e}", err=True)
        raise typer.Exit(1)

    config = inputs.config
    flag_changes = {}
    if amount_display is not None:
        flag_changes["amount_display"] = AmountDisplay.parse(amount_display)
    if tiered is not None:
        flag_changes["enable_tiered_ot"] = tiered
    if flag_changes:
        config = replace(config, flags=replace(config.flags, **flag_changes))

    date_range = DateRange(start_day, end_day) if start_day else inputs.date_range

    typer.echo(f"  Entries: {len(inputs.entries)}")
    typer.echo(f"  Users:   {len(config.users)}")
    if date_range:
        typer.echo(f"  Range:   {date_range.start} .. {date_range.end}")

    if strict:
        try:
            validate_inputs(inputs.entries, config, date_range)
            typer.echo("  Validation PASSED")
        except StrictValidationError as e:
            typer.echo("\nSTRICT VALIDATION FAILED:", err=True)
            for error in e.errors:
                typer.echo(f"  ERROR: {error}", err=True)
            typer.echo("\nReport NOT generated (strict mode).", err=True)
            raise typer.Exit(1)
    else:
        for warning in collect_diagnostics(inputs.entries, config, date_range):
            typer.echo(f"  WARNING: {warning}", err=True)

    typer.echo("\nCalculating overtime...")
    results = calculate_analysis(inputs.entries, config, date_range)

    for r in results:
        t = r.totals
        typer.echo(f"  {r.worker_name} ({r.worker_id}):")
        typer.echo(f"    Regular:  {t.regular}h   Overtime: {t.overtime}h (tier2 {t.tier2_hours}h)")
        typer.echo(f"    Capacity: {t.expected_capacity}h   Total: {t.total}h")
        typer.echo(f"    Amount:   ${t.amount} (OT premium ${t.ot_premium + t.ot_premium_tier2})")
        typer.echo(f"    Profit:   ${t.profit}")

    if not results:
        typer.echo("  No workers or dated entries to analyse.")

    if out:
        out_path = Path(out)
        typer.echo(f"\nGenerating Excel report: {out_path}...")
        generate_excel_report(results, out_path)
        typer.echo(f"  Excel report saved to: {out_path}")

    if audit_out:
        audit_path = Path(audit_out)
        typer.echo(f"\nGenerating audit file: {audit_path}...")
        generate_audit(results, audit_path, date_range)
        typer.echo(f"  Audit file saved to: {audit_path}")

    typer.echo("\nSUCCESS: Overtime analysis complete.")


def main() -> None:
    typer.run(generate)


if __name__ == "__main__":
    main()
