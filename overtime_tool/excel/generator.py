"""Layer 7: Excel Report Generator.

Writes a fresh workbook with a per-worker Summary sheet and a per-interval
Detailed sheet. Excel formulas are NOT relied upon; all values are
pre-computed in Python.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from overtime_tool.engine.duration import resolve_duration_hours
from overtime_tool.models import AnalyzedInterval, DayAnalysis, UserAnalysisResult

SUMMARY_SHEET = "Summary"
DETAILED_SHEET = "Detailed"
HEADER_ROW = 1
DATA_START_ROW = 2
NO_ENTRIES = "(no entries)"

SUMMARY_COLUMNS = [
    "User", "Capacity", "Regular", "Overtime", "Tier1 OT", "Tier2 OT",
    "Breaks", "PTO", "Total", "Billable Worked", "Billable OT",
    "Non-Billable Worked", "Non-Billable OT", "Holidays", "Time Off Days",
    "Amount", "OT Premium", "Tier2 Premium", "Earned", "Cost", "Profit",
]

DETAILED_COLUMNS = [
    "Date", "User", "Description", "EffectiveCapacityHours", "RegularHours",
    "OvertimeHours", "Tier2Hours", "BillableWorkedHours", "BillableOTHours",
    "NonBillableWorkedHours", "NonBillableOTHours", "TotalHours", "Amount",
    "isHoliday", "holidayName", "isNonWorkingDay", "isTimeOff",
]

THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin'),
)

HEADER_FONT = Font(name='Calibri', size=11, bold=True)
DATA_FONT = Font(name='Calibri', size=11)
HEADER_FILL = PatternFill(start_color='D9E1F2', end_color='D9E1F2', fill_type='solid')
CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
DOLLAR_FORMAT = '_("$"* #,##0.00_);_("$"* \\(#,##0.00\\);_("$"* "-"??_);_(@_)'
HOURS_FORMAT = '0.00'

_FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def sanitize_text(value: object) -> str:
    """Prefix a quote so spreadsheet apps never evaluate user text as a formula."""
    if value is None:
        return ""
    text = str(value)
    if text.startswith(_FORMULA_PREFIXES):
        return "'" + text
    return text


def _write_header(ws, columns: list[str]) -> None:
    for col, label in enumerate(columns, start=1):
        cell = ws.cell(row=HEADER_ROW, column=col)
        cell.value = label
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = THIN_BORDER
        cell.alignment = CENTER_ALIGN
        ws.column_dimensions[get_column_letter(col)].width = max(12, len(label) + 2)
    ws.freeze_panes = ws.cell(row=DATA_START_ROW, column=1)


def _write_row(ws, row: int, values: list, money_cols: frozenset[int] = frozenset()) -> None:
    for col, value in enumerate(values, start=1):
        cell = ws.cell(row=row, column=col)
        if isinstance(value, Decimal):
            cell.value = float(value)
            cell.number_format = DOLLAR_FORMAT if col in money_cols else HOURS_FORMAT
        elif isinstance(value, str):
            cell.value = sanitize_text(value)
        else:
            cell.value = value
        cell.font = DATA_FONT
        cell.border = THIN_BORDER


def _summary_values(result: UserAnalysisResult) -> list:
    t = result.totals
    return [
        result.worker_name, t.expected_capacity, t.regular, t.overtime,
        t.tier1_hours, t.tier2_hours, t.breaks, t.pto_hours, t.total,
        t.billable_worked, t.billable_ot, t.non_billable_worked, t.non_billable_ot,
        t.holiday_count, t.time_off_count,
        t.amount, t.ot_premium, t.ot_premium_tier2,
        t.amount_earned, t.amount_cost, t.amount_profit,
    ]


_SUMMARY_MONEY = frozenset(range(SUMMARY_COLUMNS.index("Amount") + 1, len(SUMMARY_COLUMNS) + 1))
_DETAILED_MONEY = frozenset({DETAILED_COLUMNS.index("Amount") + 1})


def _entry_values(result: UserAnalysisResult, day: DayAnalysis, entry: AnalyzedInterval) -> list:
    meta = day.meta
    a = entry.analysis
    zero = Decimal("0")
    if a is not None:
        hours, regular, overtime, tier2, amount = a.duration, a.regular, a.overtime, a.tier2_hours, a.amount
        billable = a.is_billable
    else:
        hours = max(resolve_duration_hours(entry.interval), zero)
        regular, overtime, tier2, amount = hours, zero, zero, zero
        billable = entry.interval.billable
    return [
        day.date.isoformat(), result.worker_name, entry.interval.description or "",
        meta.capacity, regular, overtime, tier2,
        regular if billable else zero, overtime if billable else zero,
        zero if billable else regular, zero if billable else overtime,
        hours, amount,
        meta.is_holiday, meta.holiday_name, meta.is_non_working, meta.is_time_off,
    ]


def _placeholder_values(result: UserAnalysisResult, day: DayAnalysis) -> list:
    meta = day.meta
    zero = Decimal("0")
    return [
        day.date.isoformat(), result.worker_name, NO_ENTRIES,
        meta.capacity, zero, zero, zero, zero, zero, zero, zero, zero, zero,
        meta.is_holiday, meta.holiday_name, meta.is_non_working, meta.is_time_off,
    ]


def generate_excel_report(
    results: list[UserAnalysisResult],
    output_path: str | Path,
) -> Path:
    """Generate the Excel report from computed analysis results."""
    output_path = Path(output_path)

    wb = openpyxl.Workbook()
    summary = wb.active
    summary.title = SUMMARY_SHEET
    _write_header(summary, SUMMARY_COLUMNS)

    row = DATA_START_ROW
    for result in results:
        _write_row(summary, row, _summary_values(result), _SUMMARY_MONEY)
        row += 1

    # Grand total row
    if results:
        totals_row = ["TOTAL"]
        for col in range(2, len(SUMMARY_COLUMNS) + 1):
            column_values = [_summary_values(r)[col - 1] for r in results]
            totals_row.append(sum(column_values, Decimal("0")) if isinstance(column_values[0], Decimal)
                              else sum(column_values))
        _write_row(summary, row, totals_row, _SUMMARY_MONEY)
        for col in range(1, len(SUMMARY_COLUMNS) + 1):
            summary.cell(row=row, column=col).font = HEADER_FONT
    summary.column_dimensions['A'].width = 28

    detailed = wb.create_sheet(DETAILED_SHEET)
    _write_header(detailed, DETAILED_COLUMNS)
    row = DATA_START_ROW
    for result in results:
        for day_key in result.dates:
            day = result.days[day_key]
            if not day.entries:
                _write_row(detailed, row, _placeholder_values(result, day), _DETAILED_MONEY)
                row += 1
                continue
            for entry in day.entries:
                _write_row(detailed, row, _entry_values(result, day, entry), _DETAILED_MONEY)
                row += 1
    detailed.column_dimensions['C'].width = 40

    wb.save(str(output_path))
    return output_path
