"""Pydantic request/response models for the Overtime API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    bundle: dict[str, Any] = Field(..., description="Input bundle (users, entries, profiles, ...)")
    strict: bool = False
    include_excel: bool = False


class WorkerSummary(BaseModel):
    worker_id: str
    worker_name: str
    expected_capacity: float
    regular_hours: float
    overtime_hours: float
    tier1_hours: float
    tier2_hours: float
    break_hours: float
    pto_hours: float
    total_hours: float
    billable_worked: float
    billable_ot: float
    non_billable_worked: float
    non_billable_ot: float
    holiday_count: int
    time_off_count: int
    amount: float
    ot_premium: float
    ot_premium_tier2: float
    amount_earned: float
    amount_cost: float
    profit: float


class DateRange(BaseModel):
    start: str | None = None
    end: str | None = None


class AnalysisSummary(BaseModel):
    total_workers: int
    total_hours: float
    regular_hours: float
    overtime_hours: float
    amount: float
    profit: float
    amount_display: str
    date_range: DateRange


class AnalyzeResponse(BaseModel):
    success: bool
    summary: AnalysisSummary | None = None
    workers: list[WorkerSummary] | None = None
    excel_base64: str | None = None
    audit: dict | None = None
    warnings: list[str] | None = None
    error_type: str | None = None
    errors: list[str] | None = None
