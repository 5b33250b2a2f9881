"""
app/schemas/dashboard.py

Response schemas for dashboard endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.domain.indicator import DashboardSnapshot, IndicatorSummary
from app.services.dashboard_stats_service import DashboardStats
from app.services.facility_service import DrillDownResult


class BreakdownEntryResponse(BaseModel):
    """
    Totals for one facility or area key.
    """

    target: float
    result: float
    percentage: float


class IndicatorSummaryResponse(BaseModel):
    """
    API response model for one indicator summary.
    """

    indicator_id: str
    title: str
    total_target: float
    total_result: float
    percentage: float
    is_raw_count: bool
    passed: bool
    threshold: float
    link: str | None = None
    order: int
    period_label: str | None = None
    breakdown: dict[str, BreakdownEntryResponse] = Field(default_factory=dict)
    rows: list[dict[str, Any]] | None = None

    @classmethod
    def from_summary(cls, summary: IndicatorSummary, *, include_rows: bool = False) -> IndicatorSummaryResponse:
        return cls(
            indicator_id=summary.indicator_id,
            title=summary.title,
            total_target=summary.total_target,
            total_result=summary.total_result,
            percentage=summary.percentage,
            is_raw_count=summary.is_raw_count,
            passed=summary.passed,
            threshold=summary.threshold,
            link=summary.link,
            order=summary.order,
            period_label=summary.period_label,
            breakdown={
                key: BreakdownEntryResponse(
                    target=entry.target,
                    result=entry.result,
                    percentage=entry.percentage,
                )
                for key, entry in summary.breakdown.items()
            },
            rows=list(summary.rows) if include_rows else None,
        )


class DashboardSnapshotResponse(BaseModel):
    """
    API response model for a full dashboard refresh.
    """

    summaries: list[IndicatorSummaryResponse]
    last_updated: datetime | None = None
    last_updated_display: str | None = None
    current_quarter: int = Field(0, ge=0)

    @classmethod
    def from_snapshot(cls, snapshot: DashboardSnapshot, *, include_rows: bool = False) -> DashboardSnapshotResponse:
        return cls(
            summaries=[
                IndicatorSummaryResponse.from_summary(summary, include_rows=include_rows)
                for summary in snapshot.summaries
            ],
            last_updated=snapshot.last_updated,
            last_updated_display=snapshot.last_updated_display,
            current_quarter=snapshot.current_quarter,
        )


class DashboardStatsResponse(BaseModel):
    """
    Headline pass/fail counters.
    """

    total: int = Field(..., ge=0)
    passed: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    success_rate: float
    facilities: list[str] = Field(default_factory=list)

    @classmethod
    def from_stats(cls, stats: DashboardStats, facilities: list[str]) -> DashboardStatsResponse:
        return cls(
            total=stats.total,
            passed=stats.passed,
            failed=stats.failed,
            success_rate=stats.success_rate,
            facilities=facilities,
        )


class DrillDownRowResponse(BaseModel):
    facility_code: str | None = None
    facility_name: str | None = None
    area_code: str | None = None
    area_name: str | None = None
    target: float
    result: float
    percentage: float
    report_timestamp: str | None = None


class DrillDownResponse(BaseModel):
    """
    Per-row view of one indicator for selected facilities.
    """

    indicator_id: str
    title: str
    threshold: float
    total_target: float
    total_result: float
    percentage: float
    rows: list[DrillDownRowResponse]

    @classmethod
    def from_result(cls, result: DrillDownResult, facility_names: dict[str, str]) -> DrillDownResponse:
        return cls(
            indicator_id=result.indicator_id,
            title=result.title,
            threshold=result.threshold,
            total_target=result.total_target,
            total_result=result.total_result,
            percentage=result.percentage,
            rows=[
                DrillDownRowResponse(
                    facility_code=row.facility_code,
                    facility_name=facility_names.get(row.facility_code or ""),
                    area_code=row.area_code,
                    area_name=row.area_name,
                    target=row.target,
                    result=row.result,
                    percentage=row.percentage,
                    report_timestamp=row.report_timestamp,
                )
                for row in result.rows
            ],
        )
