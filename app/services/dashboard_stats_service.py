"""
app/services/dashboard_stats_service.py

Pass/fail statistics across indicator summaries.

With no facility selection an indicator passes when its district
percentage meets its threshold. With a selection the percentage is
recomputed from the selected breakdown entries only:

    ratio indicators      – sum(result) / sum(target) * 100 over selected keys
    raw-count indicators  – 100 when the selected results sum above zero, else 0
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass

from app.domain.indicator import IndicatorSummary
from app.services.aggregation_service import calculate_percentage


@dataclass(frozen=True)
class DashboardStats:
    """
    Headline counters for the dashboard.
    """

    total: int
    passed: int
    failed: int
    success_rate: float


def selected_percentage(summary: IndicatorSummary, facility_keys: Collection[str]) -> float:
    """
    Return the percentage of *summary* restricted to *facility_keys*.
    """

    entries = [summary.breakdown[key] for key in facility_keys if key in summary.breakdown]
    if summary.is_raw_count:
        return 100.0 if sum(entry.result for entry in entries) > 0 else 0.0
    return calculate_percentage(
        sum(entry.target for entry in entries),
        sum(entry.result for entry in entries),
    )


def compute_dashboard_stats(
    summaries: Sequence[IndicatorSummary],
    facility_keys: Collection[str] | None = None,
) -> DashboardStats:
    """
    Count passing and failing indicators, optionally for selected facilities.
    """

    passed = 0
    for summary in summaries:
        if facility_keys:
            percentage = selected_percentage(summary, facility_keys)
        else:
            percentage = summary.percentage
        if percentage >= summary.threshold:
            passed += 1

    total = len(summaries)
    return DashboardStats(
        total=total,
        passed=passed,
        failed=total - passed,
        success_rate=(passed / total) * 100 if total > 0 else 0.0,
    )
