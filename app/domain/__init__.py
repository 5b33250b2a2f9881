"""
app/domain package marker.
"""

from app.domain.indicator import (
    DEFAULT_THRESHOLD,
    AggregateResult,
    BatchMeta,
    BatchPayload,
    BreakdownEntry,
    DashboardSnapshot,
    FacilityDetail,
    IndicatorConfig,
    IndicatorSummary,
)

__all__ = [
    "DEFAULT_THRESHOLD",
    "AggregateResult",
    "BatchMeta",
    "BatchPayload",
    "BreakdownEntry",
    "DashboardSnapshot",
    "FacilityDetail",
    "IndicatorConfig",
    "IndicatorSummary",
]
