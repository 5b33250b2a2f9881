"""
app/schemas package marker.
"""

from app.schemas.dashboard import (
    BreakdownEntryResponse,
    DashboardSnapshotResponse,
    DashboardStatsResponse,
    DrillDownResponse,
    DrillDownRowResponse,
    IndicatorSummaryResponse,
)

__all__ = [
    "BreakdownEntryResponse",
    "DashboardSnapshotResponse",
    "DashboardStatsResponse",
    "DrillDownResponse",
    "DrillDownRowResponse",
    "IndicatorSummaryResponse",
]
