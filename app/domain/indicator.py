"""
app/domain/indicator.py

Domain models for indicator aggregation and dashboard assembly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

DEFAULT_THRESHOLD: float = 80.0
DEFAULT_ORDER: int = 999


@dataclass(frozen=True)
class BreakdownEntry:
    """
    Totals for one facility or area key within an indicator.
    """

    target: float
    result: float
    percentage: float


@dataclass(frozen=True)
class AggregateResult:
    """
    Aggregated totals of one indicator over a row set.
    """

    indicator_id: str
    total_target: float
    total_result: float
    percentage: float
    rows: list[dict[str, Any]] = field(default_factory=list)
    breakdown: dict[str, BreakdownEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class IndicatorConfig:
    """
    Operator-maintained catalog entry for one indicator.
    """

    indicator_id: str
    title: str
    threshold: float
    order: int = DEFAULT_ORDER
    link: str | None = None
    quarterly: bool = False


@dataclass(frozen=True)
class IndicatorSummary:
    """
    Aggregated view of one indicator with its catalog metadata attached.

    ``percentage`` is 0 when ``total_target`` is 0; such indicators are
    raw counts and present ``total_result`` instead of a ratio.
    """

    indicator_id: str
    title: str
    total_target: float
    total_result: float
    percentage: float
    rows: list[dict[str, Any]] = field(default_factory=list)
    breakdown: dict[str, BreakdownEntry] = field(default_factory=dict)
    threshold: float = DEFAULT_THRESHOLD
    link: str | None = None
    order: int = DEFAULT_ORDER
    period_label: str | None = None

    @property
    def is_raw_count(self) -> bool:
        return self.total_target == 0

    @property
    def passed(self) -> bool:
        return self.percentage >= self.threshold


@dataclass(frozen=True)
class BatchMeta:
    """
    Metadata carried by the batch envelope.
    """

    current_quarter: int = 0
    quarterly_indicators: frozenset[str] = frozenset()


@dataclass(frozen=True)
class BatchPayload:
    """
    Normalized bulk row payload keyed by indicator identifier.
    """

    rows_by_indicator: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    meta: BatchMeta = field(default_factory=BatchMeta)


@dataclass(frozen=True)
class FacilityDetail:
    """
    Facility directory entry.
    """

    code: str
    name: str
    area_group_id: str = ""


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    Full output of one batch run.
    """

    summaries: list[IndicatorSummary]
    last_updated: datetime | None = None
    last_updated_display: str | None = None
    current_quarter: int = 0
    facilities: dict[str, FacilityDetail] = field(default_factory=dict)
    area_names: dict[str, str] = field(default_factory=dict)

    def get(self, indicator_id: str) -> IndicatorSummary | None:
        for summary in self.summaries:
            if summary.indicator_id == indicator_id:
                return summary
        return None
