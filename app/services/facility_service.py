"""
app/services/facility_service.py

Facility and area directories, breakdown-key ordering and drill-down.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from app.domain.indicator import FacilityDetail, IndicatorSummary
from app.services.aggregation_service import calculate_percentage
from kpi.base import RawRecord
from kpi.registry import ValueResolver

SUBDISTRICT_CODE_LENGTH = 6


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------


def parse_facility_directory(rows: Iterable[Any] | None) -> dict[str, FacilityDetail]:
    """
    Parse the facility sheet into ``code -> FacilityDetail``.

    The sheet has no reliable headers, so columns are read by position:
    code, name, area-group id (optional). Rows with fewer than two
    columns or a blank code are skipped.
    """

    directory: dict[str, FacilityDetail] = {}
    for row in rows or ():
        if not isinstance(row, Mapping):
            continue
        values = list(row.values())
        if len(values) < 2:
            continue
        code = str(values[0]).strip()
        if not code:
            continue
        area_group_id = str(values[2]).strip() if len(values) >= 3 else ""
        directory[code] = FacilityDetail(code=code, name=str(values[1]).strip(), area_group_id=area_group_id)
    return directory


def parse_area_directory(rows: Iterable[Any] | None) -> dict[str, str]:
    """
    Parse the area sheet into ``id -> name_th``.
    """

    directory: dict[str, str] = {}
    for row in rows or ():
        if not isinstance(row, Mapping):
            continue
        area_id = row.get("id")
        name = row.get("name_th")
        if area_id and name:
            directory[str(area_id)] = str(name)
    return directory


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def order_breakdown_keys(
    summaries: Iterable[IndicatorSummary],
    facilities: Mapping[str, FacilityDetail] | None = None,
) -> list[str]:
    """
    Return the union of breakdown keys grouped by area then code.

    Keys whose facility has an area-group id sort by (area-group id, code);
    keys without one (unknown facilities, bare area codes) follow in code
    order.
    """

    facilities = facilities or {}
    keys: set[str] = set()
    for summary in summaries:
        keys.update(summary.breakdown)

    def sort_key(code: str) -> tuple[int, str, str]:
        detail = facilities.get(code)
        group = detail.area_group_id if detail else ""
        return (0 if group else 1, group, code)

    return sorted(keys, key=sort_key)


# ---------------------------------------------------------------------------
# Drill-down
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DrillDownRow:
    """
    One source row with its resolved values.
    """

    facility_code: str | None
    area_code: str | None
    area_name: str | None
    target: float
    result: float
    percentage: float
    report_timestamp: str | None


@dataclass(frozen=True)
class DrillDownResult:
    """
    Rows of one indicator restricted to a set of facility keys.
    """

    indicator_id: str
    title: str
    threshold: float
    rows: list[DrillDownRow]
    total_target: float
    total_result: float
    percentage: float


def drill_down(
    summary: IndicatorSummary,
    facility_keys: Collection[str] | None = None,
    *,
    area_names: Mapping[str, str] | None = None,
    resolver: ValueResolver | None = None,
) -> DrillDownResult:
    """
    Resolve the rows of *summary* that belong to *facility_keys*.

    A row matches when its ``hospcode`` or ``areacode`` is one of the
    keys. No keys selects every row (district overview).
    """

    area_names = area_names or {}
    resolver = resolver or ValueResolver()
    selected = set(facility_keys or ())

    rows: list[DrillDownRow] = []
    total_target = 0.0
    total_result = 0.0
    for row in summary.rows:
        record = RawRecord(row)
        if selected and record.facility_code not in selected and record.area_code not in selected:
            continue
        pair = resolver.resolve(record, summary.indicator_id)
        total_target += pair.target
        total_result += pair.result
        area_code = record.area_code
        area_name = None
        if area_code and len(area_code) >= SUBDISTRICT_CODE_LENGTH:
            area_name = area_names.get(area_code[:SUBDISTRICT_CODE_LENGTH])
        rows.append(
            DrillDownRow(
                facility_code=record.facility_code,
                area_code=area_code,
                area_name=area_name,
                target=pair.target,
                result=pair.result,
                percentage=calculate_percentage(pair.target, pair.result),
                report_timestamp=record.report_timestamp,
            )
        )

    return DrillDownResult(
        indicator_id=summary.indicator_id,
        title=summary.title,
        threshold=summary.threshold,
        rows=rows,
        total_target=total_target,
        total_result=total_result,
        percentage=calculate_percentage(total_target, total_result),
    )
