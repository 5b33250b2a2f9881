"""
app/services/export_service.py

Indicator × facility matrix export.

One row per indicator, flattened for spreadsheet consumption:

    index      1-based position
    title      indicator title
    target     "≥ <threshold>"
    result     total result for raw-count indicators, else percentage
    status     "pass" / "fail", empty for raw-count indicators
    <facility> one column per breakdown key, headed by facility name

Facility cells
--------------
- no breakdown entry        → "-"
- raw-count indicator       → the facility's result count
- facility target of zero   → "-"
- otherwise                 → facility percentage rounded to 2 decimals

Cell status
-----------
Ratio cells are judged "pass" or "fail" against the indicator threshold.
The district verdict is the ``status`` column after ``result``; facility
verdicts are returned in ``statuses``, one dict per row keyed like the
row. Raw-count indicators and "-" cells have no status.

No HTTP logic lives here; the router handles serialisation.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from app.domain.indicator import FacilityDetail, IndicatorSummary
from app.services.facility_service import order_breakdown_keys

NO_DATA = "-"
PASS = "pass"
FAIL = "fail"


@dataclass
class MatrixExport:
    """
    Flat tabular data ready for CSV or JSON serialisation.

    Attributes
    ----------
    rows:   Flat dict per indicator keyed by ``fields``.
    fields: Ordered column keys.
    headers: Display header per column key.
    statuses: Per row, pass/fail verdict for each judged cell.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    statuses: list[dict[str, str]] = field(default_factory=list)


def _format_threshold(threshold: float) -> str:
    value = int(threshold) if float(threshold).is_integer() else threshold
    return f"≥ {value}"


def _verdict(percentage: float, threshold: float) -> str:
    return PASS if percentage >= threshold else FAIL


def _facility_status(summary: IndicatorSummary, key: str) -> str | None:
    entry = summary.breakdown.get(key)
    if entry is None or summary.is_raw_count or entry.target == 0:
        return None
    return _verdict(entry.percentage, summary.threshold)


def _facility_cell(summary: IndicatorSummary, key: str) -> Any:
    entry = summary.breakdown.get(key)
    if entry is None:
        return NO_DATA
    if summary.is_raw_count:
        return entry.result
    if entry.target == 0:
        return NO_DATA
    return round(entry.percentage, 2)


def build_matrix_export(
    summaries: Sequence[IndicatorSummary],
    facilities: Mapping[str, FacilityDetail] | None = None,
) -> MatrixExport:
    """
    Flatten *summaries* into an indicator × facility matrix.
    """

    facilities = facilities or {}
    facility_keys = order_breakdown_keys(summaries, facilities)

    headers: dict[str, str] = {
        "index": "#",
        "title": "Indicator",
        "target": "Target",
        "result": "Result (%)",
        "status": "Status",
    }
    for key in facility_keys:
        detail = facilities.get(key)
        headers[key] = detail.name if detail and detail.name else key

    rows: list[dict[str, Any]] = []
    statuses: list[dict[str, str]] = []
    for index, summary in enumerate(summaries, start=1):
        row: dict[str, Any] = {
            "index": index,
            "title": summary.title,
            "target": _format_threshold(summary.threshold),
            "result": summary.total_result if summary.is_raw_count else round(summary.percentage, 2),
            "status": "" if summary.is_raw_count else _verdict(summary.percentage, summary.threshold),
        }
        row_status: dict[str, str] = {}
        if row["status"]:
            row_status["result"] = row["status"]
        for key in facility_keys:
            row[key] = _facility_cell(summary, key)
            verdict = _facility_status(summary, key)
            if verdict is not None:
                row_status[key] = verdict
        rows.append(row)
        statuses.append(row_status)

    return MatrixExport(rows=rows, fields=list(headers), headers=headers, statuses=statuses)
