"""
app/services/row_filter.py

Geographic scoping of raw indicator rows.

Rows are kept only when their ``areacode`` is present and starts with the
scope prefix. This is a scoping step, not a data-quality check: dropped
rows are not reported.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from kpi.base import RawRecord


def is_in_scope(row: Any, scope_prefix: str) -> bool:
    if not isinstance(row, Mapping):
        return False
    area_code = RawRecord(row).area_code
    return area_code is not None and area_code.startswith(scope_prefix)


def filter_in_scope(rows: Iterable[Any] | None, scope_prefix: str) -> list[dict[str, Any]]:
    """
    Return the rows of *rows* whose area code starts with *scope_prefix*.
    """

    if not rows:
        return []
    return [dict(row) for row in rows if is_in_scope(row, scope_prefix)]
