"""
app/services/aggregation_service.py

Aggregation layer for indicator rows.

Reduces a row set into district-wide totals and a per-key breakdown,
using the indicator's value strategy for every row.

Breakdown keys
--------------
key = ``hospcode`` when present, else ``areacode``. Rows without either
key still count towards the totals but are left out of the breakdown.
Buckets sharing a key are summed, never overwritten.

Percentages
-----------
percentage = result / target * 100 when target > 0, else 0.

The total percentage is rounded to two decimals; breakdown percentages are
left unrounded so that callers can re-aggregate them.

No filtering happens here. Callers scope rows first (see
:mod:`app.services.row_filter`).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from app.domain.indicator import AggregateResult, BreakdownEntry
from kpi.base import RawRecord
from kpi.registry import ValueResolver

logger = logging.getLogger(__name__)


def calculate_percentage(target: float, result: float) -> float:
    """
    Return ``result / target * 100``, or ``0.0`` when *target* is not positive.
    """

    if target > 0:
        return (result / target) * 100
    return 0.0


class AggregationService:
    """
    Stateless aggregation of indicator rows.

    Parameters
    ----------
    resolver:
        Strategy dispatcher; defaults to the built-in strategy table.
    """

    def __init__(self, resolver: ValueResolver | None = None) -> None:
        self._resolver = resolver or ValueResolver()

    @property
    def resolver(self) -> ValueResolver:
        return self._resolver

    def aggregate(self, rows: Iterable[Mapping[str, Any]] | None, indicator_id: str) -> AggregateResult:
        """
        Aggregate *rows* for *indicator_id*.

        Returns
        -------
        AggregateResult
            Totals, rounded total percentage, the rows themselves and the
            per-key breakdown. An empty or ``None`` row set yields zeros.
        """
        materialized = [dict(row) for row in rows or () if isinstance(row, Mapping)]

        total_target = 0.0
        total_result = 0.0
        buckets: dict[str, list[float]] = {}

        for row in materialized:
            record = RawRecord(row)
            pair = self._resolver.resolve(record, indicator_id)
            total_target += pair.target
            total_result += pair.result

            key = record.breakdown_key
            if key is None:
                continue
            bucket = buckets.setdefault(key, [0.0, 0.0])
            bucket[0] += pair.target
            bucket[1] += pair.result

        breakdown = {
            key: BreakdownEntry(
                target=target,
                result=result,
                percentage=calculate_percentage(target, result),
            )
            for key, (target, result) in buckets.items()
        }

        percentage = round(calculate_percentage(total_target, total_result), 2)
        logger.debug(
            "aggregate indicator=%s rows=%d keys=%d target=%.2f result=%.2f pct=%.2f",
            indicator_id,
            len(materialized),
            len(breakdown),
            total_target,
            total_result,
            percentage,
        )
        return AggregateResult(
            indicator_id=indicator_id,
            total_target=total_target,
            total_result=total_result,
            percentage=percentage,
            rows=materialized,
            breakdown=breakdown,
        )
