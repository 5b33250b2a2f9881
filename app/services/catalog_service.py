"""
app/services/catalog_service.py

Indicator catalog parsing and config attachment.

The catalog sheet is operator-maintained; it provides each indicator's
title, pass/fail threshold, display order, optional reference link and
quarterly flag. Computed aggregates are joined to it by identifier.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from app.domain.indicator import (
    DEFAULT_ORDER,
    DEFAULT_THRESHOLD,
    AggregateResult,
    IndicatorConfig,
    IndicatorSummary,
)
from kpi.base import coerce_number

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown KPI"
ANNUAL_LABEL = "annual"
_TRUTHY_STRINGS = frozenset({"1", "true", "yes", "y", "on", "quarterly"})


def _parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_STRINGS
    return False


def _parse_order(value: Any) -> int:
    if value in (None, "", 0):
        return DEFAULT_ORDER
    return int(coerce_number(value, float(DEFAULT_ORDER)))


def parse_catalog(rows: Iterable[Any] | None) -> list[IndicatorConfig]:
    """
    Parse catalog sheet rows into configs sorted by ``order``.

    Rows without a ``table_name`` are dropped. Ties keep sheet order.
    """

    configs: list[IndicatorConfig] = []
    for row in rows or ():
        if not isinstance(row, Mapping):
            continue
        indicator_id = str(row.get("table_name") or "").strip()
        if not indicator_id:
            continue
        link = str(row.get("link") or "").strip() or None
        quarterly_raw = row.get("quarterly", row.get("isQuarterly"))
        configs.append(
            IndicatorConfig(
                indicator_id=indicator_id,
                title=str(row.get("title") or "").strip() or UNKNOWN_TITLE,
                threshold=coerce_number(row.get("target")),
                order=_parse_order(row.get("order")),
                link=link,
                quarterly=_parse_flag(quarterly_raw),
            )
        )

    configs.sort(key=lambda config: config.order)
    logger.debug("Parsed %d catalog entries", len(configs))
    return configs


def period_label(is_quarterly: bool, current_quarter: int | None) -> str:
    """
    Return the reporting-period label for an indicator.

    Quarterly indicators with a known quarter are cumulative over
    ``3 * quarter`` months; everything else is annual.
    """

    if is_quarterly and current_quarter and current_quarter > 0:
        return f"cumulative {current_quarter * 3} months (Q{current_quarter})"
    return ANNUAL_LABEL


class CatalogResolver:
    """
    Overlay catalog metadata onto computed aggregates.

    Parameters
    ----------
    default_threshold:
        Threshold used when an indicator has no catalog entry or a
        non-positive configured threshold.
    """

    def __init__(self, *, default_threshold: float = DEFAULT_THRESHOLD) -> None:
        self._default_threshold = default_threshold

    def attach_config(
        self,
        aggregate: AggregateResult,
        config: IndicatorConfig | None,
        *,
        period: str | None = None,
    ) -> IndicatorSummary:
        """
        Build an :class:`IndicatorSummary` from *aggregate* and *config*.

        Totals are copied unchanged. A missing config never drops the
        summary: the identifier doubles as the title, the default
        threshold applies and no link is set.
        """
        if config is None:
            logger.info("No catalog entry for indicator=%s; using defaults", aggregate.indicator_id)
            title = aggregate.indicator_id
            threshold = self._default_threshold
            link = None
            order = DEFAULT_ORDER
        else:
            title = config.title
            threshold = config.threshold if config.threshold > 0 else self._default_threshold
            link = config.link
            order = config.order

        return IndicatorSummary(
            indicator_id=aggregate.indicator_id,
            title=title,
            total_target=aggregate.total_target,
            total_result=aggregate.total_result,
            percentage=aggregate.percentage,
            rows=aggregate.rows,
            breakdown=aggregate.breakdown,
            threshold=threshold,
            link=link,
            order=order,
            period_label=period,
        )
