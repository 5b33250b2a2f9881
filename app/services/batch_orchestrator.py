"""
app/services/batch_orchestrator.py

Batch assembly of indicator summaries.

Wires RowFilter → AggregationService → CatalogResolver for every
indicator in one pass and derives freshness metadata:

    row_filter          – keep rows inside the configured area scope
    AggregationService  – per-row value strategy, totals and breakdown
    CatalogResolver     – title, threshold, link, order and period label

Failure contract
----------------
The orchestrator never partially fails. Missing row data yields an empty
row set; an unexpected error while building one indicator is logged and
replaced with a zero-valued summary so the rest of the batch survives.

Ordering
--------
Summaries follow catalog order. Identifiers that appear in the row
payload without a catalog entry are appended afterwards, in payload
order, with default threshold and no link.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from app.domain.indicator import (
    AggregateResult,
    BatchMeta,
    BatchPayload,
    DashboardSnapshot,
    FacilityDetail,
    IndicatorConfig,
    IndicatorSummary,
)
from app.logging_utils import log_event
from app.services.aggregation_service import AggregationService
from app.services.catalog_service import CatalogResolver, period_label
from app.services.row_filter import filter_in_scope
from kpi.base import FIELD_REPORT_TIMESTAMP, coerce_number
from kpi.registry import ValueResolver

logger = logging.getLogger(__name__)

_TIMESTAMP_PATTERN = re.compile(r"^\d{12}$")

THAI_MONTHS: tuple[str, ...] = (
    "มกราคม",
    "กุมภาพันธ์",
    "มีนาคม",
    "เมษายน",
    "พฤษภาคม",
    "มิถุนายน",
    "กรกฎาคม",
    "สิงหาคม",
    "กันยายน",
    "ตุลาคม",
    "พฤศจิกายน",
    "ธันวาคม",
)
BUDDHIST_ERA_OFFSET = 543


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


def _rows_or_empty(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, Mapping)]


def parse_batch_payload(payload: Any) -> BatchPayload:
    """
    Normalize the bulk row payload.

    Accepts either a flat ``{indicator_id: rows}`` mapping or the envelope
    ``{"data": {...}, "meta": {"current_quarter": n, "kpi_config": [...]}}``.
    Row sets that are not lists become empty lists; anything that is not
    a mapping becomes an empty payload.
    """

    if not isinstance(payload, Mapping):
        return BatchPayload()

    data = payload.get("data")
    raw_meta = payload.get("meta")
    if isinstance(data, Mapping) and isinstance(raw_meta, Mapping):
        quarterly: set[str] = set()
        kpi_config = raw_meta.get("kpi_config")
        for entry in kpi_config if isinstance(kpi_config, list) else ():
            if isinstance(entry, Mapping) and entry.get("isQuarterly") and entry.get("table"):
                quarterly.add(str(entry["table"]))
        quarter = int(coerce_number(raw_meta.get("current_quarter")))
        meta = BatchMeta(current_quarter=max(quarter, 0), quarterly_indicators=frozenset(quarterly))
    else:
        data = payload
        meta = BatchMeta()

    rows_by_indicator = {str(key): _rows_or_empty(rows) for key, rows in data.items()}
    return BatchPayload(rows_by_indicator=rows_by_indicator, meta=meta)


# ---------------------------------------------------------------------------
# Freshness
# ---------------------------------------------------------------------------


def latest_timestamp(rows: Iterable[Mapping[str, Any]]) -> str | None:
    """Return the maximum non-empty ``date_com`` string, compared as text."""
    latest: str | None = None
    for row in rows:
        value = row.get(FIELD_REPORT_TIMESTAMP)
        if value is None:
            continue
        text = str(value).strip()
        if text and (latest is None or text > latest):
            latest = text
    return latest


def parse_report_timestamp(value: str | None) -> datetime | None:
    """
    Parse a ``YYYYMMDDHHMM`` code; ``None`` when it does not match or is invalid.
    """

    if value is None or not _TIMESTAMP_PATTERN.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y%m%d%H%M")
    except ValueError:
        return None


def format_freshness(moment: datetime) -> str:
    """
    Format *moment* for display, e.g. ``2 กุมภาพันธ์ 2569 12:45 น.``.
    """

    month = THAI_MONTHS[moment.month - 1]
    year = moment.year + BUDDHIST_ERA_OFFSET
    return f"{moment.day} {month} {year} {moment:%H:%M} น."


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class BatchOrchestrator:
    """
    Stateless batch transform from catalog + row payload to summaries.

    Parameters
    ----------
    scope_prefix:
        Area-code prefix passed to the row filter.
    aggregation_service:
        Aggregator; defaults to one with the built-in strategy table.
    catalog_resolver:
        Config overlay; defaults to a threshold of 80.
    """

    def __init__(
        self,
        *,
        scope_prefix: str,
        aggregation_service: AggregationService | None = None,
        catalog_resolver: CatalogResolver | None = None,
    ) -> None:
        self._scope_prefix = scope_prefix
        self._aggregation = aggregation_service or AggregationService()
        self._catalog = catalog_resolver or CatalogResolver()

    @property
    def resolver(self) -> ValueResolver:
        """Strategy dispatcher used for every summary in the batch."""
        return self._aggregation.resolver

    def build_all(
        self,
        configs: Sequence[IndicatorConfig],
        rows_by_indicator: Mapping[str, Any] | None,
        meta: BatchMeta | None = None,
        *,
        facilities: Mapping[str, FacilityDetail] | None = None,
        area_names: Mapping[str, str] | None = None,
    ) -> DashboardSnapshot:
        """
        Build every indicator summary plus freshness metadata.
        """
        meta = meta or BatchMeta()
        rows_by_indicator = rows_by_indicator or {}

        summaries: list[IndicatorSummary] = []
        catalogued: set[str] = set()
        for config in configs:
            catalogued.add(config.indicator_id)
            rows = rows_by_indicator.get(config.indicator_id)
            summaries.append(self._build_one(config.indicator_id, rows, config, meta))

        for indicator_id, rows in rows_by_indicator.items():
            if indicator_id in catalogued:
                continue
            summaries.append(self._build_one(indicator_id, rows, None, meta))

        latest = latest_timestamp(row for summary in summaries for row in summary.rows)
        last_updated = parse_report_timestamp(latest)

        log_event(
            logger,
            logging.INFO,
            "kpi_batch_built",
            indicators=len(summaries),
            uncatalogued=len(summaries) - len(configs),
            current_quarter=meta.current_quarter,
            last_updated=last_updated,
        )
        return DashboardSnapshot(
            summaries=summaries,
            last_updated=last_updated,
            last_updated_display=format_freshness(last_updated) if last_updated else None,
            current_quarter=meta.current_quarter,
            facilities=dict(facilities or {}),
            area_names=dict(area_names or {}),
        )

    def _build_one(
        self,
        indicator_id: str,
        rows: Any,
        config: IndicatorConfig | None,
        meta: BatchMeta,
    ) -> IndicatorSummary:
        is_quarterly = (config is not None and config.quarterly) or indicator_id in meta.quarterly_indicators
        label = period_label(is_quarterly, meta.current_quarter)

        try:
            scoped = filter_in_scope(_rows_or_empty(rows), self._scope_prefix)
            aggregate = self._aggregation.aggregate(scoped, indicator_id)
        except Exception as exc:
            logger.exception("Failed to aggregate indicator=%s error=%s", indicator_id, exc)
            aggregate = AggregateResult(
                indicator_id=indicator_id,
                total_target=0.0,
                total_result=0.0,
                percentage=0.0,
            )
        return self._catalog.attach_config(aggregate, config, period=label)
