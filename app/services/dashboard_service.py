"""
app/services/dashboard_service.py

Dashboard refresh: fetch every sheet, then run the batch orchestrator.

The catalog, facility directory, area directory and batch payload are
fetched in parallel. Failure handling per source:

    catalog / facility / area   – logged, degraded to empty
    batch payload               – total retrieval failure, raises
                                  DashboardDataUnavailableError

Everything after retrieval is a pure, in-memory transform.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Any

from app.config import (
    get_dashboard_settings,
    get_external_http_settings,
    get_scope_settings,
    get_sheet_api_settings,
)
from app.connectors.base import ConnectorRequestError
from app.connectors.sheet_api_connector import SheetAPIConnector
from app.domain.indicator import DashboardSnapshot
from app.logging_utils import log_event
from app.services.batch_orchestrator import BatchOrchestrator, parse_batch_payload
from app.services.catalog_service import CatalogResolver, parse_catalog
from app.services.facility_service import parse_area_directory, parse_facility_directory
from kpi.registry import ValueResolver

logger = logging.getLogger(__name__)


class DashboardDataUnavailableError(RuntimeError):
    """
    Raised when the bulk row payload cannot be retrieved at all.
    """


class DashboardService:
    """
    Loads a fresh :class:`DashboardSnapshot` from the spreadsheet API.
    """

    def __init__(
        self,
        *,
        connector: SheetAPIConnector,
        orchestrator: BatchOrchestrator,
        max_workers: int = 4,
    ) -> None:
        self._connector = connector
        self._orchestrator = orchestrator
        self._max_workers = max(1, max_workers)

    @property
    def resolver(self) -> ValueResolver:
        return self._orchestrator.resolver

    def load_snapshot(self) -> DashboardSnapshot:
        started = time.monotonic()
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            catalog_future = pool.submit(self._connector.fetch_catalog_rows)
            facility_future = pool.submit(self._connector.fetch_facility_rows)
            area_future = pool.submit(self._connector.fetch_area_rows)
            batch_future = pool.submit(self._connector.fetch_batch)

            catalog_rows = self._optional_result("catalog", catalog_future.result)
            facility_rows = self._optional_result("facilities", facility_future.result)
            area_rows = self._optional_result("areas", area_future.result)
            try:
                batch_raw = batch_future.result()
            except ConnectorRequestError as exc:
                log_event(logger, logging.ERROR, "kpi_batch_fetch_failed", error=str(exc))
                raise DashboardDataUnavailableError("KPI row data could not be retrieved.") from exc

        batch = parse_batch_payload(batch_raw)
        snapshot = self._orchestrator.build_all(
            parse_catalog(catalog_rows),
            batch.rows_by_indicator,
            batch.meta,
            facilities=parse_facility_directory(facility_rows),
            area_names=parse_area_directory(area_rows),
        )
        log_event(
            logger,
            logging.INFO,
            "kpi_snapshot_loaded",
            indicators=len(snapshot.summaries),
            facilities=len(snapshot.facilities),
            areas=len(snapshot.area_names),
            duration_seconds=round(time.monotonic() - started, 3),
        )
        return snapshot

    @staticmethod
    def _optional_result(name: str, result: Callable[[], Any]) -> Any:
        try:
            return result()
        except ConnectorRequestError as exc:
            log_event(logger, logging.WARNING, "kpi_sheet_fetch_failed", sheet=name, error=str(exc))
            return []


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    """
    Return a process-wide service wired from environment settings.
    """

    dashboard_settings = get_dashboard_settings()
    connector = SheetAPIConnector(
        settings=get_sheet_api_settings(),
        http_settings=get_external_http_settings(),
    )
    orchestrator = BatchOrchestrator(
        scope_prefix=get_scope_settings().area_prefix,
        catalog_resolver=CatalogResolver(default_threshold=dashboard_settings.default_threshold),
    )
    return DashboardService(
        connector=connector,
        orchestrator=orchestrator,
        max_workers=dashboard_settings.fetch_workers,
    )
