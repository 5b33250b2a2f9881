"""
app/api/routers/dashboard_router.py

Dashboard read endpoints.

GET /kpis                               full snapshot (summaries + freshness)
GET /kpis/stats                         pass/fail counters, optional facility selection
GET /kpis/{indicator_id}/drill-down     per-row values for selected facilities

Every request triggers one refresh through DashboardService. A total
retrieval failure maps to HTTP 502; anomalies inside the data never
produce an error status.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.domain.indicator import DashboardSnapshot
from app.schemas.dashboard import (
    DashboardSnapshotResponse,
    DashboardStatsResponse,
    DrillDownResponse,
)
from app.services.dashboard_service import (
    DashboardDataUnavailableError,
    DashboardService,
    get_dashboard_service,
)
from app.services.dashboard_stats_service import compute_dashboard_stats
from app.services.facility_service import drill_down

logger = logging.getLogger(__name__)

router = APIRouter(tags=["kpi"])


def load_snapshot_or_502(service: DashboardService) -> DashboardSnapshot:
    """
    Load a snapshot, translating total retrieval failure into HTTP 502.
    """

    try:
        return service.load_snapshot()
    except DashboardDataUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc


@router.get("/kpis", response_model=DashboardSnapshotResponse)
def list_kpis(
    include_rows: bool = Query(
        default=False,
        description="Include the in-scope source rows of every indicator.",
    ),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardSnapshotResponse:
    """
    Return every indicator summary in catalog order plus freshness metadata.
    """
    snapshot = load_snapshot_or_502(service)
    return DashboardSnapshotResponse.from_snapshot(snapshot, include_rows=include_rows)


@router.get("/kpis/stats", response_model=DashboardStatsResponse)
def kpi_stats(
    facility: list[str] = Query(
        default=[],
        description="Facility or area codes to restrict the statistics to.",
    ),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardStatsResponse:
    """
    Return total, passed and failed indicator counts and the success rate.
    """
    snapshot = load_snapshot_or_502(service)
    stats = compute_dashboard_stats(snapshot.summaries, facility or None)
    logger.info(
        "KPI stats facilities=%d total=%d passed=%d",
        len(facility),
        stats.total,
        stats.passed,
    )
    return DashboardStatsResponse.from_stats(stats, facility)


@router.get("/kpis/{indicator_id}/drill-down", response_model=DrillDownResponse)
def kpi_drill_down(
    indicator_id: str,
    facility: list[str] = Query(
        default=[],
        description="Facility or area codes; empty selects the whole district.",
    ),
    service: DashboardService = Depends(get_dashboard_service),
) -> DrillDownResponse:
    """
    Return the resolved source rows of one indicator.

    Raises HTTP 404 when the indicator is not part of the snapshot.
    """
    snapshot = load_snapshot_or_502(service)
    summary = snapshot.get(indicator_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown indicator {indicator_id!r}.",
        )

    result = drill_down(summary, facility, area_names=snapshot.area_names, resolver=service.resolver)
    facility_names = {code: detail.name for code, detail in snapshot.facilities.items()}
    return DrillDownResponse.from_result(result, facility_names)
