"""
tests/conftest.py

Shared fakes for service and API tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from app.connectors.base import ConnectorRequestError
from app.services.batch_orchestrator import BatchOrchestrator
from app.services.dashboard_service import DashboardService

CATALOG_ROWS: list[dict[str, Any]] = [
    {
        "table_name": "s_kpi_anc12",
        "title": "ANC before 12 weeks",
        "target": 75,
        "order": 1,
        "link": "https://example.org/anc",
    },
    {"table_name": "s_dental_0_5_cavity_free", "title": "Cavity-free children", "target": 50, "order": 2},
    {"table_name": "s_childdev_specialpp", "title": "Child development screening", "target": 90, "order": 3},
]

FACILITY_ROWS: list[dict[str, Any]] = [
    {"hospcode": "07512", "hosname": "Ban Klang", "tambon": "01"},
    {"hospcode": "07513", "hosname": "Nong Muang", "tambon": "02"},
]

AREA_ROWS: list[dict[str, Any]] = [
    {"id": "540601", "name_th": "ในเวียง"},
    {"id": "540602", "name_th": "ทุ่งโฮ้ง"},
]

BATCH_PAYLOAD: dict[str, Any] = {
    "data": {
        "s_kpi_anc12": [
            {"hospcode": "07512", "areacode": "54060101", "target": 100, "result": 80, "date_com": "202602021245"},
            {"hospcode": "07513", "areacode": "54060201", "target": 50, "result": 45, "date_com": "202601201000"},
            {"hospcode": "09999", "areacode": "54010101", "target": 999, "result": 1},
        ],
        "s_dental_0_5_cavity_free": [
            {"hospcode": "07512", "areacode": "54060101", "a": 30, "b": 40},
        ],
        "s_uncatalogued": [
            {"hospcode": "07513", "areacode": "54060201", "result1": 3},
        ],
    },
    "meta": {"current_quarter": 2, "kpi_config": [{"table": "s_kpi_anc12", "isQuarterly": True}]},
}


class FakeSheetConnector:
    """
    In-memory stand-in for SheetAPIConnector.

    Any sheet listed in *failing* raises ConnectorRequestError.
    """

    def __init__(
        self,
        *,
        catalog: Any = None,
        facilities: Any = None,
        areas: Any = None,
        batch: Any = None,
        failing: frozenset[str] = frozenset(),
    ) -> None:
        self._sheets = {
            "catalog": CATALOG_ROWS if catalog is None else catalog,
            "facilities": FACILITY_ROWS if facilities is None else facilities,
            "areas": AREA_ROWS if areas is None else areas,
            "batch": BATCH_PAYLOAD if batch is None else batch,
        }
        self._failing = failing

    def _get(self, name: str) -> Any:
        if name in self._failing:
            raise ConnectorRequestError(f"sheet_api: {name} unavailable")
        return self._sheets[name]

    def fetch_catalog_rows(self) -> Any:
        return self._get("catalog")

    def fetch_facility_rows(self) -> Any:
        return self._get("facilities")

    def fetch_area_rows(self) -> Any:
        return self._get("areas")

    def fetch_batch(self) -> Any:
        return self._get("batch")


def make_service(*, orchestrator: BatchOrchestrator | None = None, **connector_kwargs: Any) -> DashboardService:
    return DashboardService(
        connector=FakeSheetConnector(**connector_kwargs),  # type: ignore[arg-type]
        orchestrator=orchestrator or BatchOrchestrator(scope_prefix="5406"),
        max_workers=2,
    )


@pytest.fixture()
def service_factory():
    """Build a DashboardService over a FakeSheetConnector."""
    return make_service


@pytest.fixture()
def dashboard_service() -> DashboardService:
    return make_service()


@pytest.fixture()
def batch_payload() -> dict[str, Any]:
    return BATCH_PAYLOAD
