"""
tests/test_dashboard_service.py

Pytest unit tests for DashboardService end-to-end assembly.

Uses the in-memory sheet connector from conftest; no network.
"""

from __future__ import annotations

from datetime import datetime

import pytest
import requests

from app.config import ExternalHTTPSettings, SheetAPISettings
from app.connectors.sheet_api_connector import SheetAPIConnector
from app.services.batch_orchestrator import BatchOrchestrator
from app.services.dashboard_service import DashboardDataUnavailableError, DashboardService


class _JSONResponse:
    def __init__(self, body) -> None:
        self.status_code = 200
        self._body = body

    def json(self):
        return self._body

    def raise_for_status(self) -> None:
        return None


class TestLoadSnapshot:
    def test_full_snapshot(self, dashboard_service: DashboardService) -> None:
        snapshot = dashboard_service.load_snapshot()

        assert [s.indicator_id for s in snapshot.summaries] == [
            "s_kpi_anc12",
            "s_dental_0_5_cavity_free",
            "s_childdev_specialpp",
            "s_uncatalogued",
        ]
        anc = snapshot.get("s_kpi_anc12")
        assert anc.total_target == pytest.approx(150.0)
        assert anc.percentage == pytest.approx(83.33)
        assert anc.threshold == 75.0
        assert anc.period_label == "cumulative 6 months (Q2)"
        assert set(anc.breakdown) == {"07512", "07513"}

        dental = snapshot.get("s_dental_0_5_cavity_free")
        assert dental.percentage == pytest.approx(75.0)
        assert dental.period_label == "annual"

        assert snapshot.get("s_childdev_specialpp").total_target == 0.0

        extra = snapshot.get("s_uncatalogued")
        assert extra.title == "s_uncatalogued"
        assert extra.threshold == 80.0
        assert extra.is_raw_count is True
        assert extra.total_result == pytest.approx(3.0)

        assert snapshot.current_quarter == 2
        assert snapshot.last_updated == datetime(2026, 2, 2, 12, 45)
        assert snapshot.facilities["07512"].name == "Ban Klang"
        assert snapshot.area_names["540601"] == "ในเวียง"

    def test_catalog_failure_degrades_to_defaults(self, service_factory) -> None:
        snapshot = service_factory(failing=frozenset({"catalog"})).load_snapshot()
        assert [s.indicator_id for s in snapshot.summaries] == [
            "s_kpi_anc12",
            "s_dental_0_5_cavity_free",
            "s_uncatalogued",
        ]
        assert all(s.threshold == 80.0 for s in snapshot.summaries)
        assert snapshot.get("s_kpi_anc12").title == "s_kpi_anc12"

    def test_directory_failures_degrade_to_empty(self, service_factory) -> None:
        snapshot = service_factory(failing=frozenset({"facilities", "areas"})).load_snapshot()
        assert snapshot.facilities == {}
        assert snapshot.area_names == {}
        assert len(snapshot.summaries) == 4

    def test_broken_catalog_response_degrades_through_real_connector(self, batch_payload) -> None:
        class SheetSession:
            def request(self, **kwargs):
                sheet = kwargs["params"]["sheet"]
                if sheet == "kpi_master":
                    raise requests.exceptions.ChunkedEncodingError("connection broken mid-body")
                return _JSONResponse(batch_payload if sheet == "BATCH_ALL" else [])

        connector = SheetAPIConnector(
            settings=SheetAPISettings(base_url="https://sheets.example.org/exec"),
            http_settings=ExternalHTTPSettings(max_retries=0, rate_limit_per_second=0.0),
            session=SheetSession(),  # type: ignore[arg-type]
        )
        service = DashboardService(connector=connector, orchestrator=BatchOrchestrator(scope_prefix="5406"))

        snapshot = service.load_snapshot()
        assert snapshot.get("s_kpi_anc12").title == "s_kpi_anc12"
        assert snapshot.get("s_kpi_anc12").percentage == pytest.approx(83.33)

    def test_batch_failure_is_total(self, service_factory) -> None:
        with pytest.raises(DashboardDataUnavailableError):
            service_factory(failing=frozenset({"batch"})).load_snapshot()

    def test_malformed_batch_yields_catalog_only_zeros(self, service_factory) -> None:
        snapshot = service_factory(batch=["not", "a", "mapping"]).load_snapshot()
        assert len(snapshot.summaries) == 3
        assert all(s.total_target == 0.0 and s.percentage == 0.0 for s in snapshot.summaries)
        assert snapshot.last_updated is None

    def test_flat_batch_payload(self, service_factory) -> None:
        batch = {"s_kpi_anc12": [{"hospcode": "07512", "areacode": "54060101", "target": 10, "result": 10}]}
        snapshot = service_factory(batch=batch).load_snapshot()
        anc = snapshot.get("s_kpi_anc12")
        assert anc.percentage == pytest.approx(100.0)
        assert anc.period_label == "annual"
        assert snapshot.current_quarter == 0
