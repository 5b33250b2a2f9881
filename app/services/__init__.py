"""
app/services package marker.
"""

from app.services.aggregation_service import AggregationService, calculate_percentage
from app.services.batch_orchestrator import BatchOrchestrator, parse_batch_payload
from app.services.catalog_service import CatalogResolver, parse_catalog, period_label
from app.services.dashboard_service import (
    DashboardDataUnavailableError,
    DashboardService,
    get_dashboard_service,
)
from app.services.row_filter import filter_in_scope

__all__ = [
    "AggregationService",
    "BatchOrchestrator",
    "CatalogResolver",
    "DashboardDataUnavailableError",
    "DashboardService",
    "calculate_percentage",
    "filter_in_scope",
    "get_dashboard_service",
    "parse_batch_payload",
    "parse_catalog",
    "period_label",
]
