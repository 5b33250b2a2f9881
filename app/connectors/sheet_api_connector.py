"""
app/connectors/sheet_api_connector.py

Connector for the spreadsheet-backed JSON API.

Every sheet is served as ``GET <base_url>?sheet=<name>`` and returns a JSON
array of row objects, except the batch sheet which returns either a flat
``{indicator_id: rows}`` mapping or a ``{data, meta}`` envelope.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import ExternalHTTPSettings, SheetAPISettings
from app.connectors.base import BaseConnector

logger = logging.getLogger(__name__)


class SheetAPIConnector(BaseConnector):
    """
    Fetches named sheets from the spreadsheet API.
    """

    def __init__(
        self,
        *,
        settings: SheetAPISettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="sheet_api", http_settings=http_settings, session=session)
        self._settings = settings

    def fetch_sheet(self, sheet: str) -> Any:
        """
        Return the parsed JSON body for *sheet*.

        Raises ConnectorRequestError when the request fails after retries
        or the body is not JSON.
        """

        return self._get_json(self._settings.base_url, {"sheet": sheet})

    def fetch_rows(self, sheet: str) -> list[dict[str, Any]]:
        """
        Return the row objects of *sheet*; a non-array body yields ``[]``.
        """

        payload = self.fetch_sheet(sheet)
        if not isinstance(payload, list):
            logger.error("Unexpected sheet payload shape sheet=%s type=%s", sheet, type(payload).__name__)
            return []
        return [row for row in payload if isinstance(row, dict)]

    def fetch_catalog_rows(self) -> list[dict[str, Any]]:
        return self.fetch_rows(self._settings.catalog_sheet)

    def fetch_facility_rows(self) -> list[dict[str, Any]]:
        return self.fetch_rows(self._settings.facility_sheet)

    def fetch_area_rows(self) -> list[dict[str, Any]]:
        return self.fetch_rows(self._settings.area_sheet)

    def fetch_batch(self) -> Any:
        return self.fetch_sheet(self._settings.batch_sheet)
