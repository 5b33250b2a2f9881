"""
app/api/routers/export_router.py

Indicator × facility matrix export endpoint.

GET /export/matrix

Query parameters
----------------
format : "csv" | "json"   (default: "csv")

Responses
---------
CSV  → StreamingResponse, Content-Type: text/csv
       Content-Disposition: attachment; filename=kpi-matrix-<YYYY-MM-DD>.csv
JSON → JSONResponse, Content-Type: application/json
       Body: {"rows": int, "fields": list[str], "headers": dict,
              "data": list[dict], "statuses": list[dict]}

All transformation logic lives in export_service; the router only handles
HTTP plumbing (serialisation, content-type, error mapping).
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterator
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, StreamingResponse

from app.api.routers.dashboard_router import load_snapshot_or_502
from app.services.dashboard_service import DashboardService, get_dashboard_service
from app.services.export_service import MatrixExport, build_matrix_export

logger = logging.getLogger(__name__)

router = APIRouter(tags=["export"])

_VALID_FORMATS = frozenset({"csv", "json"})


# ---------------------------------------------------------------------------
# Serialisation helpers (no business logic)
# ---------------------------------------------------------------------------


def _to_csv_streaming(result: MatrixExport, filename: str) -> StreamingResponse:
    """Stream *result* as a UTF-8 CSV file download with display headers."""

    def _generate() -> Iterator[str]:
        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=result.fields,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writerow(result.headers)
        yield buf.getvalue()

        for row in result.rows:
            buf.seek(0)
            buf.truncate(0)
            writer.writerow(row)
            yield buf.getvalue()

    return StreamingResponse(
        content=_generate(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Row-Count": str(len(result.rows)),
        },
    )


def _to_json_response(result: MatrixExport) -> JSONResponse:
    """Return *result* as a structured JSON response."""
    return JSONResponse(
        content={
            "rows": len(result.rows),
            "fields": result.fields,
            "headers": result.headers,
            "data": result.rows,
            "statuses": result.statuses,
        }
    )


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


@router.get("/export/matrix", response_model=None, summary="Export the indicator × facility matrix")
def export_matrix(
    output_format: str = Query(
        default="csv",
        alias="format",
        description='Output format: "csv" (file download) or "json".',
    ),
    service: DashboardService = Depends(get_dashboard_service),
) -> StreamingResponse | JSONResponse:
    """
    Export every indicator with its per-facility results.
    """
    if output_format not in _VALID_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid format {output_format!r}. Must be one of: {sorted(_VALID_FORMATS)}.",
        )

    snapshot = load_snapshot_or_502(service)
    result = build_matrix_export(snapshot.summaries, snapshot.facilities)
    logger.info(
        "Matrix export format=%r indicators=%d columns=%d",
        output_format,
        len(result.rows),
        len(result.fields),
    )

    if output_format == "csv":
        return _to_csv_streaming(result, f"kpi-matrix-{date.today().isoformat()}.csv")
    return _to_json_response(result)
