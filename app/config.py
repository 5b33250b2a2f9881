"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_SHEET_API_BASE_URL = (
    "https://script.google.com/macros/s/"
    "AKfycbwLnUji6n_z0KANgGMqZchGaqk38CCm7d8nDUggLDHEbsuoXe1e1uPt42ivkEKR0B5H/exec"
)


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for external connectors.
    """

    timeout_seconds: float = 30.0
    max_retries: int = 3
    backoff_initial_seconds: float = 1.0
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class SheetAPISettings:
    """
    Spreadsheet-backed JSON API settings.

    Each named sheet is fetched with ``GET <base_url>?sheet=<name>``.
    """

    base_url: str = DEFAULT_SHEET_API_BASE_URL
    catalog_sheet: str = "kpi_master"
    facility_sheet: str = "hospitals"
    area_sheet: str = "tambon_master"
    batch_sheet: str = "BATCH_ALL"


@dataclass(frozen=True)
class ScopeSettings:
    """
    Geographic scope of the dashboard.

    ``area_prefix`` is the administrative area-code prefix of the target
    district; rows outside it are excluded from aggregation.
    """

    area_prefix: str = "5406"


@dataclass(frozen=True)
class DashboardSettings:
    """
    Presentation-independent dashboard defaults.
    """

    default_threshold: float = 80.0
    fetch_workers: int = 4


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 30.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 1.0)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_sheet_api_settings() -> SheetAPISettings:
    """
    Return spreadsheet API settings from environment variables.
    """

    return SheetAPISettings(
        base_url=_get_str_env("SHEET_API_BASE_URL", DEFAULT_SHEET_API_BASE_URL),
        catalog_sheet=_get_str_env("SHEET_API_CATALOG_SHEET", "kpi_master"),
        facility_sheet=_get_str_env("SHEET_API_FACILITY_SHEET", "hospitals"),
        area_sheet=_get_str_env("SHEET_API_AREA_SHEET", "tambon_master"),
        batch_sheet=_get_str_env("SHEET_API_BATCH_SHEET", "BATCH_ALL"),
    )


@lru_cache(maxsize=1)
def get_scope_settings() -> ScopeSettings:
    """
    Return geographic scope settings from environment variables.
    """

    return ScopeSettings(area_prefix=_get_str_env("KPI_SCOPE_AREA_PREFIX", "5406"))


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return dashboard defaults from environment variables.
    """

    threshold = _get_float_env("KPI_DEFAULT_THRESHOLD", 80.0)
    return DashboardSettings(
        default_threshold=threshold if threshold > 0 else 80.0,
        fetch_workers=max(1, _get_int_env("KPI_FETCH_WORKERS", 4)),
    )
