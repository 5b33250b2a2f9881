from __future__ import annotations

import logging
import os

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate environment variables at startup.

    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle.

    Rules:
    - SHEET_API_BASE_URL, when set, must be an http(s) URL.
    - KPI_SCOPE_AREA_PREFIX, when set, must be numeric.
    """

    from app.config import load_env_files

    load_env_files()

    errors: list[str] = []

    base_url = os.getenv("SHEET_API_BASE_URL", "").strip()
    if base_url and not base_url.startswith(("http://", "https://")):
        errors.append(
            f"SHEET_API_BASE_URL='{base_url}' is not valid. It must start with http:// or https://."
        )

    area_prefix = os.getenv("KPI_SCOPE_AREA_PREFIX", "").strip()
    if area_prefix and not area_prefix.isdigit():
        errors.append(
            f"KPI_SCOPE_AREA_PREFIX='{area_prefix}' is not valid. It must contain digits only."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed: invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="District KPI Dashboard API",
        version="1.0.0",
    )

    from app.api.routers import dashboard_router, export_router

    application.include_router(dashboard_router)
    application.include_router(export_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        from app.config import get_scope_settings

        return {"status": "ok", "scope": get_scope_settings().area_prefix}

    logging.getLogger(__name__).info("API application created")
    return application


app = create_app()
