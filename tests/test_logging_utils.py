"""
tests/test_logging_utils.py

Pytest unit tests for JSON event logging.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from app.logging_utils import format_event, log_event


class TestFormatEvent:
    def test_keys_are_sorted(self) -> None:
        line = format_event("kpi_batch_built", indicators=3, current_quarter=2)
        assert json.loads(line) == {"event": "kpi_batch_built", "indicators": 3, "current_quarter": 2}
        assert line.index('"current_quarter"') < line.index('"event"') < line.index('"indicators"')

    def test_datetimes_sets_and_thai_text(self) -> None:
        line = format_event(
            "kpi_snapshot_loaded",
            last_updated=datetime(2026, 2, 2, 12, 45),
            quarterly=frozenset({"s_b", "s_a"}),
            area="ในเวียง",
        )
        payload = json.loads(line)
        assert payload["last_updated"] == "2026-02-02T12:45:00"
        assert payload["quarterly"] == ["s_a", "s_b"]
        assert "ในเวียง" in line


class TestLogEvent:
    def test_record_carries_event_name(self, caplog) -> None:
        logger = logging.getLogger("tests.events")
        with caplog.at_level(logging.INFO, logger="tests.events"):
            log_event(logger, logging.WARNING, "kpi_sheet_fetch_failed", sheet="catalog")

        record = caplog.records[-1]
        assert record.event == "kpi_sheet_fetch_failed"
        assert record.levelno == logging.WARNING
        assert json.loads(record.getMessage())["sheet"] == "catalog"

    def test_disabled_level_emits_nothing(self, caplog) -> None:
        logger = logging.getLogger("tests.events.quiet")
        with caplog.at_level(logging.ERROR, logger="tests.events.quiet"):
            log_event(logger, logging.INFO, "kpi_batch_built", indicators=1)
        assert caplog.records == []
