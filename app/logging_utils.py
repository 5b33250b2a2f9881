"""
app/logging_utils.py

JSON event lines for sheet refresh and batch milestones.

Each event is a single log record whose message is a JSON object with an
``event`` key and sorted field keys. The event name is also attached to
the record as ``record.event`` so handlers can filter without parsing.
Thai text is written unescaped; datetimes are ISO-8601 and sets become
sorted lists.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Set
from datetime import date, datetime
from typing import Any


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Set):
        return sorted(str(item) for item in value)
    return str(value)


def format_event(event: str, **fields: Any) -> str:
    payload = {"event": event, **fields}
    return json.dumps(payload, default=_json_default, sort_keys=True, ensure_ascii=False)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """
    Log *event* with *fields* at *level* as one JSON line.
    """

    if not logger.isEnabledFor(level):
        return
    logger.log(level, format_event(event, **fields), extra={"event": event})
