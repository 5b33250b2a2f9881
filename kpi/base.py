"""
kpi/base.py

Typed raw-record wrapper and the abstract base for value strategies.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

FIELD_AREA_CODE = "areacode"
FIELD_FACILITY_CODE = "hospcode"
FIELD_REPORT_TIMESTAMP = "date_com"


@dataclass(frozen=True)
class ValuePair:
    """
    Canonical (target, result) reduction of one raw row.

    ``target == 0`` marks a raw-count row: the result is an absolute count
    and no ratio is meaningful.
    """

    target: float = 0.0
    result: float = 0.0


class RawRecord:
    """
    Read-only view over one source row with numeric-coercing accessors.

    Source rows carry arbitrary extra fields and mix strings with numbers.
    Every numeric read goes through :meth:`get_number` so that absent or
    malformed values collapse to the default instead of propagating.
    """

    __slots__ = ("_row",)

    def __init__(self, row: Mapping[str, Any] | None) -> None:
        self._row: Mapping[str, Any] = row if isinstance(row, Mapping) else {}

    @property
    def raw(self) -> Mapping[str, Any]:
        return self._row

    def get_number(self, field: str, default: float = 0.0) -> float:
        """
        Return *field* as a finite float, or *default* when it cannot be read.
        """

        return coerce_number(self._row.get(field), default)

    def get_text(self, field: str) -> str | None:
        """
        Return *field* as a stripped string; ``None`` when absent or blank.
        """

        value = self._row.get(field)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def area_code(self) -> str | None:
        return self.get_text(FIELD_AREA_CODE)

    @property
    def facility_code(self) -> str | None:
        return self.get_text(FIELD_FACILITY_CODE)

    @property
    def report_timestamp(self) -> str | None:
        return self.get_text(FIELD_REPORT_TIMESTAMP)

    @property
    def breakdown_key(self) -> str | None:
        """Facility code, else area code, else ``None``."""
        return self.facility_code or self.area_code


def coerce_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce a loosely-typed cell value to a finite float.

    Booleans, ``None``, blank or non-numeric strings, NaN and infinities
    all yield *default*.
    """

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return default
        try:
            number = float(stripped)
        except ValueError:
            return default
    else:
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


class BaseValueStrategy(ABC):
    """
    Contract for indicator value strategies.

    A strategy turns one :class:`RawRecord` into a :class:`ValuePair`.
    Implementations must be total: no I/O, no logging, and never raise for
    missing or malformed fields.
    """

    name: str = "base"

    @abstractmethod
    def resolve(self, record: RawRecord) -> ValuePair:
        """
        Reduce *record* to its canonical (target, result) pair.
        """
