"""
kpi/registry.py

Indicator identifier → value strategy table.

Adding an indicator with a non-standard column layout is an edit to
:data:`STRATEGY_TABLE`; every identifier not listed resolves with
:class:`~kpi.strategies.GenericStrategy`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kpi.base import BaseValueStrategy, RawRecord, ValuePair
from kpi.strategies import (
    GenericStrategy,
    MultiBracketSumStrategy,
    PairedCountStrategy,
    SingleAspectStrategy,
)

_GENERIC = GenericStrategy()
_SINGLE_ASPECT = SingleAspectStrategy()

STRATEGY_TABLE: dict[str, BaseValueStrategy] = {
    "s_dental_0_5_cavity_free": PairedCountStrategy(target_field="b", result_field="a"),
    "s_childdev_specialpp": MultiBracketSumStrategy(),
    "s_aged9": _SINGLE_ASPECT,
    "s_aged9_w": _SINGLE_ASPECT,
}


class ValueResolver:
    """
    Dispatches raw rows to the strategy registered for their indicator.

    Parameters
    ----------
    overrides:
        Extra or replacement identifier → strategy entries layered over
        :data:`STRATEGY_TABLE`.
    default:
        Strategy used for identifiers without an entry.
    """

    def __init__(
        self,
        overrides: Mapping[str, BaseValueStrategy] | None = None,
        *,
        default: BaseValueStrategy | None = None,
    ) -> None:
        table = dict(STRATEGY_TABLE)
        if overrides:
            table.update(overrides)
        self._table = table
        self._default = default or _GENERIC

    def strategy_for(self, indicator_id: str) -> BaseValueStrategy:
        return self._table.get(indicator_id, self._default)

    def resolve(self, row: Mapping[str, Any] | RawRecord, indicator_id: str) -> ValuePair:
        record = row if isinstance(row, RawRecord) else RawRecord(row)
        return self.strategy_for(indicator_id).resolve(record)


_DEFAULT_RESOLVER = ValueResolver()


def resolve_value(row: Mapping[str, Any] | RawRecord, indicator_id: str) -> ValuePair:
    """
    Resolve *row* for *indicator_id* with the default strategy table.
    """

    return _DEFAULT_RESOLVER.resolve(row, indicator_id)
