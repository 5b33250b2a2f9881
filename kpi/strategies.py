"""
kpi/strategies.py

Value strategies for the indicator column layouts seen in source data.

generic          scalar ``target``/``result`` with quarterly-column fallback
paired_count     two distinct count columns, one per side of the ratio
multi_bracket    per-age-bracket screened / normal counts, summed
single_aspect    scalar ``target``/``result`` only; numbered sub-fields ignored
"""

from __future__ import annotations

from collections.abc import Sequence

from kpi.base import BaseValueStrategy, RawRecord, ValuePair

QUARTERS: tuple[int, ...] = (1, 2, 3, 4)


def quarterly_sum(record: RawRecord, prefix: str) -> float:
    """
    Sum the quarterly variants of *prefix* across quarters 1..4.

    For each quarter N the first non-zero value among ``{prefix}N``,
    ``{prefix}qN`` and ``{prefix}1qN`` is used.

    Zero is compared after coercion, so a string cell ``"0"`` falls through
    to the next variant exactly like a numeric ``0``. Sheets that write
    ``"0"`` to mean "reported as zero" are not distinguished from blanks.
    """

    total = 0.0
    for quarter in QUARTERS:
        for field in (f"{prefix}{quarter}", f"{prefix}q{quarter}", f"{prefix}1q{quarter}"):
            value = record.get_number(field)
            if value != 0:
                total += value
                break
    return total


class GenericStrategy(BaseValueStrategy):
    """
    Default resolution for indicators reporting ``target``/``result``.

    A positive scalar target is trusted as the denominator. Its result is
    the scalar result when positive, otherwise the quarterly sum when that
    is positive, otherwise the scalar (zero). Without a scalar target both
    sides come from the quarterly columns, so a zero target with a
    non-zero result is a legal outcome.
    """

    name = "generic"

    def resolve(self, record: RawRecord) -> ValuePair:
        target = record.get_number("target")
        result = record.get_number("result")

        if target > 0:
            if result > 0:
                return ValuePair(target=target, result=result)
            quarter_result = quarterly_sum(record, "result")
            return ValuePair(target=target, result=quarter_result if quarter_result > 0 else result)

        return ValuePair(
            target=quarterly_sum(record, "target"),
            result=quarterly_sum(record, "result"),
        )


class PairedCountStrategy(BaseValueStrategy):
    """
    Indicators with two plain count columns.

    For the dental cavity-free indicator column ``b`` holds the examined
    children and ``a`` the cavity-free ones. The pairing was chosen because
    it is the only assignment that keeps district totals below 100%; the
    source documents no column semantics.
    """

    name = "paired_count"

    def __init__(self, *, target_field: str = "b", result_field: str = "a") -> None:
        self._target_field = target_field
        self._result_field = result_field

    def resolve(self, record: RawRecord) -> ValuePair:
        return ValuePair(
            target=record.get_number(self._target_field),
            result=record.get_number(self._result_field),
        )


class MultiBracketSumStrategy(BaseValueStrategy):
    """
    Screening indicators reported per age bracket (months).

    target = sum of ``result_<bracket>`` (screened)
    result = sum of ``1b260_1_<bracket>`` (normal on first screen)
             + ``1b260_2_<bracket>`` (normal after stimulation)
    """

    name = "multi_bracket"

    def __init__(
        self,
        *,
        brackets: Sequence[str] = ("9", "18", "30", "42", "60"),
        screened_prefix: str = "result_",
        normal_prefixes: Sequence[str] = ("1b260_1_", "1b260_2_"),
    ) -> None:
        self._brackets = tuple(brackets)
        self._screened_prefix = screened_prefix
        self._normal_prefixes = tuple(normal_prefixes)

    def resolve(self, record: RawRecord) -> ValuePair:
        target = 0.0
        result = 0.0
        for bracket in self._brackets:
            target += record.get_number(f"{self._screened_prefix}{bracket}")
            for prefix in self._normal_prefixes:
                result += record.get_number(f"{prefix}{bracket}")
        return ValuePair(target=target, result=result)


class SingleAspectStrategy(BaseValueStrategy):
    """
    Indicators whose numbered sub-fields are independent assessment aspects.

    Summing ``result1..result9`` would double count, so only the scalar
    fields are read.
    """

    name = "single_aspect"

    def resolve(self, record: RawRecord) -> ValuePair:
        return ValuePair(
            target=record.get_number("target"),
            result=record.get_number("result"),
        )
