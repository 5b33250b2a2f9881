"""
tests/test_value_resolver.py

Pytest unit tests for indicator value resolution.

All tests are pure Python with literal rows; nothing touches the network.

Coverage
--------
- Numeric coercion of loosely-typed cells
- Generic strategy: scalar fields and quarterly fallback
- Paired-count, multi-bracket and single-aspect strategies
- Strategy table dispatch and overrides
- Totality and idempotence
"""

from __future__ import annotations

import math

import pytest

from kpi.base import RawRecord, ValuePair, coerce_number
from kpi.registry import STRATEGY_TABLE, ValueResolver, resolve_value
from kpi.strategies import (
    GenericStrategy,
    MultiBracketSumStrategy,
    PairedCountStrategy,
    SingleAspectStrategy,
    quarterly_sum,
)


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


class TestCoercion:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (12, 12.0),
            (3.5, 3.5),
            ("42", 42.0),
            (" 7.25 ", 7.25),
            ("", 0.0),
            ("   ", 0.0),
            ("n/a", 0.0),
            (None, 0.0),
            (True, 0.0),
            (float("nan"), 0.0),
            (float("inf"), 0.0),
            ([1, 2], 0.0),
        ],
    )
    def test_coerce_number(self, value: object, expected: float) -> None:
        assert coerce_number(value) == expected

    def test_custom_default_is_returned_for_unreadable_values(self) -> None:
        assert coerce_number("abc", 5.0) == 5.0

    def test_record_get_number_missing_field_defaults_to_zero(self) -> None:
        assert RawRecord({"target": "10"}).get_number("result") == 0.0

    def test_record_tolerates_non_mapping_row(self) -> None:
        record = RawRecord(None)  # type: ignore[arg-type]
        assert record.get_number("target") == 0.0
        assert record.area_code is None

    def test_breakdown_key_prefers_facility_code(self) -> None:
        record = RawRecord({"hospcode": "07512", "areacode": "54060101"})
        assert record.breakdown_key == "07512"

    def test_breakdown_key_falls_back_to_area_code(self) -> None:
        record = RawRecord({"hospcode": "  ", "areacode": 54060101})
        assert record.breakdown_key == "54060101"


# ---------------------------------------------------------------------------
# Generic strategy
# ---------------------------------------------------------------------------


class TestGenericStrategy:
    def test_scalar_target_and_result(self) -> None:
        pair = GenericStrategy().resolve(RawRecord({"target": "100", "result": 80}))
        assert pair == ValuePair(target=100.0, result=80.0)

    def test_quarterly_fallback_when_scalar_target_zero(self) -> None:
        row = {
            "target": 0,
            "targetq1": 10,
            "targetq2": 10,
            "targetq3": 0,
            "targetq4": 0,
            "result": 0,
            "result1q1": 8,
            "result1q2": 9,
        }
        pair = resolve_value(row, "s_kpi_anc12")
        assert pair.target == pytest.approx(20.0)
        assert pair.result == pytest.approx(17.0)

    def test_scalar_target_with_quarterly_result(self) -> None:
        row = {"target": 50, "result": 0, "result1": 5, "resultq2": 6}
        assert GenericStrategy().resolve(RawRecord(row)) == ValuePair(target=50.0, result=11.0)

    def test_scalar_target_keeps_zero_result_when_quarters_empty(self) -> None:
        row = {"target": 50, "result": ""}
        assert GenericStrategy().resolve(RawRecord(row)) == ValuePair(target=50.0, result=0.0)

    def test_scalar_result_wins_over_quarters(self) -> None:
        row = {"target": 50, "result": 30, "result1": 99}
        assert GenericStrategy().resolve(RawRecord(row)).result == 30.0

    def test_zero_denominator_with_nonzero_numerator_is_legal(self) -> None:
        row = {"result1": 4, "result2": 6}
        assert GenericStrategy().resolve(RawRecord(row)) == ValuePair(target=0.0, result=10.0)

    def test_quarterly_sum_takes_first_nonzero_variant_per_quarter(self) -> None:
        row = {"target1": 3, "targetq1": 100, "targetq2": 4, "target1q3": 5}
        assert quarterly_sum(RawRecord(row), "target") == pytest.approx(12.0)

    @pytest.mark.parametrize("zero", [0, "0", " 0 ", "0.0"])
    def test_quarterly_sum_zero_cells_fall_through(self, zero) -> None:
        row = {"target1": zero, "targetq1": 7, "target2": zero, "target1q2": 3}
        assert quarterly_sum(RawRecord(row), "target") == pytest.approx(10.0)

    def test_empty_row_resolves_to_zero(self) -> None:
        assert GenericStrategy().resolve(RawRecord({})) == ValuePair(0.0, 0.0)


# ---------------------------------------------------------------------------
# Special strategies
# ---------------------------------------------------------------------------


class TestPairedCountStrategy:
    def test_dental_indicator_uses_b_as_target_and_a_as_result(self) -> None:
        pair = resolve_value({"a": 30, "b": 40}, "s_dental_0_5_cavity_free")
        assert pair == ValuePair(target=40.0, result=30.0)

    def test_generic_target_fields_are_ignored(self) -> None:
        pair = PairedCountStrategy().resolve(RawRecord({"a": "1", "b": "2", "target": 99}))
        assert pair == ValuePair(target=2.0, result=1.0)


class TestMultiBracketSumStrategy:
    def test_two_populated_brackets(self) -> None:
        row = {
            "result_9": 10,
            "1b260_1_9": 8,
            "1b260_2_9": 1,
            "result_18": 5,
            "1b260_1_18": 4,
            "1b260_2_18": 0,
        }
        pair = resolve_value(row, "s_childdev_specialpp")
        assert pair.target == pytest.approx(15.0)
        assert pair.result == pytest.approx(13.0)

    def test_scalar_target_is_not_used(self) -> None:
        row = {"target": 500, "result": 400, "result_60": "2", "1b260_1_60": "2"}
        pair = MultiBracketSumStrategy().resolve(RawRecord(row))
        assert pair == ValuePair(target=2.0, result=2.0)


class TestSingleAspectStrategy:
    def test_numbered_aspects_are_not_summed(self) -> None:
        row = {"target": 20, "result": 12, "result1": 5, "result2": 7, "result9": 3}
        assert resolve_value(row, "s_aged9_w") == ValuePair(target=20.0, result=12.0)

    def test_zero_target_does_not_fall_back_to_quarters(self) -> None:
        row = {"target": 0, "result": 0, "target1": 10, "result1": 5}
        assert SingleAspectStrategy().resolve(RawRecord(row)) == ValuePair(0.0, 0.0)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestValueResolver:
    def test_unknown_identifier_uses_generic(self) -> None:
        assert isinstance(ValueResolver().strategy_for("s_unlisted"), GenericStrategy)

    def test_strategy_table_entries(self) -> None:
        assert STRATEGY_TABLE["s_dental_0_5_cavity_free"].name == "paired_count"
        assert STRATEGY_TABLE["s_childdev_specialpp"].name == "multi_bracket"
        assert STRATEGY_TABLE["s_aged9"].name == "single_aspect"

    def test_overrides_extend_the_table(self) -> None:
        resolver = ValueResolver({"s_new_pair": PairedCountStrategy(target_field="x", result_field="y")})
        assert resolver.resolve({"x": 8, "y": 2}, "s_new_pair") == ValuePair(8.0, 2.0)
        assert "s_new_pair" not in STRATEGY_TABLE

    def test_resolution_is_idempotent(self) -> None:
        row = {"target": "0", "targetq1": "5", "result1q1": "4"}
        assert resolve_value(row, "s_x") == resolve_value(row, "s_x")

    @pytest.mark.parametrize(
        "indicator_id",
        ["s_kpi_anc12", "s_dental_0_5_cavity_free", "s_childdev_specialpp", "s_aged9_w"],
    )
    def test_malformed_rows_never_raise(self, indicator_id: str) -> None:
        row = {"target": "abc", "result": None, "a": {}, "b": [], "result_9": "x", "targetq1": "NaN"}
        pair = resolve_value(row, indicator_id)
        assert not math.isnan(pair.target)
        assert not math.isnan(pair.result)
        assert pair.target == 0.0
