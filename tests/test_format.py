"""Tests for value formatting."""

import json
import math

import pytest

from reflow._format import MISSING, format_scalar, format_value, format_value_full, format_value_json, to_jsonable
from reflow._value import Error, Scalar, Table, Vector


class TestFormatScalar:
    """Tests for compact scalar formatting."""

    @pytest.mark.parametrize(
        ("n", "expected"),
        [
            (7.0, "7"),
            (0.0, "0"),
            (-0.5, "-0.5"),
            (1234.5678, "1234.57"),
            (0.001, "0.001"),
            (999999.0, "999999"),
            (999999.7, "1000000"),
            (-999999.7, "-1000000"),
        ],
    )
    def test_plain_range(self, n: float, expected: str) -> None:
        assert format_scalar(n) == expected

    @pytest.mark.parametrize(
        ("n", "expected"),
        [
            (1e6, "1.0000e+6"),
            (123456789.0, "1.2346e+8"),
            (0.0001, "1.0000e-4"),
            (-2.5e-7, "-2.5000e-7"),
        ],
    )
    def test_exponential_range(self, n: float, expected: str) -> None:
        assert format_scalar(n) == expected

    def test_extraordinary_numbers(self) -> None:
        assert format_scalar(math.nan) == "NaN"
        assert format_scalar(math.inf) == "+∞"
        assert format_scalar(-math.inf) == "−∞"  # noqa: RUF001

    def test_locale_changes_separators(self) -> None:
        assert format_scalar(1234.5678, locale="de") == "1.234,57"
        assert format_scalar(1234.5678, locale="en_US") == "1,234.57"

    def test_unknown_locale_falls_back_to_neutral(self) -> None:
        assert format_scalar(1234.5678, locale="xx_YY") == "1234.57"

    def test_locale_does_not_affect_exponential(self) -> None:
        assert format_scalar(1e7, locale="de") == "1.0000e+7"


class TestFormatValue:
    """Tests for compact formatting of every value kind."""

    def test_missing(self) -> None:
        assert format_value(None) == MISSING

    def test_scalar(self) -> None:
        assert format_value(Scalar(7.0)) == "7"

    def test_scalar_rounding_into_next_decade_stays_plain(self) -> None:
        assert format_value(Scalar(999999.7)) == "1000000"

    def test_short_vector_inline(self) -> None:
        assert format_value(Vector((1.0, 2.5, 3.0))) == "[1, 2.5, 3]"

    def test_long_vector_counted(self) -> None:
        assert format_value(Vector((1.0, 2.0, 3.0, 4.0, 5.0))) == "[5 items]"

    def test_empty_vector(self) -> None:
        assert format_value(Vector(())) == "[empty]"

    def test_table_shape(self) -> None:
        table = Table(("a", "b", "c"), ((1.0, 2.0, 3.0), (4.0, 5.0, 6.0)))
        assert format_value(table) == "2×3 table"  # noqa: RUF001

    def test_error_shows_message(self) -> None:
        assert format_value(Error("Division by zero")) == "Division by zero"

    def test_locale_passed_through(self) -> None:
        assert format_value(Scalar(1234.5678), locale="de") == "1.234,57"


class TestFormatValueFull:
    """Tests for full-precision formatting."""

    def test_scalar_full_precision(self) -> None:
        assert format_value_full(Scalar(0.1)) == "0.10000000000000001"

    def test_infinity_spelled_out(self) -> None:
        assert format_value_full(Scalar(math.inf)) == "+Infinity"
        assert format_value_full(Scalar(-math.inf)) == "-Infinity"

    def test_vector_lists_every_element(self) -> None:
        assert format_value_full(Vector((1.0, 2.0, 3.0, 4.0, 5.0))) == "[1, 2, 3, 4, 5]"

    def test_table_tab_separated(self) -> None:
        table = Table(("a", "b"), ((1.0, 2.0), (3.0, 4.5)))
        assert format_value_full(table) == "a\tb\n1\t2\n3\t4.5"

    def test_error_prefixed(self) -> None:
        assert format_value_full(Error("boom")) == "Error: boom"


class TestFormatValueJson:
    """Tests for JSON export formatting."""

    def test_scalar(self) -> None:
        assert json.loads(format_value_json(Scalar(1.5))) == 1.5

    def test_non_finite_scalar_as_string(self) -> None:
        assert json.loads(format_value_json(Scalar(math.nan))) == "NaN"
        assert json.loads(format_value_json(Scalar(-math.inf))) == "-Infinity"

    def test_non_finite_vector_element_as_null(self) -> None:
        assert json.loads(format_value_json(Vector((1.0, math.inf)))) == [1.0, None]

    def test_table(self) -> None:
        table = Table(("a",), ((1.0,), (2.0,)))
        text = format_value_json(table)
        assert "\n" in text
        assert json.loads(text) == {"columns": ["a"], "rows": [[1.0], [2.0]]}

    def test_error(self) -> None:
        assert json.loads(format_value_json(Error("bad"))) == {"error": "bad"}

    def test_missing_is_null(self) -> None:
        assert to_jsonable(None) is None
        assert format_value_json(None) == "null"
