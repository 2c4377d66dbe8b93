"""Text formatting for values.

Three renderings are provided:

- :func:`format_value`: compact, for on-screen display. Locale-aware when a
  locale tag is given, otherwise locale-neutral.
- :func:`format_value_full`: full precision, for clipboard and detail views.
- :func:`format_value_json`: JSON, for machine export.

Machine exports (CSV, JSON, TOML) must never pass a locale.
"""

import json
import logging
import math
from decimal import Decimal
from typing import assert_never

from babel.core import UnknownLocaleError
from babel.numbers import format_decimal

from ._value import Error, Scalar, Table, Value, Vector

logger = logging.getLogger(__name__)

MISSING = "—"
"""Placeholder shown for a node without a value (unreachable or not evaluated)."""

_SIGNIFICANT_DIGITS = 6
_EXPONENT_DIGITS = 4
_LARGE = 1e6
_SMALL = 1e-3
_INLINE_VECTOR_LIMIT = 4


def _to_exponential(n: float, digits: int) -> str:
    """Render ``n`` as ``d.dddde+x`` without zero-padding the exponent."""
    mantissa, exponent = f"{n:.{digits}e}".split("e")
    exp = int(exponent)
    sign = "+" if exp >= 0 else "-"
    return f"{mantissa}e{sign}{abs(exp)}"


def _plain_number(n: float) -> str:
    """Render a number the way it reads in a list: integers without ``.0``."""
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "Infinity" if n > 0 else "-Infinity"
    if n.is_integer() and abs(n) < 1e21:  # noqa: PLR2004
        return str(int(n))
    return repr(n)


def _format_localized(n: float, locale: str) -> str | None:
    try:
        return format_decimal(Decimal(f"{n:.{_SIGNIFICANT_DIGITS}g}"), locale=locale, decimal_quantization=False)
    except (UnknownLocaleError, ValueError):
        logger.debug("Unknown locale %r, falling back to locale-neutral formatting", locale)
        return None


def format_scalar(n: float, locale: str | None = None) -> str:
    """Format a single number for compact display.

    Args:
        n: The number to format.
        locale: Optional BCP 47 / CLDR locale tag (e.g. ``"de"``, ``"fr_FR"``).
            Finite numbers in the plain range then use that locale's decimal
            separator and grouping. Scientific notation stays locale-neutral.

    Returns:
        The formatted number.

    """
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "+∞" if n > 0 else "−∞"
    magnitude = abs(n)
    if magnitude == 0:
        return "0"
    if magnitude >= _LARGE or magnitude < _SMALL:
        return _to_exponential(n, _EXPONENT_DIGITS)
    if locale:
        localized = _format_localized(n, locale)
        if localized is not None:
            return localized
    # Rounding can carry into the next decade (999999.7 -> 1e+06); re-read it as a plain number.
    return _plain_number(float(f"{n:.{_SIGNIFICANT_DIGITS}g}"))


def format_value(value: Value | None, locale: str | None = None) -> str:
    """Format a value for display in nodes and inspectors.

    Args:
        value: The value to format. None means the node has no value.
        locale: Optional locale tag for on-screen display. Omit it for
            locale-neutral output.

    Returns:
        A short, single-line string.

    Example:
        >>> format_value(Scalar(1234.5678))
        '1234.57'
        >>> format_value(Scalar(1234.5678), locale="de")
        '1.234,57'
        >>> format_value(Vector((1.0, 2.0, 3.0, 4.0, 5.0)))
        '[5 items]'

    """
    if value is None:
        return MISSING
    match value:
        case Scalar(value=n):
            return format_scalar(n, locale)
        case Vector(values=values):
            if not values:
                return "[empty]"
            if len(values) <= _INLINE_VECTOR_LIMIT:
                return "[" + ", ".join(_plain_number(n) for n in values) + "]"
            return f"[{len(values)} items]"
        case Table():
            n_rows, n_columns = value.shape
            return f"{n_rows}×{n_columns} table"
        case Error(message=message):
            return message
        case _:
            assert_never(value)


def format_value_full(value: Value | None) -> str:
    """Format a value at full precision for clipboard or detailed views."""
    if value is None:
        return MISSING
    match value:
        case Scalar(value=n):
            if math.isnan(n):
                return "NaN"
            if math.isinf(n):
                return "+Infinity" if n > 0 else "-Infinity"
            return f"{n:.17g}"
        case Vector(values=values):
            return "[" + ", ".join(_plain_number(n) for n in values) + "]"
        case Table(columns=columns, rows=rows):
            header = "\t".join(columns)
            body = "\n".join("\t".join(_plain_number(n) for n in row) for row in rows)
            return f"{header}\n{body}"
        case Error(message=message):
            return f"Error: {message}"
        case _:
            assert_never(value)


def _json_number(n: float) -> float | str | None:
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "Infinity" if n > 0 else "-Infinity"
    return n


def _json_element(n: float) -> float | None:
    # Non-finite numbers inside arrays have no JSON spelling.
    return n if math.isfinite(n) else None


def to_jsonable(value: Value | None) -> object:
    """Convert a value to plain JSON-compatible Python data.

    Scalars become numbers (non-finite ones become strings), vectors become
    lists, tables become ``{"columns": ..., "rows": ...}`` and errors become
    ``{"error": message}``.
    """
    if value is None:
        return None
    match value:
        case Scalar(value=n):
            return _json_number(n)
        case Vector(values=values):
            return [_json_element(n) for n in values]
        case Table(columns=columns, rows=rows):
            return {"columns": list(columns), "rows": [[_json_element(n) for n in row] for row in rows]}
        case Error(message=message):
            return {"error": message}
        case _:
            assert_never(value)


def format_value_json(value: Value | None) -> str:
    """Format a value as JSON for export."""
    data = to_jsonable(value)
    indent = 2 if isinstance(value, Table) else None
    return json.dumps(data, indent=indent, allow_nan=False)
